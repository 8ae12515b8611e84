"""Dependency container wiring for the client and the cloud API."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from gastro_log.adapters.local_store import JsonFileLocalStore
from gastro_log.adapters.openai_classifier import OpenAIIngredientClassifier
from gastro_log.adapters.remote_store_client import (
    HttpxRemoteStoreClient,
    RemoteAnalyzeClassifier,
)
from gastro_log.adapters.supabase_log_repository import SupabaseLogRepository
from gastro_log.adapters.supabase_medication_repository import (
    SupabaseMedicationRepository,
)
from gastro_log.adapters.supabase_safe_list_repository import (
    SupabaseSafeListRepository,
)
from gastro_log.adapters.supabase_user_resolver import SupabaseUserResolver
from gastro_log.adapters.token_provider import StaticTokenProvider
from gastro_log.config import Settings
from gastro_log.services.account import AccountService
from gastro_log.services.classification import (
    ClassificationService,
    IngredientClassifier,
)
from gastro_log.services.cloud import CloudStoreService, UserResolver
from gastro_log.services.safe_list import SafeListService
from gastro_log.services.stats import LogStatsService
from gastro_log.services.sync import RetryPolicy, SyncEngine, TokenProvider


@dataclass
class AppContainer:
    """Holds client-side dependencies."""

    settings: Settings
    token_provider: TokenProvider
    sync_engine: SyncEngine
    safe_list_service: SafeListService
    account_service: AccountService
    classification_service: ClassificationService
    stats_service: LogStatsService
    close_resources: Callable[[], Awaitable[None]]


@dataclass
class ServerContainer:
    """Holds cloud API dependencies."""

    settings: Settings
    user_resolver: UserResolver
    cloud_store_service: CloudStoreService
    classifier: IngredientClassifier | None
    close_resources: Callable[[], Awaitable[None]]


def build_container(
    settings: Settings | None = None, token_provider: TokenProvider | None = None
) -> AppContainer:
    """Create the default client container."""
    resolved_settings = settings or Settings()
    resolved_token_provider = token_provider or StaticTokenProvider(
        resolved_settings.access_token
    )
    local_store = JsonFileLocalStore(resolved_settings.storage_dir.expanduser())
    remote_client = HttpxRemoteStoreClient.create(
        resolved_settings.api_base_url, timeout=resolved_settings.request_timeout
    )
    sync_engine = SyncEngine(
        local_store=local_store,
        remote_store=remote_client,
        token_provider=resolved_token_provider,
        retry_policy=RetryPolicy(
            retry_failed=resolved_settings.sync_retry_failed_reconcile,
            base_delay_seconds=resolved_settings.sync_retry_base_seconds,
            max_delay_seconds=resolved_settings.sync_retry_max_seconds,
        ),
    )
    safe_list_service = SafeListService(
        local_store=local_store,
        remote_store=remote_client,
        token_provider=resolved_token_provider,
    )
    classification_service = ClassificationService(
        classifier=RemoteAnalyzeClassifier(remote_client, resolved_token_provider),
        model=resolved_settings.analysis_model,
    )

    async def close_resources() -> None:
        await remote_client.close()

    return AppContainer(
        settings=resolved_settings,
        token_provider=resolved_token_provider,
        sync_engine=sync_engine,
        safe_list_service=safe_list_service,
        account_service=AccountService(sync_engine, safe_list_service),
        classification_service=classification_service,
        stats_service=LogStatsService(safe_list_service),
        close_resources=close_resources,
    )


def build_server_container(settings: Settings | None = None) -> ServerContainer:
    """Create the cloud API container backed by Supabase."""
    resolved_settings = settings or Settings()
    if not resolved_settings.supabase_url or not resolved_settings.supabase_service_key:
        raise ValueError("SUPABASE_URL and SUPABASE_SERVICE_KEY are required")
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    classifier: IngredientClassifier | None = None
    if resolved_settings.openai_api_key:
        classifier = OpenAIIngredientClassifier.create(
            api_key=resolved_settings.openai_api_key,
            model=resolved_settings.openai_model,
            reasoning_effort=resolved_settings.openai_reasoning_effort,
            store=resolved_settings.openai_store,
        )

    async def close_resources() -> None:
        if isinstance(classifier, OpenAIIngredientClassifier):
            await classifier.client.close()

    return ServerContainer(
        settings=resolved_settings,
        user_resolver=SupabaseUserResolver(supabase_client),
        cloud_store_service=CloudStoreService(
            log_repository=SupabaseLogRepository(supabase_client),
            safe_list_repository=SupabaseSafeListRepository(supabase_client),
            medication_repository=SupabaseMedicationRepository(supabase_client),
        ),
        classifier=classifier,
        close_resources=close_resources,
    )
