"""Shared test fixtures."""

import asyncio
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from gastro_log.config import Settings
from gastro_log.containers import ServerContainer
from gastro_log.domain.logs import LogRecord
from gastro_log.domain.models import Identity
from gastro_log.services.classification import IngredientClassifier
from gastro_log.services.cloud import (
    CloudStoreService,
    LogRepository,
    MedicationRepository,
    SafeListRepository,
    UserResolver,
)
from gastro_log.services.safe_list import (
    LocalSafeListStore,
    RemoteSafeListStore,
    SafeListService,
)
from gastro_log.services.sync import (
    LocalLogStore,
    RemoteLogStore,
    SyncEngine,
    TokenProvider,
)


@dataclass
class InMemoryLocalStore(LocalLogStore, LocalSafeListStore):
    """Local store that keeps serialized payloads like the file store does."""

    log_payload: list[dict[str, object]] = field(default_factory=list)
    safe_list: list[str] = field(default_factory=list)
    save_count: int = 0

    def load_logs(self) -> list[LogRecord]:
        return [LogRecord.model_validate(item) for item in self.log_payload]

    def save_logs(self, records: list[LogRecord]) -> None:
        self.save_count += 1
        self.log_payload = [record.to_storage() for record in records]

    def load_safe_list(self) -> list[str]:
        return list(self.safe_list)

    def save_safe_list(self, items: list[str]) -> None:
        self.safe_list = list(items)

    def seed(self, *records: LogRecord) -> None:
        self.log_payload = [record.to_storage() for record in records]


@dataclass
class FakeRemoteStore(RemoteLogStore, RemoteSafeListStore):
    """Cloud store with upsert-by-id semantics and a call log."""

    logs: dict[str, LogRecord] = field(default_factory=dict)
    safe_list: list[str] = field(default_factory=list)
    calls: list[tuple[str, object]] = field(default_factory=list)
    fail_on: set[str] = field(default_factory=set)
    gate: asyncio.Event | None = None
    gated_operations: set[str] | None = None
    on_delete: list[object] = field(default_factory=list)

    async def _enter(self, operation: str, payload: object = None) -> None:
        self.calls.append((operation, payload))
        if self.gate is not None and (
            self.gated_operations is None or operation in self.gated_operations
        ):
            await self.gate.wait()
        if operation in self.fail_on:
            raise RuntimeError(f"{operation} failed")

    async def get_logs(self, token: str) -> list[LogRecord]:
        # Reads reflect the cloud at request time, like a real round trip.
        snapshot = list(self.logs.values())
        await self._enter("get_logs")
        return snapshot

    async def save_logs(self, token: str, records: list[LogRecord]) -> int:
        await self._enter("save_logs", [record.id for record in records])
        for record in records:
            self.logs[record.id] = record.model_copy(update={"synced": None})
        return len(records)

    async def delete_log(self, token: str, log_id: str) -> None:
        await self._enter("delete_log", log_id)
        self.logs.pop(log_id, None)

    async def get_safe_list(self, token: str) -> list[str]:
        snapshot = list(self.safe_list)
        await self._enter("get_safe_list")
        return snapshot

    async def save_safe_list(self, token: str, items: list[str]) -> None:
        await self._enter("save_safe_list", list(items))
        self.safe_list = list(items)

    def operations(self) -> list[str]:
        return [operation for operation, _ in self.calls]


@dataclass
class FakeTokenProvider(TokenProvider):
    """Token provider returning a fixed token."""

    token: str | None = "test-token"

    async def get_token(self) -> str | None:
        return self.token


@dataclass
class FakeClassifier(IngredientClassifier):
    """Classifier returning a fixed list or raising."""

    ingredients: list[str] = field(default_factory=lambda: ["乳糖"])
    error: Exception | None = None
    calls: list[dict[str, object]] = field(default_factory=list)

    async def classify(
        self, *, image: str | None, memo: str | None, model: str | None
    ) -> list[str]:
        self.calls.append({"image": image, "memo": memo, "model": model})
        if self.error is not None:
            raise self.error
        return list(self.ingredients)


@dataclass
class InMemoryLogRepository(LogRepository):
    """Cloud log repository keyed by (user, id)."""

    rows: dict[tuple[str, str], LogRecord] = field(default_factory=dict)

    def list_logs(self, user_id: str, limit: int) -> list[LogRecord]:
        records = [record for (owner, _), record in self.rows.items() if owner == user_id]
        records.sort(key=lambda record: record.created_at or "", reverse=True)
        return records[:limit]

    def upsert_logs(self, user_id: str, records: list[LogRecord]) -> int:
        for record in records:
            self.rows[(user_id, record.id)] = record
        return len(records)

    def delete_log(self, user_id: str, log_id: str) -> None:
        self.rows.pop((user_id, log_id), None)


@dataclass
class InMemorySafeListRepository(SafeListRepository):
    """Cloud safe-list repository."""

    items: dict[str, list[str]] = field(default_factory=dict)

    def list_items(self, user_id: str) -> list[str]:
        return list(self.items.get(user_id, []))

    def replace_items(self, user_id: str, items: list[str]) -> None:
        self.items[user_id] = list(items)


@dataclass
class InMemoryMedicationRepository(MedicationRepository):
    """Medication history with per-user unique names."""

    names: dict[str, list[str]] = field(default_factory=dict)

    def list_names(self, user_id: str) -> list[str]:
        return list(self.names.get(user_id, []))

    def add_names(self, user_id: str, names: list[str]) -> None:
        stored = self.names.setdefault(user_id, [])
        for name in names:
            if name not in stored:
                stored.append(name)


@dataclass
class FakeUserResolver(UserResolver):
    """Maps known tokens to identities."""

    tokens: dict[str, Identity] = field(
        default_factory=lambda: {"good-token": Identity(user_id="user-1")}
    )

    def resolve(self, token: str) -> Identity | None:
        return self.tokens.get(token)


def make_record(
    record_id: str,
    date: str = "2024-05-01",
    synced: bool | None = None,
    **extra: object,
) -> LogRecord:
    """Build a log record for tests."""
    return LogRecord(
        id=record_id,
        date=date,
        synced=synced,
        created_at=f"{date}T12:00:00+00:00",
        **extra,
    )


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        api_base_url="https://api.example.test/",
        storage_dir=tmp_path / "store",
        openai_api_key="openai-key",
        supabase_url="https://example.supabase.co",
        supabase_service_key="service-key",
    )


@pytest.fixture
def local_store() -> InMemoryLocalStore:
    return InMemoryLocalStore()


@pytest.fixture
def remote_store() -> FakeRemoteStore:
    return FakeRemoteStore()


@pytest.fixture
def token_provider() -> FakeTokenProvider:
    return FakeTokenProvider()


@pytest.fixture
def sync_engine(
    local_store: InMemoryLocalStore,
    remote_store: FakeRemoteStore,
    token_provider: FakeTokenProvider,
) -> SyncEngine:
    return SyncEngine(
        local_store=local_store,
        remote_store=remote_store,
        token_provider=token_provider,
    )


@pytest.fixture
def safe_list_service(
    local_store: InMemoryLocalStore,
    remote_store: FakeRemoteStore,
    token_provider: FakeTokenProvider,
) -> SafeListService:
    return SafeListService(
        local_store=local_store,
        remote_store=remote_store,
        token_provider=token_provider,
    )


@pytest.fixture
def classifier() -> FakeClassifier:
    return FakeClassifier()


@pytest.fixture
def log_repository() -> InMemoryLogRepository:
    return InMemoryLogRepository()


@pytest.fixture
def server_container(
    settings: Settings,
    classifier: FakeClassifier,
    log_repository: InMemoryLogRepository,
) -> ServerContainer:
    async def close_resources() -> None:
        return None

    return ServerContainer(
        settings=settings,
        user_resolver=FakeUserResolver(),
        cloud_store_service=CloudStoreService(
            log_repository=log_repository,
            safe_list_repository=InMemorySafeListRepository(),
            medication_repository=InMemoryMedicationRepository(),
        ),
        classifier=classifier,
        close_resources=close_resources,
    )
