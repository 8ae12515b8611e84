"""Application configuration."""

import os
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    api_base_url: str = "http://localhost:8787"
    access_token: str | None = None
    storage_dir: Path = Path("~/.gastro_log")
    request_timeout: float = 15.0
    sync_retry_failed_reconcile: bool = False
    sync_retry_base_seconds: float = 30.0
    sync_retry_max_seconds: float = 900.0
    analysis_model: str | None = None
    openai_api_key: str | None = None
    openai_model: str = "gpt-5.2"
    openai_reasoning_effort: str = "low"
    openai_store: bool = False
    supabase_url: str | None = None
    supabase_service_key: str | None = None
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def normalize_base_url(raw: str) -> str:
    """Strip whitespace and trailing slashes from an API base URL."""
    cleaned = raw.strip().rstrip("/")
    if not cleaned:
        raise ValueError("API base URL must not be empty")
    return cleaned
