"""Request models for the cloud API."""

from pydantic import BaseModel, Field

from gastro_log.domain.logs import LogRecord


class SaveLogsRequest(BaseModel):
    """Body for upserting logs."""

    logs: list[LogRecord]


class SafeListRequest(BaseModel):
    """Body for replacing the safe-list."""

    items: list[str] = Field(default_factory=list)


class MedicationsRequest(BaseModel):
    """Body for recording medication names."""

    medications: list[str]


class AnalyzeRequest(BaseModel):
    """Body for classifying a meal."""

    image: str | None = None
    memo: str = ""
    model: str | None = None
