"""Domain models for food logs."""

from datetime import UTC, datetime
from uuid import uuid4

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class LifeData(BaseModel):
    """Lifestyle notes attached to a log (sleep, stress, exercise)."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="allow", frozen=True
    )

    sleep_time: str | None = None
    sleep_quality: str | None = None
    medication: str | None = None
    exercise: str | None = None
    steps: str | None = None
    stress: int | None = None


class LogRecord(BaseModel):
    """A single captured meal.

    ``synced`` only exists on the client: ``True`` once the cloud confirmed
    the write, ``False`` while an upload is pending and ``None`` for legacy
    entries that predate the flag.
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore", frozen=True
    )

    id: str
    date: str
    image: str | None = None
    memo: str | None = None
    ingredients: list[str] = Field(default_factory=list)
    life_data: LifeData | None = Field(
        default=None,
        alias="lifeData",
        validation_alias=AliasChoices("lifeData", "life", "life_data"),
    )
    created_at: str | None = None
    updated_at: str | None = None
    synced: bool | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: object) -> object:
        if isinstance(value, int):
            return str(value)
        return value

    @field_validator("ingredients", mode="before")
    @classmethod
    def _default_ingredients(cls, value: object) -> object:
        return [] if value is None else value

    def with_synced(self, synced: bool) -> "LogRecord":
        """Return a copy with the sync flag replaced."""
        return self.model_copy(update={"synced": synced})

    def to_storage(self) -> dict[str, object]:
        """Serialize for the local store, always without the image."""
        return self.model_dump(by_alias=True, exclude_none=True, exclude={"image"})

    def to_wire(self) -> dict[str, object]:
        """Serialize for the cloud API; the sync flag stays local."""
        return self.model_dump(by_alias=True, exclude_none=True, exclude={"synced"})


def new_log_record(  # noqa: PLR0913
    *,
    date: str,
    memo: str | None = None,
    image: str | None = None,
    ingredients: list[str] | None = None,
    life_data: LifeData | None = None,
    now: datetime | None = None,
) -> LogRecord:
    """Create an unsynced record with a fresh id and creation timestamp."""
    stamp = (now or datetime.now(tz=UTC)).isoformat()
    return LogRecord(
        id=str(uuid4()),
        date=date,
        image=image,
        memo=memo,
        ingredients=list(ingredients or []),
        life_data=life_data,
        created_at=stamp,
        updated_at=stamp,
        synced=False,
    )
