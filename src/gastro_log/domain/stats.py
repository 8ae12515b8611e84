"""Domain models for log statistics."""

from dataclasses import dataclass


@dataclass(frozen=True)
class IngredientCount:
    """How often a flagged ingredient appeared."""

    name: str
    count: int


@dataclass(frozen=True)
class MonthSummary:
    """Aggregates for one calendar month."""

    year: int
    month: int
    log_count: int
    days_logged: int
    flagged_log_count: int
