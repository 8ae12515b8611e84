"""Calendar and statistics projections over the log collection."""

from dataclasses import dataclass

from gastro_log.domain.logs import LogRecord
from gastro_log.domain.stats import IngredientCount, MonthSummary
from gastro_log.services.safe_list import SafeListService

DECEMBER = 12
TOP_INGREDIENTS = 5


@dataclass
class LogStatsService:
    """Computes views of the logs with safe-list entries filtered out."""

    safe_list_service: SafeListService

    def ingredient_ranking(
        self,
        records: tuple[LogRecord, ...] | list[LogRecord],
        limit: int | None = TOP_INGREDIENTS,
    ) -> list[IngredientCount]:
        """Count flagged ingredients, most frequent first.

        Ties keep the order in which ingredients first appear. Only the top
        ``limit`` entries are returned; pass None for the full ranking.
        """
        counts: dict[str, int] = {}
        for record in records:
            for name in self.safe_list_service.filter_ingredients(record.ingredients):
                counts[name] = counts.get(name, 0) + 1
        ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
        if limit is not None:
            ranked = ranked[:limit]
        return [IngredientCount(name=name, count=count) for name, count in ranked]

    def month_summary(
        self, records: tuple[LogRecord, ...] | list[LogRecord], year: int, month: int
    ) -> MonthSummary:
        """Return log and flagged counts for a month."""
        month_logs = logs_for_month(records, year, month)
        flagged = [
            record
            for record in month_logs
            if self.safe_list_service.filter_ingredients(record.ingredients)
        ]
        return MonthSummary(
            year=year,
            month=month,
            log_count=len(month_logs),
            days_logged=len({record.date for record in month_logs}),
            flagged_log_count=len(flagged),
        )


def month_prefix(year: int, month: int) -> str:
    """Return the YYYY-MM prefix for a month."""
    if not 1 <= month <= DECEMBER:
        raise ValueError(f"Month out of range: {month}")
    return f"{year:04d}-{month:02d}"


def logs_for_month(
    records: tuple[LogRecord, ...] | list[LogRecord], year: int, month: int
) -> list[LogRecord]:
    """Return logs whose date falls in the given month."""
    prefix = month_prefix(year, month)
    return [record for record in records if record.date.startswith(prefix)]


def dates_with_logs(records: tuple[LogRecord, ...] | list[LogRecord]) -> set[str]:
    """Return the calendar dates that have at least one log."""
    return {record.date for record in records}
