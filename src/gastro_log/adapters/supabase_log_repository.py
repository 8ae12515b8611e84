"""Supabase repository for cloud food logs."""

from dataclasses import dataclass

from supabase import Client

from gastro_log.domain.logs import LogRecord
from gastro_log.services.cloud import LogRepository


@dataclass
class SupabaseLogRepository(LogRepository):
    """Supabase implementation for food logs."""

    client: Client

    def list_logs(self, user_id: str, limit: int) -> list[LogRecord]:
        """Return a user's logs, newest first."""
        response = (
            self.client.table("food_logs")
            .select("*")
            .eq("user_id", user_id)
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return [LogRecord.model_validate(row) for row in response.data or []]

    def upsert_logs(self, user_id: str, records: list[LogRecord]) -> int:
        """Insert or update logs keyed by id."""
        payload = [_to_row(user_id, record) for record in records]
        response = (
            self.client.table("food_logs")
            .upsert(payload, on_conflict="id", default_to_null=False)
            .execute()
        )
        return len(response.data or [])

    def delete_log(self, user_id: str, log_id: str) -> None:
        """Delete one of the user's logs."""
        self.client.table("food_logs").delete().eq("id", log_id).eq(
            "user_id", user_id
        ).execute()


def _to_row(user_id: str, record: LogRecord) -> dict[str, object]:
    row: dict[str, object] = {
        "id": record.id,
        "user_id": user_id,
        "date": record.date,
        "memo": record.memo,
        "ingredients": list(record.ingredients),
        "created_at": record.created_at,
        "updated_at": record.updated_at,
    }
    if record.image is not None:
        row["image"] = record.image
    if record.life_data is not None:
        row["life"] = record.life_data.model_dump(by_alias=True, exclude_none=True)
    return {key: value for key, value in row.items() if value is not None}
