"""Supabase repository for medication history."""

from dataclasses import dataclass

from supabase import Client

from gastro_log.services.cloud import MedicationRepository


@dataclass
class SupabaseMedicationRepository(MedicationRepository):
    """Supabase implementation for medication names (unique per user)."""

    client: Client

    def list_names(self, user_id: str) -> list[str]:
        response = (
            self.client.table("medication_history")
            .select("name")
            .eq("user_id", user_id)
            .execute()
        )
        return [str(row["name"]) for row in response.data or [] if row.get("name")]

    def add_names(self, user_id: str, names: list[str]) -> None:
        if not names:
            return
        self.client.table("medication_history").upsert(
            [{"user_id": user_id, "name": name} for name in names],
            on_conflict="user_id,name",
            ignore_duplicates=True,
        ).execute()
