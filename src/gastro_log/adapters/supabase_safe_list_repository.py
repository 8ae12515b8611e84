"""Supabase repository for cloud safe-lists."""

from dataclasses import dataclass

from supabase import Client

from gastro_log.services.cloud import SafeListRepository


@dataclass
class SupabaseSafeListRepository(SafeListRepository):
    """Supabase implementation for safe-list rows (one row per entry)."""

    client: Client

    def list_items(self, user_id: str) -> list[str]:
        """Return the user's entries in creation order."""
        response = (
            self.client.table("safe_list")
            .select("item")
            .eq("user_id", user_id)
            .order("created_at")
            .execute()
        )
        return [str(row["item"]) for row in response.data or [] if row.get("item")]

    def replace_items(self, user_id: str, items: list[str]) -> None:
        """Make the user's rows match ``items``.

        New entries are inserted before stale ones are deleted, so a failure
        part way leaves a superset of the old list rather than an empty one.
        Entries that already exist keep their rows and creation order.
        """
        existing = self.list_items(user_id)
        missing = [item for item in items if item not in existing]
        if missing:
            self.client.table("safe_list").insert(
                [{"user_id": user_id, "item": item} for item in missing]
            ).execute()
        stale = [item for item in existing if item not in items]
        if stale:
            self.client.table("safe_list").delete().eq("user_id", user_id).in_(
                "item", stale
            ).execute()
