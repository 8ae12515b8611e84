"""Server-side log, safe-list and medication storage for authenticated users."""

from dataclasses import dataclass
from typing import Protocol

from gastro_log.domain.logs import LogRecord
from gastro_log.domain.models import Identity

MAX_LOGS = 100


class UserResolver(Protocol):
    """Resolves bearer tokens issued by the identity provider."""

    def resolve(self, token: str) -> Identity | None:
        """Return the identity for a token, or None when it is invalid."""


class LogRepository(Protocol):
    """Persistence interface for cloud logs."""

    def list_logs(self, user_id: str, limit: int) -> list[LogRecord]:
        """Return a user's logs, newest first."""

    def upsert_logs(self, user_id: str, records: list[LogRecord]) -> int:
        """Insert or update logs by id and return the number written."""

    def delete_log(self, user_id: str, log_id: str) -> None:
        """Delete one of the user's logs."""


class SafeListRepository(Protocol):
    """Persistence interface for cloud safe-lists."""

    def list_items(self, user_id: str) -> list[str]:
        """Return the user's safe-list."""

    def replace_items(self, user_id: str, items: list[str]) -> None:
        """Replace the user's safe-list."""


class MedicationRepository(Protocol):
    """Persistence interface for the medication names a user has entered."""

    def list_names(self, user_id: str) -> list[str]:
        """Return every medication name recorded for the user."""

    def add_names(self, user_id: str, names: list[str]) -> None:
        """Record names, ignoring ones the user already has."""


@dataclass
class CloudStoreService:
    """Application service behind the cloud API."""

    log_repository: LogRepository
    safe_list_repository: SafeListRepository
    medication_repository: MedicationRepository

    def list_logs(self, user_id: str) -> list[LogRecord]:
        """Return the most recent logs for a user."""
        return self.log_repository.list_logs(user_id, MAX_LOGS)

    def save_logs(self, user_id: str, records: list[LogRecord]) -> int:
        """Upsert logs by id; the sync flag is never stored."""
        cleaned = [record.model_copy(update={"synced": None}) for record in records]
        if not cleaned:
            return 0
        return self.log_repository.upsert_logs(user_id, cleaned)

    def delete_log(self, user_id: str, log_id: str) -> None:
        """Delete a log owned by the user."""
        self.log_repository.delete_log(user_id, log_id)

    def get_safe_list(self, user_id: str) -> list[str]:
        """Return the user's safe-list."""
        return self.safe_list_repository.list_items(user_id)

    def replace_safe_list(self, user_id: str, items: list[str]) -> None:
        """Replace the safe-list, dropping blanks and duplicates."""
        self.safe_list_repository.replace_items(user_id, _unique_entries(items))

    def list_medications(self, user_id: str) -> list[str]:
        """Return the user's medication history."""
        return self.medication_repository.list_names(user_id)

    def record_medications(self, user_id: str, names: list[str]) -> None:
        """Add medication names to the user's history."""
        self.medication_repository.add_names(user_id, _unique_entries(names))


def _unique_entries(items: list[str]) -> list[str]:
    unique: list[str] = []
    for item in items:
        entry = item.strip()
        if entry and entry not in unique:
            unique.append(entry)
    return unique
