"""JSON file storage for logs and the safe-list on this device."""

import json
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path

from pydantic import ValidationError

from gastro_log.domain.logs import LogRecord
from gastro_log.services.safe_list import LocalSafeListStore
from gastro_log.services.sync import LocalLogStore

LOGS_KEY = "food_history"
SAFE_LIST_KEY = "safe_list"

logger = logging.getLogger(__name__)


@dataclass
class JsonFileLocalStore(LocalLogStore, LocalSafeListStore):
    """Stores each key as a JSON document inside one directory.

    Images are never written: every saved log is stripped first.
    """

    directory: Path

    def load_logs(self) -> list[LogRecord]:
        """Return stored logs; malformed data reads as an empty collection."""
        raw = self._read(LOGS_KEY)
        if raw is None:
            return []
        if not isinstance(raw, list):
            logger.warning("Stored logs are not a list; ignoring them")
            return []
        records: list[LogRecord] = []
        for entry in raw:
            try:
                records.append(LogRecord.model_validate(entry))
            except ValidationError:
                logger.warning("Skipping malformed stored log entry")
        if any(record.image for record in records):
            logger.info("Removing embedded images from stored logs")
            self.save_logs(records)
        return records

    def save_logs(self, records: list[LogRecord]) -> None:
        """Replace the stored logs with image-free copies."""
        self._write(LOGS_KEY, [record.to_storage() for record in records])

    def load_safe_list(self) -> list[str]:
        """Return the stored safe-list; malformed data reads as empty."""
        raw = self._read(SAFE_LIST_KEY)
        if raw is None:
            return []
        if not isinstance(raw, list):
            logger.warning("Stored safe-list is not a list; ignoring it")
            return []
        return [item for item in raw if isinstance(item, str)]

    def save_safe_list(self, items: list[str]) -> None:
        """Replace the stored safe-list."""
        self._write(SAFE_LIST_KEY, list(items))

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def _read(self, key: str) -> object | None:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError):
            logger.warning("Could not read %s from local store", key)
            return None

    def _write(self, key: str, payload: object) -> None:
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.directory, suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(payload, handle, ensure_ascii=False)
            os.replace(tmp_name, self._path(key))
        except OSError:
            logger.exception("Failed to write %s to local store", key)
