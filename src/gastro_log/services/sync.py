"""Offline-first synchronization of food logs between the device and the cloud.

The engine owns the in-memory log collection. Every mutation is written to the
local store first and then pushed to the cloud when a user is signed in.
Records carry a ``synced`` flag that flips to ``True`` only after the cloud
accepted them; ``False`` records are re-sent by the next reconciliation.

Reconciliation runs at most once per identity. The cloud is the source of
truth once pending local records have been uploaded. Two devices editing the
same record offline resolve as "last upsert wins".
"""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

from gastro_log.domain.logs import LifeData, LogRecord, new_log_record
from gastro_log.domain.models import Identity, identity_key

logger = logging.getLogger(__name__)

LogsObserver = Callable[[tuple[LogRecord, ...]], None]


class LocalLogStore(Protocol):
    """Durable on-device storage for the log collection."""

    def load_logs(self) -> list[LogRecord]:
        """Return stored logs, or an empty list when nothing usable is stored."""

    def save_logs(self, records: list[LogRecord]) -> None:
        """Replace the stored collection."""


class RemoteLogStore(Protocol):
    """Cloud storage for logs, keyed by record id."""

    async def get_logs(self, token: str) -> list[LogRecord]:
        """Return every log stored for the user."""

    async def save_logs(self, token: str, records: list[LogRecord]) -> int:
        """Upsert records by id and return the number written."""

    async def delete_log(self, token: str, log_id: str) -> None:
        """Delete a single log."""


class TokenProvider(Protocol):
    """Source of bearer tokens for the signed-in user."""

    async def get_token(self) -> str | None:
        """Return a usable token, or None when the user cannot be authenticated."""


@dataclass(frozen=True)
class RetryPolicy:
    """What happens after a reconciliation attempt fails.

    With ``retry_failed`` off the identity is treated as reconciled and the
    last local collection stays on screen. With it on, the next trigger
    retries once an exponential backoff interval has passed.
    """

    retry_failed: bool = False
    base_delay_seconds: float = 30.0
    max_delay_seconds: float = 900.0

    def delay_for(self, failures: int) -> float:
        """Return the wait before the next attempt after ``failures`` failures."""
        if failures <= 0:
            return 0.0
        return min(
            self.base_delay_seconds * 2 ** (failures - 1), self.max_delay_seconds
        )


@dataclass
class SyncEngine:
    """Owns the log collection and keeps it in step with the cloud."""

    local_store: LocalLogStore
    remote_store: RemoteLogStore
    token_provider: TokenProvider
    retry_policy: RetryPolicy = field(default_factory=RetryPolicy)
    clock: Callable[[], float] = time.monotonic
    _identity: Identity | None = field(default=None, init=False)
    _records: tuple[LogRecord, ...] = field(default=(), init=False)
    _observers: list[LogsObserver] = field(default_factory=list, init=False)
    _generation: int = field(default=0, init=False)
    _completed: bool = field(default=False, init=False)
    _in_flight: bool = field(default=False, init=False)
    _failures: int = field(default=0, init=False)
    _retry_at: float = field(default=0.0, init=False)

    @property
    def records(self) -> tuple[LogRecord, ...]:
        """Current effective collection, newest first."""
        return self._records

    @property
    def identity(self) -> Identity | None:
        """The identity the collection belongs to."""
        return self._identity

    @property
    def is_reconciled(self) -> bool:
        """True once reconciliation finished for the current identity."""
        return self._completed

    @property
    def is_reconciling(self) -> bool:
        """True while a reconciliation pass is outstanding."""
        return self._in_flight

    def subscribe(self, observer: LogsObserver) -> Callable[[], None]:
        """Register an observer and return a callable that removes it."""
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def logs_by_date(self, date: str) -> list[LogRecord]:
        """Return logs recorded for a calendar date (YYYY-MM-DD)."""
        return [record for record in self._records if record.date == date]

    async def set_identity(self, identity: Identity | None) -> None:
        """Switch to a new identity and reconcile for it."""
        if identity_key(identity) != identity_key(self._identity):
            logger.info(
                "Identity changed to %s; resetting log sync",
                identity_key(identity) or "local-only",
            )
            self._identity = identity
            self._generation += 1
            self._completed = False
            self._in_flight = False
            self._failures = 0
            self._retry_at = 0.0
            self._publish(())
        await self.reconcile()

    async def reconcile(self) -> None:
        """Merge the local collection with the cloud for the current identity.

        Calls made while a pass is running, or after one completed for the
        same identity, return immediately.
        """
        if self._completed or self._in_flight:
            return
        if self._failures and self.clock() < self._retry_at:
            return
        generation = self._generation
        self._in_flight = True
        try:
            await self._reconcile(generation, self._identity)
        finally:
            if generation == self._generation:
                self._in_flight = False

    async def add_log(  # noqa: PLR0913
        self,
        *,
        date: str,
        memo: str | None = None,
        image: str | None = None,
        ingredients: list[str] | None = None,
        life_data: LifeData | None = None,
    ) -> LogRecord:
        """Record a meal locally and upload it when signed in."""
        record = new_log_record(
            date=date,
            memo=memo,
            image=image,
            ingredients=ingredients,
            life_data=life_data,
        )
        updated = (record, *self._records)
        self._publish(updated)
        self.local_store.save_logs(list(updated))
        await self._push_pending()
        return record

    async def delete_log(self, log_id: str) -> None:
        """Remove a log everywhere it is stored.

        The local removal happens before any network call and is never rolled
        back; a failed cloud delete is only logged.
        """
        updated = tuple(record for record in self._records if record.id != log_id)
        self._publish(updated)
        self.local_store.save_logs(list(updated))
        if self._identity is None:
            return
        try:
            token = await self.token_provider.get_token()
            if token is None:
                logger.info("No auth token; skipping cloud delete for %s", log_id)
                return
            await self.remote_store.delete_log(token, log_id)
        except Exception:
            logger.exception("Failed to delete log %s from the cloud", log_id)

    async def _reconcile(self, generation: int, identity: Identity | None) -> None:
        local_records = self.local_store.load_logs()
        baseline = {record.id for record in local_records}
        if identity is None:
            self._publish(self._with_pending(tuple(local_records), baseline))
            self._completed = True
            return

        try:
            token = await self.token_provider.get_token()
            if token is None:
                if generation == self._generation:
                    logger.info(
                        "No auth token for %s; showing local logs", identity.user_id
                    )
                    self._publish(self._with_pending(tuple(local_records), baseline))
                return
            remote_records = await self.remote_store.get_logs(token)
            unsynced = [record for record in local_records if record.synced is False]
            if unsynced:
                logger.info("Uploading %d unsynced logs", len(unsynced))
                await self.remote_store.save_logs(token, unsynced)
                remote_records = await self.remote_store.get_logs(token)
        except Exception:
            if generation != self._generation:
                return
            logger.exception("Failed to sync logs for %s", identity.user_id)
            self._publish(self._with_pending(tuple(local_records), baseline))
            self._record_failure()
            return

        if generation != self._generation:
            logger.info("Discarding log sync result for superseded identity")
            return
        effective = tuple(record.with_synced(True) for record in remote_records)
        effective = self._with_pending(effective, baseline)
        self.local_store.save_logs(list(effective))
        self._publish(effective)
        self._completed = True
        self._failures = 0

    async def _push_pending(self) -> None:
        if self._identity is None:
            return
        generation = self._generation
        pending = [record for record in self._records if record.synced is not True]
        if not pending:
            return
        try:
            token = await self.token_provider.get_token()
            if token is None:
                logger.info("No auth token; leaving %d logs unsynced", len(pending))
                return
            await self.remote_store.save_logs(token, pending)
        except Exception:
            logger.exception("Failed to save %d logs to the cloud", len(pending))
            return
        if generation != self._generation:
            return
        pushed_ids = {record.id for record in pending}
        synced = tuple(
            record.with_synced(True) if record.id in pushed_ids else record
            for record in self._records
        )
        self._publish(synced)
        self.local_store.save_logs(list(synced))

    def _with_pending(
        self, base: tuple[LogRecord, ...], baseline: set[str]
    ) -> tuple[LogRecord, ...]:
        # Logs added while a pass was awaiting the cloud must not disappear,
        # even when add_log already pushed them and flipped them to synced.
        known = {record.id for record in base}
        pending = tuple(
            record
            for record in self._records
            if record.id not in known
            and (record.synced is False or record.id not in baseline)
        )
        return (*pending, *base)

    def _record_failure(self) -> None:
        if not self.retry_policy.retry_failed:
            self._completed = True
            return
        self._failures += 1
        self._retry_at = self.clock() + self.retry_policy.delay_for(self._failures)

    def _publish(self, records: tuple[LogRecord, ...]) -> None:
        self._records = records
        for observer in list(self._observers):
            try:
                observer(records)
            except Exception:
                logger.exception("Log observer raised while handling an update")
