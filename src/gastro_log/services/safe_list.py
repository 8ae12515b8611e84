"""Safe-list management and sign-in merge."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

from gastro_log.domain import safe_list as rules
from gastro_log.domain.models import Identity
from gastro_log.services.sync import TokenProvider

logger = logging.getLogger(__name__)

SafeListObserver = Callable[[tuple[str, ...]], None]


class LocalSafeListStore(Protocol):
    """Durable on-device storage for the safe-list."""

    def load_safe_list(self) -> list[str]:
        """Return the stored list, or an empty list when nothing usable is stored."""

    def save_safe_list(self, items: list[str]) -> None:
        """Replace the stored list."""


class RemoteSafeListStore(Protocol):
    """Cloud storage for the safe-list (full replace)."""

    async def get_safe_list(self, token: str) -> list[str]:
        """Return the user's safe-list."""

    async def save_safe_list(self, token: str, items: list[str]) -> None:
        """Replace the user's safe-list."""


@dataclass
class SafeListService:
    """Owns the safe-list and applies the substring matching policy."""

    local_store: LocalSafeListStore
    remote_store: RemoteSafeListStore
    token_provider: TokenProvider
    _items: list[str] = field(default_factory=list, init=False)
    _identity: Identity | None = field(default=None, init=False)
    _merged_users: set[str] = field(default_factory=set, init=False)
    _observers: list[SafeListObserver] = field(default_factory=list, init=False)

    def __post_init__(self) -> None:
        self._items = self.local_store.load_safe_list()

    @property
    def items(self) -> tuple[str, ...]:
        """Current safe-list entries."""
        return tuple(self._items)

    def subscribe(self, observer: SafeListObserver) -> Callable[[], None]:
        """Register an observer and return a callable that removes it."""
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def is_in_safe_list(self, ingredient: str) -> bool:
        """Return True when a safe-list entry overlaps the ingredient."""
        return rules.is_in_safe_list(self._items, ingredient)

    def filter_ingredients(self, ingredients: list[str]) -> list[str]:
        """Return ingredients not covered by the safe-list."""
        return rules.filter_ingredients(self._items, ingredients)

    async def add_item(self, item: str) -> bool:
        """Add an entry; returns False for blanks and exact duplicates."""
        entry = rules.normalize_entry(item)
        if not entry or entry in self._items:
            return False
        self._replace([*self._items, entry])
        await self._push()
        return True

    async def remove_item(self, item: str) -> bool:
        """Remove an entry by exact match; returns False when absent."""
        if item not in self._items:
            return False
        self._replace([entry for entry in self._items if entry != item])
        await self._push()
        return True

    async def set_identity(self, identity: Identity | None) -> None:
        """Merge with the cloud list the first time a user signs in."""
        self._identity = identity
        if identity is None or identity.user_id in self._merged_users:
            return
        try:
            token = await self.token_provider.get_token()
            if token is None:
                logger.info("No auth token; skipping safe-list merge")
                return
            remote = await self.remote_store.get_safe_list(token)
            if self._identity != identity:
                return
            self._merged_users.add(identity.user_id)
            merged = rules.merge_safe_lists(remote, self._items)
            self._replace(merged)
            if len(merged) != len(remote):
                await self.remote_store.save_safe_list(token, merged)
        except Exception:
            logger.exception("Failed to merge safe-list for %s", identity.user_id)

    async def _push(self) -> None:
        if self._identity is None:
            return
        try:
            token = await self.token_provider.get_token()
            if token is None:
                logger.info("No auth token; safe-list kept locally")
                return
            await self.remote_store.save_safe_list(token, list(self._items))
        except Exception:
            logger.exception("Failed to save safe-list to the cloud")

    def _replace(self, items: list[str]) -> None:
        self._items = items
        self.local_store.save_safe_list(items)
        snapshot = tuple(items)
        for observer in list(self._observers):
            try:
                observer(snapshot)
            except Exception:
                logger.exception("Safe-list observer raised while handling an update")
