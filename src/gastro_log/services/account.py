"""Sign-in state for the client."""

import logging
from dataclasses import dataclass

from gastro_log.domain.models import Identity
from gastro_log.services.safe_list import SafeListService
from gastro_log.services.sync import SyncEngine

logger = logging.getLogger(__name__)


@dataclass
class AccountService:
    """Propagates identity changes to the stores that depend on them."""

    sync_engine: SyncEngine
    safe_list_service: SafeListService

    @property
    def identity(self) -> Identity | None:
        """The signed-in user, if any."""
        return self.sync_engine.identity

    async def mount(self) -> None:
        """Load data for whoever is signed in when the client starts."""
        await self.switch(self.sync_engine.identity)

    async def sign_in(self, identity: Identity) -> None:
        """Switch to a signed-in user."""
        logger.info("Signing in %s", identity.user_id)
        await self.switch(identity)

    async def sign_out(self) -> None:
        """Return to local-only mode."""
        logger.info("Signing out")
        await self.switch(None)

    async def switch(self, identity: Identity | None) -> None:
        """Reconcile logs and merge the safe-list for an identity."""
        await self.sync_engine.set_identity(identity)
        await self.safe_list_service.set_identity(identity)
