"""Resolve identity-provider tokens through Supabase auth."""

import logging
from dataclasses import dataclass

from supabase import AuthError, Client

from gastro_log.domain.models import Identity
from gastro_log.services.cloud import UserResolver

logger = logging.getLogger(__name__)


@dataclass
class SupabaseUserResolver(UserResolver):
    """Looks up the user that owns an access token."""

    client: Client

    def resolve(self, token: str) -> Identity | None:
        """Return the token's identity, or None when Supabase rejects it."""
        try:
            response = self.client.auth.get_user(token)
        except AuthError:
            logger.info("Rejected access token")
            return None
        if response is None or response.user is None:
            return None
        return Identity(user_id=str(response.user.id), email=response.user.email)
