"""Token providers for the client."""

from dataclasses import dataclass

from gastro_log.services.sync import TokenProvider


@dataclass
class StaticTokenProvider(TokenProvider):
    """Returns a fixed access token handed over by the identity provider."""

    token: str | None = None

    async def get_token(self) -> str | None:
        """Return the configured token, treating blanks as missing."""
        if self.token is None or not self.token.strip():
            return None
        return self.token.strip()

    def update(self, token: str | None) -> None:
        """Replace the token after a sign-in or refresh."""
        self.token = token
