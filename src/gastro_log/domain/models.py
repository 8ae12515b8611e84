"""Domain models for the signed-in user."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Identity:
    """The signed-in user; ``None`` elsewhere means local-only mode."""

    user_id: str
    email: str | None = None


def identity_key(identity: Identity | None) -> str | None:
    """Return the key reconciliation state is tracked under."""
    return identity.user_id if identity else None
