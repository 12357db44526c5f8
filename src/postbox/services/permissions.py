"""Capability checks for moderation-only operations."""
from __future__ import annotations

from postbox.models import User

MODERATE = "moderate"


def actor_can(actor: User | None, capability: str) -> bool:
    """Return True when ``actor`` holds ``capability``.

    Only the moderation capability is recognised; anything else is denied.
    """
    if actor is None:
        return False
    if capability == MODERATE:
        return bool(actor.is_moderator)
    return False
