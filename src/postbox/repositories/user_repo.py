"""Identity lookups used to resolve message recipients."""
from __future__ import annotations

import re

from sqlalchemy import select
from sqlalchemy.orm import Session

from postbox.models import User

__all__ = ["UserRepository", "nicename_for"]

_NICENAME_STRIP = re.compile(r"[^a-z0-9_-]+")

# Upper bound of the 32-bit INTEGER primary key.
MAX_USER_ID = 2**31 - 1


def nicename_for(login: str) -> str:
    """Return the normalized, URL-safe display key derived from a login name."""
    return _NICENAME_STRIP.sub("-", login.strip().lower()).strip("-")[:50]


class UserRepository:
    """Identity resolver backed by the ``user_account`` table."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, user_id: int) -> User | None:
        return self.session.get(User, user_id)

    def resolve_by_login_key(self, key: str) -> int | None:
        """Return the id of the user whose login matches ``key`` exactly."""
        return self.session.scalar(select(User.id).where(User.user_login == key))

    def resolve_by_display_key(self, key: str) -> int | None:
        """Return the id of the user whose nicename matches ``key`` exactly."""
        return self.session.scalar(select(User.id).where(User.user_nicename == key))

    def exists_by_id(self, user_id: int) -> bool:
        """Return whether a user has this id; ids outside the key range never exist."""
        if not 0 < user_id <= MAX_USER_ID:
            return False
        return self.session.scalar(select(User.id).where(User.id == user_id)) is not None

    def create(
        self,
        user_login: str,
        *,
        display_name: str | None = None,
        user_nicename: str | None = None,
        is_moderator: bool = False,
    ) -> User:
        """Persist a new user and return it."""
        user = User(
            user_login=user_login,
            user_nicename=user_nicename or nicename_for(user_login),
            display_name=display_name or user_login,
            is_moderator=is_moderator,
        )
        self.session.add(user)
        self.session.commit()
        self.session.refresh(user)
        return user
