"""Access token helpers built on python-jose."""
from __future__ import annotations

from datetime import timedelta

from jose import jwt

from postbox.core.settings import settings
from postbox.db.time import utcnow


def create_access_token(user_id: int, expires_delta: timedelta | None = None) -> str:
    """Return a signed JWT whose subject is the given user id.

    Args:
        user_id: Identifier of the user the token authenticates.
        expires_delta: Optional lifetime; defaults to the configured expiry.
    """
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)
    payload = {
        "sub": str(user_id),
        "exp": utcnow() + expires_delta,
    }
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> int | None:
    """Decode a token and return its user id, or ``None`` without a usable subject.

    Raises:
        JWTError: If the token signature or expiry is invalid.
    """
    payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    subject = payload.get("sub")
    if subject is None or not str(subject).isdigit():
        return None
    return int(subject)
