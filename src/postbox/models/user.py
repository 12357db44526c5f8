# src/postbox/models/user.py
"""SQLAlchemy model for user identities."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from postbox.db.session import Base
from postbox.db.time import utcnow


class User(Base):
    """Registered member who can send and receive private messages.

    ``user_login`` is the login-style key and ``user_nicename`` the normalized,
    URL-safe form of the display name. Either may be typed as a recipient.
    """

    __tablename__ = "user_account"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_login: Mapped[str] = mapped_column(String(60), unique=True, nullable=False)
    user_nicename: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    display_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_moderator: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
