# src/postbox/models/notice.py
"""Sitewide notices broadcast by moderators."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from postbox.db.session import Base
from postbox.db.time import utcnow

from .message import SUBJECT_MAX_LENGTH


class Notice(Base):
    """Announcement shown to every user while active."""

    __tablename__ = "message_notice"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    subject: Mapped[str] = mapped_column(String(SUBJECT_MAX_LENGTH), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    sent_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
