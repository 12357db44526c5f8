# src/postbox/models/thread.py
"""Models describing message threads and their participants."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from postbox.db.session import Base
from postbox.db.time import utcnow

if TYPE_CHECKING:
    from .message import Message


class MessageThread(Base):
    """Conversation grouping messages that share recipients and subject lineage."""

    __tablename__ = "message_thread"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    messages: Mapped[list[Message]] = relationship(
        "Message",
        back_populates="thread",
        cascade="all, delete-orphan",
        order_by="(Message.sent_at, Message.id)",
    )
    recipients: Mapped[list[ThreadRecipient]] = relationship(
        "ThreadRecipient",
        back_populates="thread",
        cascade="all, delete-orphan",
        order_by="ThreadRecipient.id",
    )

    @property
    def recipient_ids(self) -> list[int]:
        """Return participant user ids in the order they joined the thread."""
        return [recipient.user_id for recipient in self.recipients]


class ThreadRecipient(Base):
    """Participation of one user in a thread, carrying that user's read marker."""

    __tablename__ = "message_recipient"
    __table_args__ = (UniqueConstraint("thread_id", "user_id", name="uq_message_recipient_thread_user"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    thread_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("message_thread.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_account.id"),
        nullable=False,
        index=True,
    )
    # Null until the user first reads the thread.
    last_read_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    thread: Mapped[MessageThread] = relationship("MessageThread", back_populates="recipients")
