"""Value objects produced while composing a message."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import Any

from postbox.db.time import utcnow


@dataclass(frozen=True)
class ComposedMessage:
    """A validated message ready to be committed to the thread store.

    ``thread_id`` is ``None`` until the message has been committed into a new
    thread. ``recipients`` never contains ``sender_id``.
    """

    sender_id: int
    subject: str
    body: str
    sent_at: datetime
    recipients: tuple[int, ...]
    thread_id: int | None = None
    invalid_recipients: tuple[str, ...] = ()
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def is_reply(self) -> bool:
        return self.thread_id is not None

    def committed(self, thread_id: int) -> ComposedMessage:
        """Return a copy bound to the thread it was stored in."""
        return replace(self, thread_id=thread_id)


class MessageDraft:
    """Mutable builder collecting the parts of a message before validation."""

    def __init__(self, sender_id: int, body: str) -> None:
        self.sender_id = sender_id
        self.body = body
        self.thread_id: int | None = None
        self.subject: str | None = None
        self.sent_at: datetime | None = None
        self.recipients: list[int] = []
        self.invalid_recipients: list[str] = []

    def build(self) -> ComposedMessage:
        """Freeze the draft; the sender is filtered out of the recipients."""
        recipients = tuple(
            user_id for user_id in dict.fromkeys(self.recipients) if user_id != self.sender_id
        )
        return ComposedMessage(
            sender_id=self.sender_id,
            subject=self.subject or "",
            body=self.body,
            sent_at=_as_utc(self.sent_at) if self.sent_at else utcnow(),
            recipients=recipients,
            thread_id=self.thread_id,
            invalid_recipients=tuple(self.invalid_recipients),
        )


def _as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
