"""Data access helpers for message threads."""
from __future__ import annotations

import logging

from sqlalchemy import exists, func, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from postbox.models import Message, MessageThread, ThreadRecipient
from postbox.services.drafts import ComposedMessage
from postbox.services.errors import NotFound, StoreFailure

__all__ = ["ThreadRepository"]

logger = logging.getLogger(__name__)


def _unread_clause():
    """SQL condition that is true when the recipient row's thread is unread."""
    newer_message = (
        select(Message.id)
        .where(
            Message.thread_id == ThreadRecipient.thread_id,
            Message.sent_at > ThreadRecipient.last_read_at,
        )
        .correlate(ThreadRecipient)
    )
    return or_(ThreadRecipient.last_read_at.is_(None), exists(newer_message))


class ThreadRepository:
    """Thread store backed by a SQLAlchemy session.

    Every mutating call commits on success and rolls back on failure, so a
    message and its recipient rows are recorded together or not at all.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, thread_id: int) -> MessageThread | None:
        """Return a thread with its messages and participants, or ``None``."""
        result = self.session.execute(
            select(MessageThread)
            .where(MessageThread.id == thread_id)
            .options(
                selectinload(MessageThread.messages),
                selectinload(MessageThread.recipients),
            )
        )
        return result.scalars().first()

    def load_thread(self, thread_id: int) -> MessageThread:
        """Return a thread aggregate.

        Raises:
            NotFound: If no thread has this identifier.
        """
        thread = self.get(thread_id)
        if thread is None:
            raise NotFound(f"Thread {thread_id} does not exist")
        return thread

    def append_message(self, message: ComposedMessage) -> int:
        """Store ``message``, creating a new thread when it has no thread id.

        The sender and every recipient become participants of the thread.
        The sender's read marker moves up to the message so that their own
        message never counts as unread for them.

        Returns:
            Identifier of the thread the message was stored in.

        Raises:
            NotFound: If ``message.thread_id`` names a missing thread.
            StoreFailure: If the database rejects the write.
        """
        try:
            if message.thread_id is None:
                thread = MessageThread()
                self.session.add(thread)
                self.session.flush()
                known: set[int] = set()
            else:
                thread = self.session.get(MessageThread, message.thread_id)
                if thread is None:
                    raise NotFound(f"Thread {message.thread_id} does not exist")
                known = set(
                    self.session.scalars(
                        select(ThreadRecipient.user_id).where(ThreadRecipient.thread_id == thread.id)
                    )
                )

            for user_id in (message.sender_id, *message.recipients):
                if user_id not in known:
                    self.session.add(ThreadRecipient(thread_id=thread.id, user_id=user_id))
                    known.add(user_id)

            self.session.add(
                Message(
                    thread_id=thread.id,
                    sender_id=message.sender_id,
                    subject=message.subject,
                    body=message.body,
                    sent_at=message.sent_at,
                )
            )
            self.session.flush()

            self.session.execute(
                update(ThreadRecipient)
                .where(
                    ThreadRecipient.thread_id == thread.id,
                    ThreadRecipient.user_id == message.sender_id,
                    or_(
                        ThreadRecipient.last_read_at.is_(None),
                        ThreadRecipient.last_read_at < message.sent_at,
                    ),
                )
                .values(last_read_at=message.sent_at)
                .execution_options(synchronize_session=False)
            )
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error("Failed to store message from user %s: %s", message.sender_id, exc)
            raise StoreFailure("Could not store message") from exc
        return thread.id

    def delete_thread(self, thread_id: int) -> bool:
        """Delete a thread together with its messages and participants.

        Returns:
            False if the thread does not exist.

        Raises:
            StoreFailure: If the database rejects the delete.
        """
        try:
            thread = self.session.get(MessageThread, thread_id)
            if thread is None:
                return False
            self.session.delete(thread)
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise StoreFailure(f"Could not delete thread {thread_id}") from exc
        return True

    def check_access(self, thread_id: int, user_id: int) -> int | None:
        """Return the participant record id when ``user_id`` is in the thread."""
        return self.session.scalar(
            select(ThreadRecipient.id).where(
                ThreadRecipient.thread_id == thread_id,
                ThreadRecipient.user_id == user_id,
            )
        )

    def mark_read(self, thread_id: int, user_id: int) -> bool:
        """Move the user's read marker to the thread's newest message."""
        newest = (
            select(func.max(Message.sent_at))
            .where(Message.thread_id == thread_id)
            .scalar_subquery()
        )
        return self._set_marker(thread_id, user_id, newest)

    def mark_unread(self, thread_id: int, user_id: int) -> bool:
        """Clear the user's read marker so the thread counts as unread."""
        return self._set_marker(thread_id, user_id, None)

    def _set_marker(self, thread_id: int, user_id: int, value) -> bool:
        try:
            result = self.session.execute(
                update(ThreadRecipient)
                .where(
                    ThreadRecipient.thread_id == thread_id,
                    ThreadRecipient.user_id == user_id,
                )
                .values(last_read_at=value)
                .execution_options(synchronize_session=False)
            )
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise StoreFailure(f"Could not update read state for thread {thread_id}") from exc
        return result.rowcount > 0

    def is_unread(self, thread_id: int, user_id: int) -> bool:
        return bool(
            self.session.scalar(
                select(func.count(ThreadRecipient.id)).where(
                    ThreadRecipient.thread_id == thread_id,
                    ThreadRecipient.user_id == user_id,
                    _unread_clause(),
                )
            )
        )

    def unread_count(self, user_id: int) -> int:
        """Return how many of the user's threads hold messages they have not read."""
        count = self.session.scalar(
            select(func.count(ThreadRecipient.id)).where(
                ThreadRecipient.user_id == user_id,
                _unread_clause(),
            )
        )
        return count or 0

    def is_user_sender(self, user_id: int, message_id: int) -> int | None:
        """Return ``message_id`` if ``user_id`` sent that message."""
        return self.session.scalar(
            select(Message.id).where(Message.id == message_id, Message.sender_id == user_id)
        )

    def message_sender(self, message_id: int) -> int | None:
        """Return the sender of a message, if the message exists."""
        return self.session.scalar(select(Message.sender_id).where(Message.id == message_id))

    def is_valid(self, thread_id: int) -> int | None:
        """Return ``thread_id`` if a thread with that id holds any message."""
        return self.session.scalar(
            select(Message.thread_id).where(Message.thread_id == thread_id).limit(1)
        )

    def list_for_user(
        self,
        user_id: int,
        limit: int,
        before: int | None = None,
    ) -> list[MessageThread]:
        """Return the user's threads, most recent activity first.

        Args:
            user_id: Participant whose threads are listed.
            limit: Maximum number of threads to return.
            before: Only include threads whose newest message id is below this value.
        """
        latest = (
            select(Message.thread_id, func.max(Message.id).label("latest_id"))
            .group_by(Message.thread_id)
            .subquery()
        )
        stmt = (
            select(MessageThread)
            .join(latest, latest.c.thread_id == MessageThread.id)
            .join(ThreadRecipient, ThreadRecipient.thread_id == MessageThread.id)
            .where(ThreadRecipient.user_id == user_id)
            .options(
                selectinload(MessageThread.messages),
                selectinload(MessageThread.recipients),
            )
            .order_by(latest.c.latest_id.desc())
            .limit(limit)
        )
        if before is not None:
            stmt = stmt.where(latest.c.latest_id < before)
        return list(self.session.scalars(stmt))
