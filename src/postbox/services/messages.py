"""Message service: composing, notices, thread deletion and thread queries."""
from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable, Sequence
from datetime import datetime
from typing import TYPE_CHECKING
from urllib.parse import unquote

from postbox.core.settings import settings
from postbox.db.time import utcnow
from postbox.models.message import SUBJECT_MAX_LENGTH
from postbox.services.drafts import ComposedMessage, MessageDraft
from postbox.services.errors import InvalidInput, NotFound, PermissionDenied, StoreFailure
from postbox.services.hooks import (
    HookRegistry,
    MessageSent,
    NoticeSent,
    ThreadsDeleted,
    ThreadsDeleting,
    get_hook_registry,
)
from postbox.services.permissions import MODERATE, actor_can

if TYPE_CHECKING:
    from postbox.models import MessageThread, Notice, User
    from postbox.repositories import NoticeRepository, ThreadRepository, UserRepository

logger = logging.getLogger(__name__)

Recipient = str | int

_NUMERIC_ID = re.compile(r"[0-9]+")


class MessageService:
    """Service handling private messages and sitewide notices.

    The service owns validation and recipient resolution. Storage is delegated
    to the thread and notice repositories, identity lookups to the user
    repository, and post-commit notifications to the hook registry.
    """

    def __init__(
        self,
        threads: ThreadRepository,
        users: UserRepository,
        notices: NoticeRepository,
        hooks: HookRegistry | None = None,
        *,
        username_compatibility_mode: bool | None = None,
        default_subject: str | None = None,
        reply_prefix: str | None = None,
        can: Callable[[User | None, str], bool] = actor_can,
    ) -> None:
        self.threads = threads
        self.users = users
        self.notices = notices
        self.hooks = hooks if hooks is not None else get_hook_registry()
        self.username_compatibility_mode = (
            settings.username_compatibility_mode
            if username_compatibility_mode is None
            else username_compatibility_mode
        )
        self.default_subject = default_subject or settings.default_subject
        self.reply_prefix = settings.reply_prefix if reply_prefix is None else reply_prefix
        self._can = can

    # ------------------------------------------------------------------
    # Composition
    # ------------------------------------------------------------------

    def compose(
        self,
        sender_id: int,
        body: str,
        *,
        thread_id: int | None = None,
        recipients: Sequence[Recipient] | None = None,
        subject: str | None = None,
        sent_at: datetime | None = None,
    ) -> int:
        """Send a message and return the id of the thread it was stored in.

        See :meth:`send` for argument and failure semantics.
        """
        thread_id, _ = self._deliver(
            sender_id,
            body,
            thread_id=thread_id,
            recipients=recipients,
            subject=subject,
            sent_at=sent_at,
        )
        return thread_id

    def send(
        self,
        sender_id: int,
        body: str,
        *,
        thread_id: int | None = None,
        recipients: Sequence[Recipient] | None = None,
        subject: str | None = None,
        sent_at: datetime | None = None,
    ) -> ComposedMessage:
        """Compose, store and announce a message.

        Replies (``thread_id`` given) always go to the thread's existing
        participants; any ``recipients`` argument is ignored. New threads
        resolve ``recipients`` by login or nicename, falling back to numeric
        user ids. Entries that cannot be resolved are kept on the returned
        message as ``invalid_recipients``.

        Args:
            sender_id: Author of the message.
            body: Message content. Must not be empty.
            thread_id: Thread to reply to; omit to start a new thread.
            recipients: User names or ids; required for a new thread.
            subject: Subject line. Defaults to ``"Re: <first subject>"`` for
                replies and to the configured placeholder for new threads.
            sent_at: Send time. Defaults to now.

        Returns:
            The committed message, as returned by the ``MessageSent`` hooks
            and bound to the thread it was stored in.

        Raises:
            InvalidInput: Missing sender, body or resolvable recipients, or a
                subject longer than the stored column allows.
            NotFound: ``thread_id`` names a thread that does not exist.
            StoreFailure: The thread store could not record the message.
        """
        _, message = self._deliver(
            sender_id,
            body,
            thread_id=thread_id,
            recipients=recipients,
            subject=subject,
            sent_at=sent_at,
        )
        return message

    def _deliver(
        self,
        sender_id: int,
        body: str,
        *,
        thread_id: int | None,
        recipients: Sequence[Recipient] | None,
        subject: str | None,
        sent_at: datetime | None,
    ) -> tuple[int, ComposedMessage]:
        if not sender_id or not body:
            raise InvalidInput("A sender and a message body are required")
        if subject and len(subject) > SUBJECT_MAX_LENGTH:
            raise InvalidInput(f"Subject is longer than {SUBJECT_MAX_LENGTH} characters")

        draft = MessageDraft(sender_id, body)
        draft.subject = subject
        draft.sent_at = sent_at

        if thread_id:
            thread = self.threads.load_thread(thread_id)
            draft.thread_id = thread.id
            draft.recipients = list(thread.recipient_ids)
            if not draft.subject:
                reply_subject = f"{self.reply_prefix}{self._first_subject(thread)}"
                draft.subject = reply_subject[:SUBJECT_MAX_LENGTH]
        else:
            if not recipients:
                raise InvalidInput("At least one recipient is required")
            resolved, invalid = self.resolve_recipients(recipients)
            draft.recipients = resolved
            draft.invalid_recipients = invalid
            if not draft.subject:
                draft.subject = self.default_subject

        message = draft.build()
        if message.invalid_recipients:
            logger.info(
                "Skipping unresolved recipients for user %s: %s",
                sender_id,
                ", ".join(message.invalid_recipients),
            )
        if not message.is_reply and not message.recipients:
            raise InvalidInput("No valid recipients")

        stored_thread_id = self.threads.append_message(message)
        message = message.committed(stored_thread_id)
        logger.info("User %s sent a message to thread %s", sender_id, stored_thread_id)

        event = self.hooks.emit(MessageSent(message=message, thread_id=stored_thread_id))
        # Hooks may replace the message but not move it out of its thread.
        return stored_thread_id, event.message.committed(stored_thread_id)

    def resolve_recipients(self, recipients: Iterable[Recipient]) -> tuple[list[int], list[str]]:
        """Map user-supplied recipient entries to user ids.

        Returns:
            Resolved ids (in input order, possibly repeated) and the trimmed
            entries that matched no user.
        """
        resolved: list[int] = []
        invalid: list[str] = []
        for raw in recipients:
            entry = str(raw).strip()
            if not entry:
                continue

            user_id = self._resolve_name(entry)
            if user_id is None and _NUMERIC_ID.fullmatch(entry):
                if self.users.exists_by_id(int(entry)):
                    user_id = int(entry)

            if user_id is None:
                invalid.append(entry)
            else:
                resolved.append(user_id)
        return resolved, invalid

    def _resolve_name(self, entry: str) -> int | None:
        if self.username_compatibility_mode:
            return self.users.resolve_by_login_key(unquote(entry))
        return self.users.resolve_by_display_key(entry)

    @staticmethod
    def _first_subject(thread: MessageThread) -> str:
        return thread.messages[0].subject if thread.messages else ""

    # ------------------------------------------------------------------
    # Notices
    # ------------------------------------------------------------------

    def send_notice(self, subject: str, body: str, actor: User | None) -> Notice:
        """Broadcast an active sitewide notice.

        Earlier notices are left as they are.

        Raises:
            PermissionDenied: The actor may not moderate.
            InvalidInput: Subject or body is empty.
            StoreFailure: The notice could not be stored.
        """
        if not self._can(actor, MODERATE):
            raise PermissionDenied("Only moderators can send notices")
        if not subject or not body:
            raise InvalidInput("A notice needs a subject and a body")
        if len(subject) > SUBJECT_MAX_LENGTH:
            raise InvalidInput(f"Subject is longer than {SUBJECT_MAX_LENGTH} characters")

        notice = self.notices.create(subject=subject, body=body, sent_at=utcnow())
        logger.info("Notice %s sent by user %s", notice.id, actor.id if actor else None)
        self.hooks.emit(NoticeSent(subject=subject, body=body, notice_id=notice.id))
        return notice

    def active_notices(self, limit: int | None = None) -> list[Notice]:
        return self.notices.list_active(limit)

    # ------------------------------------------------------------------
    # Deletion
    # ------------------------------------------------------------------

    def delete_threads(self, thread_ids: int | Sequence[int]) -> bool:
        """Delete one thread or a list of threads.

        Threads are deleted one at a time. A failure does not undo threads
        already deleted in the same call; it only makes the call return False
        and suppresses the ``ThreadsDeleted`` event.
        """
        ids = (thread_ids,) if isinstance(thread_ids, int) else tuple(thread_ids)
        self.hooks.emit(ThreadsDeleting(thread_ids=ids))

        failed = False
        for thread_id in ids:
            try:
                deleted = self.threads.delete_thread(thread_id)
            except StoreFailure:
                logger.exception("Deleting thread %s failed", thread_id)
                deleted = False
            if not deleted:
                failed = True

        if failed:
            logger.warning("Thread deletion batch %s did not complete", ids)
            return False

        self.hooks.emit(ThreadsDeleted(thread_ids=ids))
        return True

    # ------------------------------------------------------------------
    # Thread queries
    # ------------------------------------------------------------------

    def get_thread(self, thread_id: int) -> MessageThread:
        return self.threads.load_thread(thread_id)

    def get_thread_for_user(self, thread_id: int, user_id: int) -> MessageThread:
        """Return a thread the user participates in.

        Raises:
            NotFound: The thread does not exist or the user is not part of it.
        """
        if self.check_access(thread_id, user_id) is None:
            raise NotFound(f"Thread {thread_id} does not exist")
        return self.threads.load_thread(thread_id)

    def threads_for_user(
        self,
        user_id: int,
        limit: int | None = None,
        before: int | None = None,
    ) -> list[MessageThread]:
        return self.threads.list_for_user(
            user_id,
            limit or settings.messages_page_size,
            before=before,
        )

    def check_access(self, thread_id: int, user_id: int) -> int | None:
        return self.threads.check_access(thread_id, user_id)

    def mark_read(self, thread_id: int, user_id: int) -> bool:
        return self.threads.mark_read(thread_id, user_id)

    def mark_unread(self, thread_id: int, user_id: int) -> bool:
        return self.threads.mark_unread(thread_id, user_id)

    def is_unread(self, thread_id: int, user_id: int) -> bool:
        return self.threads.is_unread(thread_id, user_id)

    def unread_count(self, user_id: int) -> int:
        return self.threads.unread_count(user_id)

    def is_user_sender(self, user_id: int, message_id: int) -> int | None:
        return self.threads.is_user_sender(user_id, message_id)

    def message_sender(self, message_id: int) -> int | None:
        return self.threads.message_sender(message_id)

    def is_valid_thread(self, thread_id: int) -> int | None:
        return self.threads.is_valid(thread_id)
