# tests/services/test_thread_repo.py
"""Tests for the SQLAlchemy-backed thread store."""

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from postbox.models import Message, MessageThread, ThreadRecipient
from postbox.repositories import ThreadRepository
from postbox.services import ComposedMessage, NotFound, StoreFailure

T0 = datetime(2026, 3, 1, 9, 0, tzinfo=UTC)


def _composed(sender_id: int, recipients: tuple[int, ...], **overrides) -> ComposedMessage:
    values = {
        "sender_id": sender_id,
        "subject": "Subject",
        "body": "Body",
        "sent_at": T0,
        "recipients": recipients,
    }
    values.update(overrides)
    return ComposedMessage(**values)


def test_append_creates_thread_and_participants(db_session, alice, bob) -> None:
    repo = ThreadRepository(db_session)

    thread_id = repo.append_message(_composed(alice.id, (bob.id,)))

    thread = repo.load_thread(thread_id)
    assert thread.recipient_ids == [alice.id, bob.id]
    assert [message.body for message in thread.messages] == ["Body"]


def test_append_to_existing_thread_adds_no_duplicate_participants(db_session, alice, bob) -> None:
    repo = ThreadRepository(db_session)
    thread_id = repo.append_message(_composed(alice.id, (bob.id,)))

    again = repo.append_message(
        _composed(bob.id, (alice.id,), thread_id=thread_id, sent_at=T0 + timedelta(minutes=1))
    )

    assert again == thread_id
    count = db_session.scalar(
        select(func.count(ThreadRecipient.id)).where(ThreadRecipient.thread_id == thread_id)
    )
    assert count == 2


def test_append_to_missing_thread_raises(db_session, alice) -> None:
    repo = ThreadRepository(db_session)

    with pytest.raises(NotFound):
        repo.append_message(_composed(alice.id, (), thread_id=4242))


def test_load_missing_thread_raises(db_session) -> None:
    with pytest.raises(NotFound):
        ThreadRepository(db_session).load_thread(4242)


def test_failed_commit_leaves_nothing_behind(db_session, mocker, alice, bob) -> None:
    repo = ThreadRepository(db_session)
    mocker.patch.object(
        db_session,
        "commit",
        side_effect=OperationalError("INSERT", {}, Exception("database is locked")),
    )

    with pytest.raises(StoreFailure):
        repo.append_message(_composed(alice.id, (bob.id,)))

    assert db_session.scalar(select(func.count(MessageThread.id))) == 0
    assert db_session.scalar(select(func.count(Message.id))) == 0
    assert db_session.scalar(select(func.count(ThreadRecipient.id))) == 0


def test_sender_marker_never_moves_backwards(db_session, alice, bob) -> None:
    repo = ThreadRepository(db_session)
    thread_id = repo.append_message(_composed(alice.id, (bob.id,), sent_at=T0 + timedelta(hours=1)))
    repo.append_message(
        _composed(bob.id, (alice.id,), thread_id=thread_id, sent_at=T0 + timedelta(hours=2))
    )
    repo.mark_read(thread_id, alice.id)

    # A backdated message from alice must not make bob's later reply unread for her.
    repo.append_message(_composed(alice.id, (bob.id,), thread_id=thread_id, sent_at=T0))

    assert repo.is_unread(thread_id, alice.id) is False


def test_delete_missing_thread_returns_false(db_session) -> None:
    assert ThreadRepository(db_session).delete_thread(4242) is False


def test_reply_after_loading_thread_updates_sender_marker(db_session, alice, bob) -> None:
    repo = ThreadRepository(db_session)
    thread_id = repo.append_message(_composed(alice.id, (bob.id,)))
    repo.load_thread(thread_id)

    repo.append_message(
        _composed(alice.id, (bob.id,), thread_id=thread_id, sent_at=T0 + timedelta(minutes=5))
    )

    assert repo.is_unread(thread_id, alice.id) is False
    assert repo.is_unread(thread_id, bob.id) is True


def test_delete_lookup_failure_raises_store_failure(db_session, mocker) -> None:
    repo = ThreadRepository(db_session)
    mocker.patch.object(
        db_session,
        "get",
        side_effect=OperationalError("SELECT", {}, Exception("database is locked")),
    )

    with pytest.raises(StoreFailure):
        repo.delete_thread(1)
