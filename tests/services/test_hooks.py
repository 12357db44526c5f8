# tests/services/test_hooks.py
"""Tests for the hook registry and post-commit message hooks."""

from dataclasses import replace
from datetime import UTC, datetime

from postbox.services import ComposedMessage, HookRegistry, MessageDraft
from postbox.services.hooks import MessageSent, NoticeSent


def _message(**overrides) -> ComposedMessage:
    values = {
        "sender_id": 1,
        "subject": "Hello",
        "body": "Body",
        "sent_at": datetime(2026, 1, 1, tzinfo=UTC),
        "recipients": (2,),
        "thread_id": 10,
    }
    values.update(overrides)
    return ComposedMessage(**values)


def test_hooks_only_receive_their_event_type() -> None:
    registry = HookRegistry()
    received = []
    registry.register(NoticeSent, received.append)

    registry.emit(MessageSent(message=_message(), thread_id=10))
    registry.emit(NoticeSent(subject="s", body="b"))

    assert received == [NoticeSent(subject="s", body="b")]


def test_decorator_registration() -> None:
    registry = HookRegistry()
    received = []

    @registry.on(NoticeSent)
    def remember(event: NoticeSent) -> None:
        received.append(event.subject)

    registry.emit(NoticeSent(subject="s", body="b"))

    assert received == ["s"]


def test_replacement_message_flows_to_later_hooks() -> None:
    registry = HookRegistry()
    seen_bodies = []

    def annotate(event: MessageSent) -> ComposedMessage:
        return replace(event.message, body=event.message.body + " [filtered]")

    registry.register(MessageSent, annotate)
    registry.register(MessageSent, lambda event: seen_bodies.append(event.message.body))

    result = registry.emit(MessageSent(message=_message(), thread_id=10))

    assert seen_bodies == ["Body [filtered]"]
    assert result.message.body == "Body [filtered]"


def test_failing_hook_is_logged_and_skipped(caplog) -> None:
    registry = HookRegistry()
    received = []

    def broken(event: NoticeSent) -> None:
        raise RuntimeError("observer bug")

    registry.register(NoticeSent, broken)
    registry.register(NoticeSent, received.append)

    registry.emit(NoticeSent(subject="s", body="b"))

    assert len(received) == 1
    assert "raised while handling NoticeSent" in caplog.text


def test_unregister_and_clear() -> None:
    registry = HookRegistry()
    received = []
    registry.register(NoticeSent, received.append)
    registry.unregister(NoticeSent, received.append)
    registry.emit(NoticeSent(subject="s", body="b"))
    assert received == []

    registry.register(NoticeSent, received.append)
    registry.clear()
    registry.emit(NoticeSent(subject="s", body="b"))
    assert received == []


def test_compose_returns_message_rewritten_by_hook(message_service, hook_registry, alice, bob) -> None:
    hook_registry.register(
        MessageSent,
        lambda event: replace(event.message, metadata={"scanned": True}),
    )

    message = message_service.send(alice.id, "Hello", recipients=["bob"])

    assert message.metadata == {"scanned": True}


def test_compose_survives_failing_hook(message_service, hook_registry, alice, bob) -> None:
    def broken(event: MessageSent) -> None:
        raise RuntimeError("observer bug")

    hook_registry.register(MessageSent, broken)

    thread_id = message_service.compose(alice.id, "Hello", recipients=["bob"])

    assert message_service.is_valid_thread(thread_id) == thread_id


def test_draft_build_filters_sender_and_duplicates() -> None:
    draft = MessageDraft(sender_id=1, body="Hi")
    draft.recipients = [3, 1, 2, 3]
    draft.subject = "Subject"

    message = draft.build()

    assert message.recipients == (3, 2)
    assert message.thread_id is None
    assert message.sent_at.tzinfo is not None
