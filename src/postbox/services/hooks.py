"""Typed events fired by the messaging service and the registry that dispatches them.

Hooks are plain callables registered per event type. They run after the
triggering change has been committed. A hook that raises is logged and
skipped so that observers can never undo or fail the operation that fired
the event.

``MessageSent`` hooks may return a replacement :class:`ComposedMessage`; later
hooks and the caller then see the replacement. Any other return value is
ignored.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import Any, TypeVar

from postbox.services.drafts import ComposedMessage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MessagingEvent:
    """Base messaging event."""


@dataclass(frozen=True)
class MessageSent(MessagingEvent):
    """A message was appended to a thread."""

    message: ComposedMessage
    thread_id: int


@dataclass(frozen=True)
class NoticeSent(MessagingEvent):
    """A moderator broadcast a sitewide notice."""

    subject: str
    body: str
    notice_id: int | None = None


@dataclass(frozen=True)
class ThreadsDeleting(MessagingEvent):
    """One or more threads are about to be deleted."""

    thread_ids: tuple[int, ...]


@dataclass(frozen=True)
class ThreadsDeleted(MessagingEvent):
    """Every thread in a deletion batch was removed."""

    thread_ids: tuple[int, ...]


E = TypeVar("E", bound=MessagingEvent)
Hook = Callable[[Any], Any]


class HookRegistry:
    """Dispatch events to the hooks registered for their type."""

    def __init__(self) -> None:
        self._hooks: dict[type[MessagingEvent], list[Hook]] = defaultdict(list)

    def register(self, event_type: type[E], hook: Callable[[E], Any]) -> Callable[[E], Any]:
        """Attach ``hook`` to ``event_type`` and return it unchanged."""
        self._hooks[event_type].append(hook)
        return hook

    def on(self, event_type: type[E]) -> Callable[[Callable[[E], Any]], Callable[[E], Any]]:
        """Decorator form of :meth:`register`."""

        def decorator(hook: Callable[[E], Any]) -> Callable[[E], Any]:
            return self.register(event_type, hook)

        return decorator

    def unregister(self, event_type: type[E], hook: Callable[[E], Any]) -> None:
        hooks = self._hooks.get(event_type, [])
        if hook in hooks:
            hooks.remove(hook)

    def clear(self) -> None:
        self._hooks.clear()

    def emit(self, event: E) -> E:
        """Notify the hooks registered for ``type(event)``.

        Returns:
            The event as seen by the last hook. For ``MessageSent`` this
            carries any replacement message returned along the way.
        """
        for hook in list(self._hooks.get(type(event), [])):
            try:
                result = hook(event)
            except Exception:
                logger.exception("Hook %r raised while handling %s", hook, type(event).__name__)
                continue
            if isinstance(event, MessageSent) and isinstance(result, ComposedMessage):
                event = replace(event, message=result)
        return event


hooks = HookRegistry()


def get_hook_registry() -> HookRegistry:
    """Return the process-wide hook registry."""
    return hooks
