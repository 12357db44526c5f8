# src/postbox/services/__init__.py
"""Business logic services for the Postbox application."""

from .drafts import ComposedMessage, MessageDraft
from .errors import InvalidInput, MessagingError, NotFound, PermissionDenied, StoreFailure
from .hooks import HookRegistry, get_hook_registry
from .messages import MessageService

__all__ = [
    "ComposedMessage",
    "MessageDraft",
    "HookRegistry",
    "get_hook_registry",
    "MessageService",
    "MessagingError",
    "InvalidInput",
    "NotFound",
    "PermissionDenied",
    "StoreFailure",
]
