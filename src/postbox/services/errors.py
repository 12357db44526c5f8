"""Exceptions raised by the messaging services."""
from __future__ import annotations


class MessagingError(Exception):
    """Base class for messaging failures surfaced to callers."""


class InvalidInput(MessagingError):
    """A required field is missing or no recipient could be resolved."""


class PermissionDenied(MessagingError):
    """The acting user lacks the capability an operation requires."""


class NotFound(MessagingError):
    """A referenced thread or message does not exist."""


class StoreFailure(MessagingError):
    """The underlying persistence operation failed."""


__all__ = [
    "MessagingError",
    "InvalidInput",
    "PermissionDenied",
    "NotFound",
    "StoreFailure",
]
