# src/postbox/models/__init__.py
"""SQLAlchemy models for the Postbox service."""

from .message import Message
from .notice import Notice
from .thread import MessageThread, ThreadRecipient
from .user import User

__all__ = [
    "Message",
    "MessageThread", "ThreadRecipient",
    "Notice",
    "User",
]
