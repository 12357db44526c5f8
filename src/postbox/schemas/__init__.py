# src/postbox/schemas/__init__.py
"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .message import (
    MessageCreate,
    MessageResponse,
    MessageSenderResponse,
    MessageSentResponse,
    ThreadDeleteRequest,
    ThreadResponse,
    UnreadCountResponse,
)
from .notice import NoticeCreate, NoticeResponse

__all__ = [
    "MessageCreate", "MessageResponse", "MessageSenderResponse", "MessageSentResponse",
    "ThreadDeleteRequest", "ThreadResponse", "UnreadCountResponse",
    "NoticeCreate", "NoticeResponse",
]
