"""Persistence collaborators used by the messaging services."""

from .notice_repo import NoticeRepository
from .thread_repo import ThreadRepository
from .user_repo import UserRepository

__all__ = ["NoticeRepository", "ThreadRepository", "UserRepository"]
