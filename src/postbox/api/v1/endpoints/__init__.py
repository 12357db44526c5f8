# src/postbox/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .messages import router as messages_router
from .notices import router as notices_router

__all__ = [
    "messages_router",
    "notices_router",
]
