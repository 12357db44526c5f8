"""Data access helpers for sitewide notices."""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from postbox.models import Notice
from postbox.services.errors import StoreFailure

__all__ = ["NoticeRepository"]


class NoticeRepository:
    """Notice store backed by a SQLAlchemy session."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def create(self, *, subject: str, body: str, sent_at: datetime) -> Notice:
        """Insert an active notice and return the persisted instance.

        Raises:
            StoreFailure: If the database rejects the write.
        """
        notice = Notice(subject=subject, body=body, sent_at=sent_at, is_active=True)
        try:
            self.session.add(notice)
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise StoreFailure("Could not store notice") from exc
        self.session.refresh(notice)
        return notice

    def list_active(self, limit: int | None = None) -> list[Notice]:
        """Return active notices, newest first."""
        stmt = (
            select(Notice)
            .where(Notice.is_active.is_(True))
            .order_by(Notice.sent_at.desc(), Notice.id.desc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        return list(self.session.scalars(stmt))
