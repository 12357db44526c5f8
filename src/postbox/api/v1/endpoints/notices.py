# src/postbox/api/v1/endpoints/notices.py
"""Sitewide notice endpoints for the Postbox API."""

from __future__ import annotations

from fastapi import APIRouter, Query, status

from postbox.api.v1.dependencies import CurrentUserDep, MessageServiceDep, http_error
from postbox.models import Notice
from postbox.schemas.notice import NoticeCreate, NoticeResponse
from postbox.services import MessagingError

router = APIRouter(prefix="/notices", tags=["notices"])


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=NoticeResponse)
async def send_notice(
    notice_data: NoticeCreate,
    current_user: CurrentUserDep,
    service: MessageServiceDep,
) -> Notice:
    """Broadcast a notice to every user. Moderators only."""
    try:
        return service.send_notice(notice_data.subject, notice_data.body, current_user)
    except MessagingError as exc:
        raise http_error(exc) from exc


@router.get("/active", response_model=list[NoticeResponse])
async def get_active_notices(
    current_user: CurrentUserDep,
    service: MessageServiceDep,
    limit: int = Query(10, ge=1, le=50),
) -> list[Notice]:
    """Return active notices, newest first."""
    return service.active_notices(limit)
