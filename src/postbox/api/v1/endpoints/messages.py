# src/postbox/api/v1/endpoints/messages.py
"""Private message endpoints for the Postbox API."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query, status

from postbox.api.v1.dependencies import CurrentUserDep, MessageServiceDep, http_error
from postbox.models import MessageThread
from postbox.schemas.message import (
    MessageCreate,
    MessageResponse,
    MessageSenderResponse,
    MessageSentResponse,
    ThreadDeleteRequest,
    ThreadResponse,
    UnreadCountResponse,
)
from postbox.services import MessageService, MessagingError

router = APIRouter(prefix="/messages", tags=["messages"])


def _serialize_thread(
    thread: MessageThread,
    user_id: int,
    service: MessageService,
) -> ThreadResponse:
    """Serialize a thread for the participant ``user_id``."""
    subject = thread.messages[0].subject if thread.messages else ""
    return ThreadResponse(
        id=thread.id,
        subject=subject,
        participants=thread.recipient_ids,
        unread=service.is_unread(thread.id, user_id),
        messages=[MessageResponse.model_validate(message) for message in thread.messages],
    )


def _require_access(service: MessageService, thread_id: int, user_id: int) -> None:
    if service.check_access(thread_id, user_id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Thread not found",
        )


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=MessageSentResponse)
async def send_message(
    message_data: MessageCreate,
    current_user: CurrentUserDep,
    service: MessageServiceDep,
) -> MessageSentResponse:
    """Start a new thread or reply to one the current user belongs to."""
    if message_data.thread_id:
        _require_access(service, message_data.thread_id, current_user.id)

    try:
        message = service.send(
            current_user.id,
            message_data.body,
            thread_id=message_data.thread_id,
            recipients=message_data.recipients,
            subject=message_data.subject,
            sent_at=message_data.sent_at,
        )
    except MessagingError as exc:
        raise http_error(exc) from exc

    return MessageSentResponse(
        thread_id=message.thread_id,
        subject=message.subject,
        recipients=list(message.recipients),
        invalid_recipients=list(message.invalid_recipients),
    )


@router.get("/threads", response_model=list[ThreadResponse])
async def get_inbox(
    current_user: CurrentUserDep,
    service: MessageServiceDep,
    limit: int = Query(20, ge=1, le=100),
    before: int | None = Query(None),
) -> list[ThreadResponse]:
    """List the current user's threads, most recent activity first."""
    threads = service.threads_for_user(current_user.id, limit=limit, before=before)
    return [_serialize_thread(thread, current_user.id, service) for thread in threads]


@router.get("/threads/{thread_id}", response_model=ThreadResponse)
async def get_thread(
    thread_id: int,
    current_user: CurrentUserDep,
    service: MessageServiceDep,
) -> ThreadResponse:
    """Return a thread the current user participates in."""
    try:
        thread = service.get_thread_for_user(thread_id, current_user.id)
    except MessagingError as exc:
        raise http_error(exc) from exc
    return _serialize_thread(thread, current_user.id, service)


@router.put("/threads/{thread_id}/read")
async def mark_thread_read(
    thread_id: int,
    current_user: CurrentUserDep,
    service: MessageServiceDep,
) -> dict[str, str]:
    """Mark a thread as read for the current user."""
    _require_access(service, thread_id, current_user.id)
    try:
        service.mark_read(thread_id, current_user.id)
    except MessagingError as exc:
        raise http_error(exc) from exc
    return {"status": "marked_as_read"}


@router.put("/threads/{thread_id}/unread")
async def mark_thread_unread(
    thread_id: int,
    current_user: CurrentUserDep,
    service: MessageServiceDep,
) -> dict[str, str]:
    """Mark a thread as unread for the current user."""
    _require_access(service, thread_id, current_user.id)
    try:
        service.mark_unread(thread_id, current_user.id)
    except MessagingError as exc:
        raise http_error(exc) from exc
    return {"status": "marked_as_unread"}


@router.delete("/threads/{thread_id}")
async def delete_thread(
    thread_id: int,
    current_user: CurrentUserDep,
    service: MessageServiceDep,
) -> dict[str, str]:
    """Delete a single thread the current user participates in."""
    _require_access(service, thread_id, current_user.id)
    if not service.delete_threads(thread_id):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Thread could not be deleted",
        )
    return {"status": "deleted"}


@router.post("/threads/delete")
async def delete_threads(
    request: ThreadDeleteRequest,
    current_user: CurrentUserDep,
    service: MessageServiceDep,
) -> dict[str, str]:
    """Delete several threads; every one must belong to the current user."""
    for thread_id in request.thread_ids:
        _require_access(service, thread_id, current_user.id)
    if not service.delete_threads(request.thread_ids):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Some threads could not be deleted",
        )
    return {"status": "deleted"}


@router.get("/unread-count", response_model=UnreadCountResponse)
async def get_unread_count(
    current_user: CurrentUserDep,
    service: MessageServiceDep,
) -> UnreadCountResponse:
    """Return how many of the current user's threads are unread."""
    return UnreadCountResponse(unread=service.unread_count(current_user.id))


@router.get("/{message_id}/sender", response_model=MessageSenderResponse)
async def get_message_sender(
    message_id: int,
    current_user: CurrentUserDep,
    service: MessageServiceDep,
) -> MessageSenderResponse:
    """Return the sender of a message."""
    sender_id = service.message_sender(message_id)
    if sender_id is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Message not found",
        )
    return MessageSenderResponse(message_id=message_id, sender_id=sender_id)
