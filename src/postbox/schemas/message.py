"""Private message Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from postbox.models.message import SUBJECT_MAX_LENGTH


class MessageCreate(BaseModel):
    """Schema for composing a message into a new or existing thread."""

    body: str = Field(..., description="Message content; must not be empty")
    subject: str | None = Field(
        None, max_length=SUBJECT_MAX_LENGTH, description="Optional subject line"
    )
    thread_id: int | None = Field(None, description="Thread to reply to; omit to start a new thread")
    recipients: list[str | int] = Field(
        default_factory=list,
        description="Nicenames, login names or user ids; ignored for replies",
    )
    sent_at: datetime | None = Field(None, description="Send time; defaults to now")


class MessageSentResponse(BaseModel):
    """Result of a successful compose."""

    status: str = "message_sent"
    thread_id: int
    subject: str
    recipients: list[int]
    invalid_recipients: list[str] = Field(default_factory=list)


class MessageResponse(BaseModel):
    """Schema for a single message within a thread."""

    id: int
    thread_id: int
    sender_id: int
    subject: str
    body: str
    sent_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ThreadResponse(BaseModel):
    """Schema for a thread as seen by one participant."""

    id: int
    subject: str
    participants: list[int]
    unread: bool
    messages: list[MessageResponse]


class ThreadDeleteRequest(BaseModel):
    """Batch of threads to delete."""

    thread_ids: list[int] = Field(..., min_length=1)


class UnreadCountResponse(BaseModel):
    unread: int


class MessageSenderResponse(BaseModel):
    message_id: int
    sender_id: int
