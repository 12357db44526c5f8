"""Sitewide notice Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from postbox.models.message import SUBJECT_MAX_LENGTH


class NoticeCreate(BaseModel):
    """Schema for broadcasting a notice."""

    subject: str = Field(..., max_length=SUBJECT_MAX_LENGTH, description="Notice headline")
    body: str = Field(..., description="Notice content")


class NoticeResponse(BaseModel):
    """Schema for notice information returned by the API."""

    id: int
    subject: str
    body: str
    sent_at: datetime
    is_active: bool

    model_config = ConfigDict(from_attributes=True)
