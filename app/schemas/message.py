"""Messaging schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


class MessageCreate(BaseModel):
    """Guest writes to the host about a listing; hosts reply with guest_id set."""

    listing_id: UUID
    text: str = Field(..., min_length=1, max_length=5000)
    guest_id: UUID | None = None

    @field_validator("text")
    @classmethod
    def strip_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Message cannot be empty")
        return v


class MessageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    listing_id: UUID
    host_id: UUID
    guest_id: UUID
    sender_id: UUID
    sender_role: str
    text: str
    listing_title: str
    guest_email: str | None
    created_at: datetime


class ThreadSummary(BaseModel):
    listing_id: UUID
    guest_id: UUID
    host_id: UUID
    listing_title: str
    guest_email: str | None
    last_message: MessageResponse
    message_count: int
