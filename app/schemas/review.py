"""Review schemas."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class ReviewCreate(BaseModel):
    booking_id: UUID
    rating: int = Field(..., ge=1, le=5)
    comment: str | None = Field(None, max_length=5000)


class ReviewResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    booking_id: UUID
    listing_id: UUID
    guest_id: UUID
    guest_name: str
    listing_title: str
    rating: int
    comment: str | None
    created_at: datetime


class ListingReviewsResponse(BaseModel):
    reviews: list[ReviewResponse]
    total: int
    average_rating: Decimal | None
