"""Listing-related Pydantic schemas."""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

CATEGORY_PATTERN = "^(home|experience|service)$"


class ListingFields(BaseModel):
    """Fields shared by create and update (all optional)."""

    description: str | None = Field(None, max_length=5000)
    latitude: Decimal | None = Field(None, ge=-90, le=90)
    longitude: Decimal | None = Field(None, ge=-180, le=180)
    cover_image: str | None = None
    image_urls: list[str] | None = None
    rate: Decimal | None = Field(None, ge=0, le=10000000)
    discount: Decimal | None = Field(None, ge=0, le=100)
    promo: str | None = Field(None, max_length=50)
    max_guests: int | None = Field(None, ge=1, le=100)
    amenities: list[str] | None = None
    rules: list[str] | None = None
    availability_start: date | None = None
    availability_end: date | None = None
    service_category: str | None = Field(None, max_length=100)
    service_area: str | None = Field(None, max_length=255)
    service_duration: str | None = Field(None, max_length=100)
    service_time_slots: list[str] | None = None

    @field_validator("promo")
    @classmethod
    def strip_promo(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return v.strip() or None

    @model_validator(mode="after")
    def check_availability(self) -> "ListingFields":
        if (
            self.availability_start
            and self.availability_end
            and self.availability_end < self.availability_start
        ):
            raise ValueError("Availability end date cannot be before the start date")
        return self


class ListingCreate(ListingFields):
    """Schema for creating a listing (always starts as a draft)."""

    title: str = Field(..., max_length=150)
    location: str = Field(..., max_length=255)
    category: str = Field(default="home", pattern=CATEGORY_PATTERN)
    rate: Decimal = Field(default=Decimal("0"), ge=0, le=10000000)
    discount: Decimal = Field(default=Decimal("0"), ge=0, le=100)

    @field_validator("title", "location")
    @classmethod
    def required_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("This field is required")
        return v


class ListingUpdate(ListingFields):
    """Schema for updating a listing."""

    title: str | None = Field(None, min_length=1, max_length=150)
    location: str | None = Field(None, min_length=1, max_length=255)
    category: str | None = Field(None, pattern=CATEGORY_PATTERN)


class ListingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    host_id: UUID
    title: str
    category: str
    description: str | None
    location: str
    latitude: Decimal | None
    longitude: Decimal | None
    cover_image: str | None
    image_urls: list[str]
    rate: Decimal
    discount: Decimal
    promo: str | None
    max_guests: int | None
    amenities: list[str]
    rules: list[str]
    availability_start: date | None
    availability_end: date | None
    service_category: str | None
    service_area: str | None
    service_duration: str | None
    service_time_slots: list[str]
    status: str
    published_at: datetime | None
    created_at: datetime


class PublicListingResponse(ListingResponse):
    """Listing as shown to guests; the promo code stays secret."""

    promo: str | None = Field(None, exclude=True)
    has_promo: bool = False
    match_score: int | None = None


class ListingListResponse(BaseModel):
    listings: list[PublicListingResponse]
    total: int
    page: int
    page_size: int


class HostListingsResponse(BaseModel):
    listings: list[ListingResponse]
    total: int
    published: int
    drafts: int
