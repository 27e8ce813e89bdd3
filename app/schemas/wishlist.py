"""Favorites and wishlist schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


class FavoriteToggleResponse(BaseModel):
    listing_id: UUID
    favorited: bool


class WishlistSuggestionCreate(BaseModel):
    booking_id: UUID
    message: str = Field(..., min_length=1, max_length=2000)

    @field_validator("message")
    @classmethod
    def strip_message(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Suggestion cannot be empty")
        return v


class WishlistSuggestionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    host_id: UUID
    guest_id: UUID
    listing_id: UUID
    booking_id: UUID
    message: str
    created_at: datetime


class WishlistPreferences(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    categories: list[str] = Field(default_factory=list)
    tags: dict[str, list[str]] = Field(default_factory=dict)

    @field_validator("categories")
    @classmethod
    def known_categories(cls, v: list[str]) -> list[str]:
        allowed = {"home", "experience", "service"}
        unknown = [c for c in v if c not in allowed]
        if unknown:
            raise ValueError(f"Unknown categories: {', '.join(unknown)}")
        # keep order, drop duplicates
        return list(dict.fromkeys(v))
