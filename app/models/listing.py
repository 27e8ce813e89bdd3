"""Listing database model."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import JSON, Date, DateTime, ForeignKey, Integer, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from app.database import Base
from app.utils.dates import utcnow


class Listing(Base):
    """A rentable home, experience or service offered by a host."""

    __tablename__ = "listings"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    host_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # Basic Info
    title: Mapped[str] = mapped_column(String(150), nullable=False)
    category: Mapped[str] = mapped_column(
        String(20), nullable=False, default="home", index=True
    )  # home, experience, service
    description: Mapped[str | None] = mapped_column(Text)
    location: Mapped[str] = mapped_column(String(255), nullable=False)
    latitude: Mapped[Decimal | None] = mapped_column(Numeric(10, 7))
    longitude: Mapped[Decimal | None] = mapped_column(Numeric(10, 7))

    # Media
    cover_image: Mapped[str | None] = mapped_column(Text)
    image_urls: Mapped[list[str]] = mapped_column(JSON, default=list)

    # Pricing (PHP per night / per session)
    rate: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"))
    discount: Mapped[Decimal] = mapped_column(Numeric(5, 2), default=Decimal("0"))  # percent
    promo: Mapped[str | None] = mapped_column(String(50))  # code that unlocks the discount

    # Details
    max_guests: Mapped[int | None] = mapped_column(Integer)
    amenities: Mapped[list[str]] = mapped_column(JSON, default=list)
    rules: Mapped[list[str]] = mapped_column(JSON, default=list)
    availability_start: Mapped[date | None] = mapped_column(Date)
    availability_end: Mapped[date | None] = mapped_column(Date)

    # Service listings
    service_category: Mapped[str | None] = mapped_column(String(100))
    service_area: Mapped[str | None] = mapped_column(String(255))
    service_duration: Mapped[str | None] = mapped_column(String(100))
    service_time_slots: Mapped[list[str]] = mapped_column(JSON, default=list)

    # Status
    status: Mapped[str] = mapped_column(
        String(20), default="draft", index=True
    )  # draft, published
    published_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    # Set once the first publish has been rewarded with points
    publish_rewarded: Mapped[bool] = mapped_column(default=False)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow
    )

    @property
    def is_published(self) -> bool:
        return self.status == "published"

    def keyword_pool(self) -> set[str]:
        """Lowercased tokens used when matching wishlist tags."""
        from app.utils.validators import split_list_field

        tokens: set[str] = set()
        for field in (
            self.amenities,
            self.rules,
            self.service_category,
            self.service_area,
            self.service_duration,
            self.service_time_slots,
            self.title,
            self.description,
        ):
            tokens.update(split_list_field(field))
        return tokens
