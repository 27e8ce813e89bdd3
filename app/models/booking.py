"""Booking database model."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import Boolean, Date, DateTime, ForeignKey, Integer, Numeric, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from app.database import Base
from app.utils.dates import utcnow


class Booking(Base):
    """A guest's reservation against a listing."""

    __tablename__ = "bookings"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    reference: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    listing_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("listings.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    host_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False, index=True
    )
    guest_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False, index=True
    )
    listing_title: Mapped[str] = mapped_column(String(150), default="")
    listing_location: Mapped[str | None] = mapped_column(String(255))
    listing_category: Mapped[str | None] = mapped_column(String(20))

    # Stay
    check_in: Mapped[date] = mapped_column(Date, nullable=False)
    check_out: Mapped[date] = mapped_column(Date, nullable=False)
    nights: Mapped[int] = mapped_column(Integer, nullable=False)
    guest_count: Mapped[int] = mapped_column(Integer, default=1)

    # Pricing (PHP)
    rate: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    subtotal: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    discount_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"))
    total_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    promo_applied: Mapped[bool] = mapped_column(Boolean, default=False)
    promo_code: Mapped[str | None] = mapped_column(String(50))

    # Payment
    payment_method: Mapped[str] = mapped_column(String(20), default="none")  # paypal, wallet, none
    paid: Mapped[bool] = mapped_column(Boolean, default=False)
    payment_id: Mapped[str | None] = mapped_column(String(100))
    payment_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    paypal_order_id: Mapped[str | None] = mapped_column(String(100))
    payer_id: Mapped[str | None] = mapped_column(String(100))

    # Status
    status: Mapped[str] = mapped_column(
        String(20), default="pending", index=True
    )  # pending, accepted, declined, confirmed, refunded
    responded_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    # Set when the host accepts
    platform_fee_percent: Mapped[Decimal | None] = mapped_column(Numeric(5, 2))
    platform_fee_amount: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))
    host_net_amount: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))

    refund_requested: Mapped[bool] = mapped_column(Boolean, default=False)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow
    )

    def email_details(self) -> dict[str, str]:
        """Fields rendered into guest booking/refund emails."""
        return {
            "reference": self.reference,
            "listing_title": self.listing_title or "N/A",
            "location": self.listing_location or "N/A",
            "check_in": self.check_in.isoformat(),
            "check_out": self.check_out.isoformat(),
            "guest_count": str(self.guest_count),
            "total_price": f"PHP {self.total_price:,.2f}",
        }
