"""Booking-related Pydantic schemas."""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator


class BookingQuoteRequest(BaseModel):
    listing_id: UUID
    check_in: date
    check_out: date
    guest_count: int = Field(default=1, ge=1, le=100)
    promo_code: str | None = Field(None, max_length=50)


class BookingQuoteResponse(BaseModel):
    listing_id: UUID
    nights: int
    rate: Decimal
    subtotal: Decimal
    discount_percent: Decimal
    discount_amount: Decimal
    total: Decimal
    promo_applied: bool
    currency: str = "PHP"


class BookingCreate(BookingQuoteRequest):
    """Book and optionally pay up front."""

    payment_method: str = Field(default="none", pattern="^(paypal|wallet|none)$")
    paypal_order_id: str | None = Field(None, max_length=100)
    payer_id: str | None = Field(None, max_length=100)

    @model_validator(mode="after")
    def paypal_needs_order(self) -> "BookingCreate":
        if self.payment_method == "paypal" and not self.paypal_order_id:
            raise ValueError("paypal_order_id is required for PayPal payments")
        return self


class BookingPayRequest(BaseModel):
    payment_method: str = Field(..., pattern="^(paypal|wallet)$")
    paypal_order_id: str | None = Field(None, max_length=100)
    payer_id: str | None = Field(None, max_length=100)

    @model_validator(mode="after")
    def paypal_needs_order(self) -> "BookingPayRequest":
        if self.payment_method == "paypal" and not self.paypal_order_id:
            raise ValueError("paypal_order_id is required for PayPal payments")
        return self


class BookingRespondRequest(BaseModel):
    status: str = Field(..., pattern="^(accepted|declined)$")


class BookingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    reference: str
    listing_id: UUID
    host_id: UUID
    guest_id: UUID
    listing_title: str
    listing_location: str | None
    check_in: date
    check_out: date
    nights: int
    guest_count: int
    rate: Decimal
    subtotal: Decimal
    discount_amount: Decimal
    total_price: Decimal
    promo_applied: bool
    promo_code: str | None
    payment_method: str
    paid: bool
    payment_id: str | None
    payment_date: datetime | None
    status: str
    platform_fee_percent: Decimal | None
    platform_fee_amount: Decimal | None
    host_net_amount: Decimal | None
    refund_requested: bool
    created_at: datetime


class BookingListResponse(BaseModel):
    bookings: list[BookingResponse]
    total: int
    page: int
    page_size: int
