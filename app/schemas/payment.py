"""Payment, refund and wallet schemas."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class RefundCreate(BaseModel):
    reason: str = Field(..., min_length=3, max_length=2000)


class RefundDecision(BaseModel):
    status: str = Field(..., pattern="^(approved|rejected)$")


class RefundResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    booking_id: UUID
    guest_id: UUID
    host_id: UUID
    listing_id: UUID
    listing_title: str
    reason: str
    amount: Decimal
    status: str
    decided_at: datetime | None
    created_at: datetime


class WalletResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    balance: Decimal
    currency: str


class WalletTopUpRequest(BaseModel):
    paypal_order_id: str = Field(..., min_length=1, max_length=100)
    amount: Decimal = Field(..., gt=0, le=1000000)


class WalletTransactionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    type: str
    amount: Decimal
    booking_id: UUID | None
    refund_id: UUID | None
    paypal_order_id: str | None
    description: str | None
    created_at: datetime


class WalletTransactionListResponse(BaseModel):
    transactions: list[WalletTransactionResponse]
    total: int
    page: int
    page_size: int


class PaymentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    booking_id: UUID | None
    kind: str
    provider: str
    provider_reference: str | None
    amount: Decimal
    currency: str
    status: str
    admin_note: str | None
    created_at: datetime


class PaymentListResponse(BaseModel):
    payments: list[PaymentResponse]
    total: int
    page: int
    page_size: int


class PaymentStatusUpdate(BaseModel):
    status: str = Field(..., pattern="^(pending|approved|rejected)$")
    note: str | None = Field(None, max_length=1000)
