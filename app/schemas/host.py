"""Host profile, plan and points schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class PlanResponse(BaseModel):
    key: str
    label: str
    price: Decimal
    listing_limit: int | None


class PlanUpgradeRequest(BaseModel):
    plan: str = Field(..., pattern="^(basic|pro|annual)$")
    subscription_id: str = Field(..., min_length=1, max_length=100)


class PointsSummary(BaseModel):
    lifetime: int
    available: int
    tier: str
    tier_label: str
    next_tier: str | None
    progress_percent: int
    points_to_next_tier: int
    points_this_week: int


class HostProfileResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: UUID
    subscription_plan: str | None
    subscription_price: Decimal | None
    listing_limit: int | None
    points_lifetime: int
    points_available: int
    points_tier: str


class HostAccountResponse(BaseModel):
    profile: HostProfileResponse
    plan_key: str | None
    upgrade_options: list[PlanResponse]
    points: PointsSummary
    effective_fee_percent: Decimal


class PointsEventResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    points: int
    reason: str
    event_metadata: dict[str, Any] = Field(serialization_alias="metadata")
    created_at: datetime


class RewardResponse(BaseModel):
    type: str
    title: str
    cost: int
    description: str
    duration_days: int | None = None
    discount_percent: Decimal | None = None


class RedeemRequest(BaseModel):
    reward: str = Field(..., pattern="^(fee_discount|free_listing|promotion_boost)$")


class RedeemResponse(BaseModel):
    reward: str
    cost: int
    points_available: int
    record_id: UUID
    valid_until: datetime | None = None


class HostDashboardResponse(BaseModel):
    total_listings: int
    published: int
    drafts: int
    total_earnings: Decimal
    currency: str
    pending_bookings: int
    pending_refunds: int
    points: PointsSummary


class HostNotification(BaseModel):
    id: str
    type: str  # booking, refund
    status: str | None
    created_at: datetime | None
    listing_title: str
    amount: Decimal | None = None


class CalendarEntry(BaseModel):
    booking_id: UUID
    reference: str
    listing_id: UUID
    listing_title: str
    check_in: str
    check_out: str
    status: str
    guest_count: int
