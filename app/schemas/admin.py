"""Admin console schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from app.schemas.review import ReviewResponse


class DashboardStats(BaseModel):
    users_by_role: dict[str, int]
    total_users: int
    total_hosts: int
    total_listings: int
    published_listings: int
    total_bookings: int
    total_earnings: Decimal
    subscription_count: int
    subscription_revenue: Decimal
    transaction_count: int
    review_count: int
    currency: str = "PHP"


class ActivityItem(BaseModel):
    type: str  # booking, user, refund
    id: UUID
    summary: str
    status: str | None = None
    created_at: datetime | None


class HostEarningsRow(BaseModel):
    host_id: UUID
    name: str
    email: str
    total_earnings: Decimal


class AnalyticsResponse(BaseModel):
    bookings_by_status: dict[str, int]
    total_revenue: Decimal
    top_hosts: list[HostEarningsRow]
    best_reviews: list[ReviewResponse]
    lowest_reviews: list[ReviewResponse]


class ReportResponse(BaseModel):
    report_type: str
    title: str
    period: str
    period_start: datetime
    period_end: datetime
    status_filter: str
    rows: list[dict[str, Any]]
    total: int


class AdminUserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    name: str
    role: str
    verified: bool
    is_active: bool
    created_at: datetime
    last_login_at: datetime | None


class AdminUserListResponse(BaseModel):
    users: list[AdminUserResponse]
    total: int
    page: int
    page_size: int


class UserStatusUpdate(BaseModel):
    is_active: bool


class LedgerHealthRunResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    status: str
    checks: list[dict[str, Any]]
    counts: dict[str, int]
    trigger: str
    started_at: datetime
    completed_at: datetime
    duration_ms: int
    error_message: str | None
