"""Admin panel endpoints."""

from datetime import date
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from fastapi.responses import HTMLResponse, PlainTextResponse
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db
from app.core.background_tasks import latest_health_run, record_health_run
from app.core.exceptions import NotFoundError, ValidationError
from app.core.permissions import (
    require_health_checks,
    require_payment_management,
    require_reports,
    require_user_management,
)
from app.models.health import LedgerHealthRun
from app.models.payment import Payment
from app.models.user import User
from app.schemas.admin import (
    ActivityItem,
    AdminUserListResponse,
    AdminUserResponse,
    AnalyticsResponse,
    DashboardStats,
    HostEarningsRow,
    LedgerHealthRunResponse,
    ReportResponse,
    UserStatusUpdate,
)
from app.schemas.payment import PaymentListResponse, PaymentResponse, PaymentStatusUpdate
from app.schemas.review import ReviewResponse
from app.services.admin_service import admin_service
from app.services.payment_service import payment_service
from app.services.report_service import report_service

router = APIRouter()


# ============ DASHBOARD ============


@router.get("/stats", response_model=DashboardStats)
async def get_dashboard_stats(
    admin: Annotated[User, Depends(require_reports)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> DashboardStats:
    """Platform-wide totals."""
    return DashboardStats(**await admin_service.dashboard_stats(db))


@router.get("/activity", response_model=list[ActivityItem])
async def get_recent_activity(
    admin: Annotated[User, Depends(require_reports)],
    db: Annotated[AsyncSession, Depends(get_db)],
    limit: int = Query(20, ge=1, le=100),
) -> list[ActivityItem]:
    """Latest bookings, sign-ups and refunds."""
    return [ActivityItem(**item) for item in await admin_service.recent_activity(db, limit)]


@router.get("/analytics", response_model=AnalyticsResponse)
async def get_analytics(
    admin: Annotated[User, Depends(require_reports)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AnalyticsResponse:
    """Booking mix, revenue, top hosts and review extremes."""
    data = await admin_service.analytics(db)
    return AnalyticsResponse(
        bookings_by_status=data["bookings_by_status"],
        total_revenue=data["total_revenue"],
        top_hosts=[HostEarningsRow(**row) for row in data["top_hosts"]],
        best_reviews=[ReviewResponse.model_validate(r) for r in data["best_reviews"]],
        lowest_reviews=[ReviewResponse.model_validate(r) for r in data["lowest_reviews"]],
    )


# ============ PAYMENTS ============


@router.get("/payments", response_model=PaymentListResponse)
async def list_payments(
    admin: Annotated[User, Depends(require_payment_management)],
    db: Annotated[AsyncSession, Depends(get_db)],
    status_filter: str | None = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
) -> PaymentListResponse:
    """All payments, newest first."""
    payments, total = await admin_service.list_payments(db, status_filter, page, page_size)
    return PaymentListResponse(
        payments=[PaymentResponse.model_validate(p) for p in payments],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.patch("/payments/{payment_id}", response_model=PaymentResponse)
async def update_payment_status(
    payment_id: UUID,
    update: PaymentStatusUpdate,
    admin: Annotated[User, Depends(require_payment_management)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Payment:
    """Approve or reject a payment record with an optional note."""
    payment = await db.get(Payment, payment_id)
    if not payment:
        raise NotFoundError("Payment", str(payment_id))
    return payment_service.update_status(payment, update.status, update.note)


# ============ REPORTS ============


@router.get("/reports/{report_type}", response_model=ReportResponse)
async def get_report(
    report_type: str,
    admin: Annotated[User, Depends(require_reports)],
    db: Annotated[AsyncSession, Depends(get_db)],
    period: str = Query("month", pattern="^(week|month|year)$"),
    base_date: date | None = Query(None),
    status_filter: str = Query("all", alias="status"),
) -> ReportResponse:
    """Report rows as JSON."""
    report = await report_service.build(db, report_type, period, base_date, status_filter)
    return ReportResponse(**report)


@router.get("/reports/{report_type}/csv")
async def export_report_csv(
    report_type: str,
    admin: Annotated[User, Depends(require_reports)],
    db: Annotated[AsyncSession, Depends(get_db)],
    period: str = Query("month", pattern="^(week|month|year)$"),
    base_date: date | None = Query(None),
    status_filter: str = Query("all", alias="status"),
) -> PlainTextResponse:
    """Report rows as a CSV download."""
    report = await report_service.build(db, report_type, period, base_date, status_filter)
    if not report["rows"]:
        raise ValidationError("No records match the selected filters")
    return PlainTextResponse(
        content=report_service.to_csv(report),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={report_type}-report.csv"},
    )


@router.get("/reports/{report_type}/html", response_class=HTMLResponse)
async def print_report(
    report_type: str,
    admin: Annotated[User, Depends(require_reports)],
    db: Annotated[AsyncSession, Depends(get_db)],
    period: str = Query("month", pattern="^(week|month|year)$"),
    base_date: date | None = Query(None),
    status_filter: str = Query("all", alias="status"),
) -> HTMLResponse:
    """Printable report page."""
    report = await report_service.build(db, report_type, period, base_date, status_filter)
    return HTMLResponse(report_service.to_html(report))


@router.get("/policies/html", response_class=HTMLResponse)
async def print_policies(
    admin: Annotated[User, Depends(require_reports)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> HTMLResponse:
    """Printable policies and compliance page."""
    return HTMLResponse(await report_service.policies_html(db))


# ============ USERS ============


@router.get("/users", response_model=AdminUserListResponse)
async def list_users(
    admin: Annotated[User, Depends(require_user_management)],
    db: Annotated[AsyncSession, Depends(get_db)],
    role: str | None = Query(None, pattern="^(guest|host|admin)$"),
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=200),
) -> AdminUserListResponse:
    """List users with optional role filter."""
    query = select(User)
    if role:
        query = query.where(User.role == role)

    count_result = await db.execute(select(func.count()).select_from(query.subquery()))
    total = count_result.scalar() or 0

    result = await db.execute(
        query.order_by(User.created_at.desc()).offset((page - 1) * page_size).limit(page_size)
    )
    return AdminUserListResponse(
        users=[AdminUserResponse.model_validate(u) for u in result.scalars().all()],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.patch("/users/{user_id}", response_model=AdminUserResponse)
async def update_user_status(
    user_id: UUID,
    update: UserStatusUpdate,
    admin: Annotated[User, Depends(require_user_management)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """Activate or deactivate an account."""
    user = await db.get(User, user_id)
    if not user:
        raise NotFoundError("User", str(user_id))
    if user.id == admin.id and not update.is_active:
        raise ValidationError("You cannot deactivate your own account")

    user.is_active = update.is_active
    return user


# ============ LEDGER HEALTH ============


@router.get("/health/ledger", response_model=LedgerHealthRunResponse)
async def get_latest_ledger_health(
    admin: Annotated[User, Depends(require_health_checks)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> LedgerHealthRun:
    """Most recent ledger health run."""
    health_run = await latest_health_run(db)
    if not health_run:
        raise NotFoundError("Ledger health run")
    return health_run


@router.post("/health/ledger", response_model=LedgerHealthRunResponse)
async def run_ledger_health(
    admin: Annotated[User, Depends(require_health_checks)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> LedgerHealthRun:
    """Run the ledger checks now and store the result."""
    return await record_health_run(db, trigger="manual")
