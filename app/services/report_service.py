"""Admin reports: filtered rows, CSV export and printable HTML pages."""

import csv
import io
import logging
from datetime import date
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ValidationError
from app.domain import reports
from app.domain.reports import Period, ReportType
from app.models.booking import Booking
from app.models.host import HostEarnings, HostProfile
from app.models.listing import Listing
from app.models.user import User
from app.utils.dates import as_utc, utcnow
from app.utils.templating import render_template

logger = logging.getLogger(__name__)

POLICY_SECTIONS = [
    {
        "heading": "Cancellation Rules",
        "items": [
            "Guests can cancel up to 24 hours before check-in for a full refund.",
            "Hosts must approve cancellations within 48 hours.",
            "Service fees are non-refundable in case of no-show.",
        ],
    },
    {
        "heading": "Rules & Regulations",
        "items": [
            "All listings must comply with local laws and regulations.",
            "Hosts are responsible for accurate listing information.",
            "Platform reserves the right to remove listings that violate policies.",
        ],
    },
]


def _fmt(value: Any) -> Any:
    if hasattr(value, "isoformat"):
        return value.isoformat()
    if value is None:
        return ""
    return value


class ReportService:
    """Builds report rows for the admin console."""

    def _resolve(self, report_type: str) -> ReportType:
        try:
            return ReportType(report_type)
        except ValueError:
            raise ValidationError(f"Unknown report type '{report_type}'")

    async def _booking_rows(self, db, window, status_filter) -> list[dict[str, Any]]:
        result = await db.execute(select(Booking).order_by(Booking.created_at.desc()))
        rows = []
        for booking in result.scalars():
            if not reports.in_window(booking.created_at, window):
                continue
            if not reports.status_matches(status_filter, booking.status):
                continue
            rows.append({
                "reference": booking.reference,
                "listing": booking.listing_title,
                "category": booking.listing_category,
                "check_in": _fmt(booking.check_in),
                "check_out": _fmt(booking.check_out),
                "guests": booking.guest_count,
                "total_price": str(booking.total_price),
                "status": booking.status,
                "paid": booking.paid,
                "created_at": _fmt(as_utc(booking.created_at)),
            })
        return rows

    async def _earnings_rows(self, db, window) -> list[dict[str, Any]]:
        result = await db.execute(
            select(HostEarnings, User)
            .join(User, User.id == HostEarnings.host_id)
            .order_by(HostEarnings.total_earnings.desc())
        )
        rows = []
        for earnings, user in result.all():
            # Running totals: filter on last movement
            if not reports.in_window(earnings.updated_at, window):
                continue
            rows.append({
                "host": user.display_name,
                "email": user.email,
                "total_earnings": str(earnings.total_earnings),
                "currency": earnings.currency,
                "updated_at": _fmt(as_utc(earnings.updated_at)),
            })
        return rows

    async def _host_rows(self, db, window) -> list[dict[str, Any]]:
        listing_counts = (
            select(Listing.host_id, func.count().label("listings"))
            .group_by(Listing.host_id)
            .subquery()
        )
        result = await db.execute(
            select(HostProfile, User, listing_counts.c.listings)
            .join(User, User.id == HostProfile.user_id)
            .outerjoin(listing_counts, listing_counts.c.host_id == HostProfile.user_id)
            .order_by(HostProfile.created_at.desc())
        )
        rows = []
        for profile, user, listings in result.all():
            if not reports.in_window(profile.created_at, window):
                continue
            rows.append({
                "host": user.display_name,
                "email": user.email,
                "plan": profile.subscription_plan or "",
                "listing_limit": profile.listing_limit if profile.listing_limit is not None else "unlimited",
                "listings": listings or 0,
                "points_tier": profile.points_tier,
                "joined": _fmt(as_utc(profile.created_at)),
            })
        return rows

    async def build(
        self,
        db: AsyncSession,
        report_type: str,
        period: str = Period.MONTH.value,
        base_date: date | None = None,
        status_filter: str = "all",
    ) -> dict[str, Any]:
        """Rows of one report type inside the period containing base_date.

        The booking status filter only applies to the bookings report.
        """
        kind = self._resolve(report_type)
        base_date = base_date or utcnow().date()
        window = reports.period_window(period, base_date)

        if kind is ReportType.BOOKINGS:
            rows = await self._booking_rows(db, window, status_filter)
        elif kind is ReportType.EARNINGS:
            rows = await self._earnings_rows(db, window)
        else:
            rows = await self._host_rows(db, window)

        logger.info(f"Built {kind.value} report for {period} of {base_date}: {len(rows)} rows")
        return {
            "report_type": kind.value,
            "title": reports.REPORT_TITLES[kind],
            "period": period,
            "period_start": window[0],
            "period_end": window[1],
            "status_filter": status_filter or "all",
            "rows": rows,
            "total": len(rows),
        }

    def to_csv(self, report: dict[str, Any]) -> str:
        rows = report["rows"]
        if not rows:
            return ""
        output = io.StringIO()
        writer = csv.writer(output)
        headers = list(rows[0].keys())
        writer.writerow(headers)
        for row in rows:
            writer.writerow([row.get(key, "") for key in headers])
        return output.getvalue()

    def to_html(self, report: dict[str, Any]) -> str:
        rows = report["rows"]
        return render_template(
            "reports/report.html",
            title=report["title"],
            generated_at=utcnow().strftime("%Y-%m-%d %H:%M UTC"),
            headers=list(rows[0].keys()) if rows else [],
            rows=rows,
        )

    async def policies_html(self, db: AsyncSession) -> str:
        """Printable policies page with a live compliance overview."""
        hosts = await db.execute(select(func.count()).select_from(HostProfile))
        verified = await db.execute(
            select(func.count()).select_from(User).where(User.verified.is_(True))
        )
        published = await db.execute(
            select(func.count()).select_from(Listing).where(Listing.status == "published")
        )
        bookings = await db.execute(select(func.count()).select_from(Booking))

        compliance = [
            ("Registered hosts", hosts.scalar() or 0),
            ("Verified accounts", verified.scalar() or 0),
            ("Published listings", published.scalar() or 0),
            ("Total bookings", bookings.scalar() or 0),
        ]
        return render_template(
            "reports/policies.html",
            title="Policies & Compliance",
            generated_at=utcnow().strftime("%Y-%m-%d %H:%M UTC"),
            sections=POLICY_SECTIONS,
            compliance=compliance,
        )


report_service = ReportService()
