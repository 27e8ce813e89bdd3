"""Admin console aggregates: dashboard stats, activity feed and analytics."""

from decimal import Decimal
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.domain import reports
from app.models.booking import Booking
from app.models.host import HostEarnings, HostProfile
from app.models.listing import Listing
from app.models.payment import Payment, Refund
from app.models.review import Review
from app.models.user import User
from app.utils.dates import as_utc


class AdminService:
    """Read-only views over the whole marketplace."""

    async def _count(self, db: AsyncSession, model, *criteria) -> int:
        query = select(func.count()).select_from(model)
        if criteria:
            query = query.where(*criteria)
        result = await db.execute(query)
        return result.scalar() or 0

    async def dashboard_stats(self, db: AsyncSession) -> dict[str, Any]:
        roles = await db.execute(select(User.role, func.count()).group_by(User.role))
        users_by_role = {role: count for role, count in roles.all()}

        earnings = await db.execute(
            select(func.coalesce(func.sum(HostEarnings.total_earnings), 0))
        )
        subscriptions = await db.execute(
            select(func.count(), func.coalesce(func.sum(Payment.amount), 0)).where(
                Payment.kind == "subscription"
            )
        )
        subscription_count, subscription_revenue = subscriptions.one()

        return {
            "users_by_role": users_by_role,
            "total_users": sum(users_by_role.values()),
            "total_hosts": await self._count(db, HostProfile),
            "total_listings": await self._count(db, Listing),
            "published_listings": await self._count(db, Listing, Listing.status == "published"),
            "total_bookings": await self._count(db, Booking),
            "total_earnings": Decimal(str(earnings.scalar() or 0)),
            "subscription_count": subscription_count or 0,
            "subscription_revenue": Decimal(str(subscription_revenue or 0)),
            "transaction_count": await self._count(db, Payment),
            "review_count": await self._count(db, Review),
            "currency": settings.currency,
        }

    async def recent_activity(self, db: AsyncSession, limit: int = 20) -> list[dict[str, Any]]:
        """Latest bookings, sign-ups and refunds merged newest first."""
        bookings = await db.execute(
            select(Booking).order_by(Booking.created_at.desc()).limit(limit)
        )
        users = await db.execute(select(User).order_by(User.created_at.desc()).limit(limit))
        refunds = await db.execute(select(Refund).order_by(Refund.created_at.desc()).limit(limit))

        items: list[dict[str, Any]] = []
        for booking in bookings.scalars():
            items.append({
                "type": "booking",
                "id": booking.id,
                "summary": f"Booking {booking.reference} for {booking.listing_title}",
                "status": booking.status,
                "created_at": as_utc(booking.created_at),
            })
        for user in users.scalars():
            items.append({
                "type": "user",
                "id": user.id,
                "summary": f"New {user.role} {user.email}",
                "status": "verified" if user.verified else "unverified",
                "created_at": as_utc(user.created_at),
            })
        for refund in refunds.scalars():
            items.append({
                "type": "refund",
                "id": refund.id,
                "summary": f"Refund of {refund.amount} for {refund.listing_title}",
                "status": refund.status,
                "created_at": as_utc(refund.created_at),
            })

        items.sort(key=lambda item: (item["created_at"] is not None, item["created_at"]), reverse=True)
        return items[:limit]

    async def analytics(self, db: AsyncSession) -> dict[str, Any]:
        statuses = await db.execute(
            select(Booking.status, func.count()).group_by(Booking.status)
        )
        revenue = await db.execute(
            select(func.coalesce(func.sum(Booking.total_price), 0)).where(
                Booking.paid.is_(True), Booking.status != "refunded"
            )
        )
        top_hosts = await db.execute(
            select(HostEarnings, User)
            .join(User, User.id == HostEarnings.host_id)
            .order_by(HostEarnings.total_earnings.desc())
            .limit(5)
        )
        best = await db.execute(
            select(Review).where(Review.rating >= 4).order_by(Review.rating.desc(), Review.created_at.desc()).limit(5)
        )
        lowest = await db.execute(
            select(Review).where(Review.rating <= 2).order_by(Review.rating, Review.created_at.desc()).limit(5)
        )

        return {
            "bookings_by_status": {status or "pending": count for status, count in statuses.all()},
            "total_revenue": Decimal(str(revenue.scalar() or 0)),
            "top_hosts": [
                {
                    "host_id": user.id,
                    "name": user.display_name,
                    "email": user.email,
                    "total_earnings": earnings.total_earnings,
                }
                for earnings, user in top_hosts.all()
            ],
            "best_reviews": list(best.scalars().all()),
            "lowest_reviews": list(lowest.scalars().all()),
        }

    async def list_payments(
        self,
        db: AsyncSession,
        status_filter: str | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[Payment], int]:
        """Payments newest first; status groups match pending/approved/rejected aliases."""
        result = await db.execute(select(Payment).order_by(Payment.created_at.desc()))
        matched = [
            payment
            for payment in result.scalars()
            if reports.payment_status_matches(status_filter, payment.status)
        ]
        start = (page - 1) * page_size
        return matched[start:start + page_size], len(matched)


admin_service = AdminService()
