"""Host accounts: subscription plans, dashboard and notification feed."""

import logging
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.domain import plans
from app.models.booking import Booking
from app.models.host import HostPointsEvent, HostProfile
from app.models.payment import Refund
from app.models.user import User
from app.services.earnings_service import earnings_service
from app.services.gateway_service import gateway_service
from app.services.listing_service import listing_service
from app.services.payment_service import payment_service
from app.services.points_service import points_service
from app.utils.dates import as_utc

logger = logging.getLogger(__name__)


class HostService:
    """Host onboarding and account views."""

    async def create_profile(
        self,
        db: AsyncSession,
        user: User,
        plan_key: str,
        subscription_id: str,
    ) -> HostProfile:
        """Set up a new host: verified plan, signup bonus, earnings record.

        Raises:
            PaymentError: If the subscription cannot be verified
        """
        plan = plans.get_plan(plan_key)
        await gateway_service.verify_subscription(subscription_id, plan.key)

        profile = HostProfile(
            user_id=user.id,
            subscription_plan=plan.label,
            subscription_price=plan.price,
            listing_limit=plan.listing_limit,
            paypal_subscription_id=subscription_id,
            points_lifetime=0,
            points_available=0,
            points_tier="bronze",
            signup_points_granted=False,
        )
        db.add(profile)
        await db.flush()

        await points_service.grant_signup_bonus(db, profile)
        await earnings_service.get_or_create(db, user.id)
        await payment_service.record(
            db,
            user.id,
            "subscription",
            gateway_service.provider,
            plan.price,
            provider_reference=subscription_id,
        )
        logger.info(f"Host profile created for {user.email} on {plan.label}")
        return profile

    async def change_plan(
        self,
        db: AsyncSession,
        profile: HostProfile,
        target_key: str,
        subscription_id: str,
    ) -> HostProfile:
        """Move the host up the plan ladder after verifying the new subscription."""
        current_key = plans.plan_key_from_label(profile.subscription_plan)
        target = plans.assert_upgrade_allowed(current_key, target_key)
        await gateway_service.verify_subscription(subscription_id, target.key)

        profile.subscription_plan = target.label
        profile.subscription_price = target.price
        profile.listing_limit = target.listing_limit
        profile.paypal_subscription_id = subscription_id

        await payment_service.record(
            db,
            profile.user_id,
            "subscription",
            gateway_service.provider,
            target.price,
            provider_reference=subscription_id,
        )
        logger.info(f"Host {profile.user_id} changed plan {current_key} -> {target.key}")
        return profile

    async def dashboard(self, db: AsyncSession, profile: HostProfile) -> dict[str, Any]:
        host_id = profile.user_id
        counts = await listing_service.count_by_status(db, host_id)
        earnings = await earnings_service.get_or_create(db, host_id)

        pending_bookings = await db.execute(
            select(func.count()).select_from(Booking).where(
                Booking.host_id == host_id, Booking.status == "pending"
            )
        )
        pending_refunds = await db.execute(
            select(func.count()).select_from(Refund).where(
                Refund.host_id == host_id, Refund.status == "pending"
            )
        )

        return {
            "total_listings": counts["total"],
            "published": counts["published"],
            "drafts": counts["drafts"],
            "total_earnings": earnings.total_earnings,
            "currency": earnings.currency or settings.currency,
            "pending_bookings": pending_bookings.scalar() or 0,
            "pending_refunds": pending_refunds.scalar() or 0,
            "points": await points_service.summary(db, profile),
        }

    async def notifications(self, db: AsyncSession, host_id, limit: int = 50) -> list[dict[str, Any]]:
        """Feed derived from the host's bookings and refunds, newest first."""
        bookings = await db.execute(
            select(Booking)
            .where(Booking.host_id == host_id)
            .order_by(Booking.created_at.desc())
            .limit(limit)
        )
        refunds = await db.execute(
            select(Refund)
            .where(Refund.host_id == host_id)
            .order_by(Refund.created_at.desc())
            .limit(limit)
        )

        feed: list[dict[str, Any]] = []
        for booking in bookings.scalars():
            feed.append({
                "id": f"booking-{booking.id}",
                "type": "booking",
                "status": booking.status,
                "created_at": as_utc(booking.created_at),
                "listing_title": booking.listing_title,
                "amount": booking.total_price,
            })
        for refund in refunds.scalars():
            feed.append({
                "id": f"refund-{refund.id}",
                "type": "refund",
                "status": refund.status,
                "created_at": as_utc(refund.created_at),
                "listing_title": refund.listing_title,
                "amount": refund.amount,
            })

        # Undated entries sink to the bottom
        feed.sort(key=lambda item: (item["created_at"] is not None, item["created_at"]), reverse=True)
        return feed[:limit]

    async def points_events(self, db: AsyncSession, host_id, limit: int = 50) -> list[HostPointsEvent]:
        result = await db.execute(
            select(HostPointsEvent)
            .where(HostPointsEvent.host_id == host_id)
            .order_by(HostPointsEvent.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())


# Singleton instance
host_service = HostService()
