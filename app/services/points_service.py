"""Host loyalty points: awards, redemptions and the points summary."""

import logging
from datetime import timedelta
from typing import Any
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.domain import rewards, tiers
from app.domain.rewards import RewardType
from app.models.host import (
    HostFeeDiscount,
    HostFreeListing,
    HostPointsEvent,
    HostProfile,
    HostPromotion,
)
from app.utils.dates import utcnow

logger = logging.getLogger(__name__)


class PointsService:
    """Keeps a host's lifetime/available totals and event log in step."""

    async def award(
        self,
        db: AsyncSession,
        profile: HostProfile,
        points: int,
        reason: str,
        metadata: dict[str, Any] | None = None,
    ) -> HostPointsEvent:
        """Add points to both totals and recompute the tier from lifetime.

        Args:
            db: Database session
            profile: Host profile to credit
            points: Positive number of points
            reason: Event reason, e.g. "completed_booking"
            metadata: Extra event data (booking id, listing id)

        Returns:
            HostPointsEvent: The appended event
        """
        profile.points_lifetime += points
        profile.points_available += points
        profile.points_tier = tiers.tier_for(profile.points_lifetime).key

        event = HostPointsEvent(
            host_id=profile.user_id,
            points=points,
            reason=reason,
            event_metadata=metadata or {},
        )
        db.add(event)
        await db.flush()
        logger.info(f"Awarded {points} points to host {profile.user_id} ({reason})")
        return event

    async def grant_signup_bonus(self, db: AsyncSession, profile: HostProfile) -> bool:
        """One-time bonus for hosts that never received any points."""
        if profile.signup_points_granted or profile.points_lifetime > 0:
            return False
        await self.award(db, profile, settings.signup_bonus_points, "signup_bonus")
        profile.signup_points_granted = True
        return True

    async def points_this_week(self, db: AsyncSession, host_id: UUID) -> int:
        """Net points from events in the last 7 days."""
        since = utcnow() - timedelta(days=7)
        result = await db.execute(
            select(func.coalesce(func.sum(HostPointsEvent.points), 0)).where(
                HostPointsEvent.host_id == host_id,
                HostPointsEvent.created_at >= since,
                HostPointsEvent.points > 0,
            )
        )
        return int(result.scalar() or 0)

    async def summary(self, db: AsyncSession, profile: HostProfile) -> dict[str, Any]:
        """Totals, tier progress and weekly activity for the host account page."""
        lifetime = profile.points_lifetime
        current = tiers.tier_for(lifetime)
        upcoming = tiers.next_tier(current)
        return {
            "lifetime": lifetime,
            "available": profile.points_available,
            "tier": current.key,
            "tier_label": current.label,
            "next_tier": upcoming.key if upcoming else None,
            "progress_percent": tiers.tier_progress(lifetime),
            "points_to_next_tier": tiers.points_to_next_tier(lifetime),
            "points_this_week": await self.points_this_week(db, profile.user_id),
        }

    async def redeem(
        self,
        db: AsyncSession,
        profile: HostProfile,
        reward_type: str,
    ) -> HostFeeDiscount | HostFreeListing | HostPromotion:
        """Spend available points on a reward and create its record.

        Raises:
            InsufficientPoints: If available points are below the cost
            ValidationError: For unknown reward types
        """
        reward = rewards.get_reward(reward_type)
        profile.points_available = rewards.spend(profile.points_available, reward.cost)
        # Tier stays derived from lifetime points
        profile.points_tier = tiers.tier_for(profile.points_lifetime).key

        now = utcnow()
        record: HostFeeDiscount | HostFreeListing | HostPromotion
        if reward.type == RewardType.FEE_DISCOUNT:
            valid_from, valid_until = rewards.validity_window(reward, now)
            record = HostFeeDiscount(
                host_id=profile.user_id,
                discount_percent=reward.discount_percent,
                valid_from=valid_from,
                valid_until=valid_until,
                cost=reward.cost,
            )
        elif reward.type == RewardType.FREE_LISTING:
            record = HostFreeListing(
                host_id=profile.user_id,
                remaining_listings=1,
                cost=reward.cost,
            )
        else:
            valid_from, valid_until = rewards.validity_window(reward, now)
            record = HostPromotion(
                host_id=profile.user_id,
                valid_from=valid_from,
                valid_until=valid_until,
                cost=reward.cost,
            )
        db.add(record)

        db.add(
            HostPointsEvent(
                host_id=profile.user_id,
                points=-reward.cost,
                reason=f"redeem_{reward.type.value}",
                event_metadata={"reward": reward.type.value},
            )
        )
        await db.flush()
        logger.info(f"Host {profile.user_id} redeemed {reward.type.value} for {reward.cost} points")
        return record


# Singleton instance
points_service = PointsService()
