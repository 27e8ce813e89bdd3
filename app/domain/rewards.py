"""Rewards hosts can buy with available points."""

from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from enum import Enum

from app.core.exceptions import InsufficientPoints, ValidationError


class RewardType(str, Enum):
    FEE_DISCOUNT = "fee_discount"
    FREE_LISTING = "free_listing"
    PROMOTION_BOOST = "promotion_boost"


@dataclass(frozen=True)
class Reward:
    type: RewardType
    title: str
    cost: int
    description: str
    duration_days: int | None = None
    discount_percent: Decimal | None = None


REWARDS: dict[RewardType, Reward] = {
    RewardType.FEE_DISCOUNT: Reward(
        type=RewardType.FEE_DISCOUNT,
        title="10% platform fee discount",
        cost=150,
        description="Reduce the platform fee on accepted bookings by 10 points for 30 days.",
        duration_days=30,
        discount_percent=Decimal("10"),
    ),
    RewardType.FREE_LISTING: Reward(
        type=RewardType.FREE_LISTING,
        title="One free extra listing",
        cost=200,
        description="Publish one listing beyond your plan's limit.",
    ),
    RewardType.PROMOTION_BOOST: Reward(
        type=RewardType.PROMOTION_BOOST,
        title="7-day promotion boost",
        cost=120,
        description="Feature your listings for 7 days.",
        duration_days=7,
    ),
}


def get_reward(reward_type: str) -> Reward:
    try:
        return REWARDS[RewardType(reward_type)]
    except ValueError:
        raise ValidationError(f"Unknown reward '{reward_type}'")


def spend(available: int, cost: int) -> int:
    """Remaining available points after paying `cost`."""
    if available < cost:
        raise InsufficientPoints(
            f"Not enough points. This reward costs {cost} points and you have {available}."
        )
    return max(0, available - cost)


def validity_window(reward: Reward, now: datetime) -> tuple[datetime, datetime]:
    return now, now + timedelta(days=reward.duration_days or 0)
