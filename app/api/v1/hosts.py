"""Host account endpoints: plan, points, rewards and dashboard."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_host_profile, get_db
from app.domain import plans, rewards
from app.models.host import HostFeeDiscount, HostPointsEvent, HostProfile, HostPromotion
from app.schemas.host import (
    HostAccountResponse,
    HostDashboardResponse,
    HostNotification,
    HostProfileResponse,
    PlanResponse,
    PlanUpgradeRequest,
    PointsEventResponse,
    PointsSummary,
    RedeemRequest,
    RedeemResponse,
    RewardResponse,
)
from app.services.earnings_service import earnings_service
from app.services.host_service import host_service
from app.services.points_service import points_service

router = APIRouter()


def _plan_response(plan: plans.Plan) -> PlanResponse:
    return PlanResponse(
        key=plan.key, label=plan.label, price=plan.price, listing_limit=plan.listing_limit
    )


@router.get("/me", response_model=HostAccountResponse)
async def get_my_host_account(
    profile: Annotated[HostProfile, Depends(get_current_host_profile)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> HostAccountResponse:
    """Plan, upgrade options, points and current platform fee."""
    plan_key = plans.plan_key_from_label(profile.subscription_plan)
    return HostAccountResponse(
        profile=HostProfileResponse.model_validate(profile),
        plan_key=plan_key,
        upgrade_options=[_plan_response(p) for p in plans.upgrade_options(plan_key)],
        points=PointsSummary(**await points_service.summary(db, profile)),
        effective_fee_percent=await earnings_service.effective_fee_percent(db, profile.user_id),
    )


@router.post("/me/plan", response_model=HostProfileResponse)
async def upgrade_plan(
    request: PlanUpgradeRequest,
    profile: Annotated[HostProfile, Depends(get_current_host_profile)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> HostProfile:
    """Move to a higher plan once its subscription is verified."""
    return await host_service.change_plan(db, profile, request.plan, request.subscription_id)


@router.get("/me/points", response_model=PointsSummary)
async def get_points(
    profile: Annotated[HostProfile, Depends(get_current_host_profile)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> PointsSummary:
    """Points summary; hosts that never got the signup bonus receive it now."""
    await points_service.grant_signup_bonus(db, profile)
    return PointsSummary(**await points_service.summary(db, profile))


@router.get("/me/points/events", response_model=list[PointsEventResponse])
async def list_points_events(
    profile: Annotated[HostProfile, Depends(get_current_host_profile)],
    db: Annotated[AsyncSession, Depends(get_db)],
    limit: int = Query(50, ge=1, le=200),
) -> list[HostPointsEvent]:
    """Points history, newest first."""
    return await host_service.points_events(db, profile.user_id, limit)


@router.get("/rewards", response_model=list[RewardResponse])
async def list_rewards() -> list[RewardResponse]:
    """Rewards available for points."""
    return [
        RewardResponse(
            type=reward.type.value,
            title=reward.title,
            cost=reward.cost,
            description=reward.description,
            duration_days=reward.duration_days,
            discount_percent=reward.discount_percent,
        )
        for reward in rewards.REWARDS.values()
    ]


@router.post("/me/redeem", response_model=RedeemResponse)
async def redeem_reward(
    request: RedeemRequest,
    profile: Annotated[HostProfile, Depends(get_current_host_profile)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> RedeemResponse:
    """Spend available points on a reward."""
    record = await points_service.redeem(db, profile, request.reward)
    reward = rewards.get_reward(request.reward)
    valid_until = (
        record.valid_until if isinstance(record, (HostFeeDiscount, HostPromotion)) else None
    )
    return RedeemResponse(
        reward=reward.type.value,
        cost=reward.cost,
        points_available=profile.points_available,
        record_id=record.id,
        valid_until=valid_until,
    )


@router.get("/me/fee")
async def get_platform_fee(
    profile: Annotated[HostProfile, Depends(get_current_host_profile)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """Platform fee applied to the host's next accepted booking."""
    fee = await earnings_service.effective_fee_percent(db, profile.user_id)
    return {"effective_fee_percent": str(fee)}


@router.get("/me/dashboard", response_model=HostDashboardResponse)
async def get_dashboard(
    profile: Annotated[HostProfile, Depends(get_current_host_profile)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> HostDashboardResponse:
    """Listing counts, earnings, pending work and points."""
    return HostDashboardResponse(**await host_service.dashboard(db, profile))


@router.get("/me/notifications", response_model=list[HostNotification])
async def get_notifications(
    profile: Annotated[HostProfile, Depends(get_current_host_profile)],
    db: Annotated[AsyncSession, Depends(get_db)],
    limit: int = Query(50, ge=1, le=200),
) -> list[HostNotification]:
    """Booking and refund activity, newest first."""
    return [HostNotification(**item) for item in await host_service.notifications(db, profile.user_id, limit)]
