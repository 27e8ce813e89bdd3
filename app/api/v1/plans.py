"""Subscription plan catalog."""

from fastapi import APIRouter

from app.domain.plans import PLANS
from app.schemas.host import PlanResponse

router = APIRouter()


@router.get("/", response_model=list[PlanResponse])
async def list_plans() -> list[PlanResponse]:
    """Plans a host can subscribe to."""
    return [
        PlanResponse(key=p.key, label=p.label, price=p.price, listing_limit=p.listing_limit)
        for p in PLANS.values()
    ]
