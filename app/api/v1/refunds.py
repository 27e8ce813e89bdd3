"""Refund endpoints: host review queue and guest history."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_host, get_current_verified_user, get_db
from app.core.exceptions import AuthorizationError, NotFoundError
from app.models.payment import Refund
from app.models.user import User
from app.schemas.payment import RefundDecision, RefundResponse
from app.services.booking_service import booking_service
from app.services.email_service import email_service

router = APIRouter()


@router.get("/", response_model=list[RefundResponse])
async def list_host_refunds(
    current_user: Annotated[User, Depends(get_current_host)],
    db: Annotated[AsyncSession, Depends(get_db)],
    status_filter: str | None = Query(None, alias="status", pattern="^(pending|approved|rejected)$"),
) -> list[Refund]:
    """Refund requests against the host's bookings, newest first."""
    query = select(Refund).where(Refund.host_id == current_user.id)
    if status_filter:
        query = query.where(Refund.status == status_filter)
    result = await db.execute(query.order_by(Refund.created_at.desc()))
    return list(result.scalars().all())


@router.get("/mine", response_model=list[RefundResponse])
async def list_my_refunds(
    current_user: Annotated[User, Depends(get_current_verified_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[Refund]:
    """Refunds the current user requested as a guest."""
    result = await db.execute(
        select(Refund).where(Refund.guest_id == current_user.id).order_by(Refund.created_at.desc())
    )
    return list(result.scalars().all())


@router.post("/{refund_id}/decide", response_model=RefundResponse)
async def decide_refund(
    refund_id: UUID,
    decision: RefundDecision,
    current_user: Annotated[User, Depends(get_current_host)],
    db: Annotated[AsyncSession, Depends(get_db)],
    background_tasks: BackgroundTasks,
) -> Refund:
    """Approve or reject a pending refund request."""
    refund = await db.get(Refund, refund_id)
    if not refund:
        raise NotFoundError("Refund", str(refund_id))
    if refund.host_id != current_user.id:
        raise AuthorizationError("Only the listing host can decide this refund")

    refund, booking = await booking_service.decide_refund(
        db, refund, approve=decision.status == "approved"
    )
    guest = await db.get(User, refund.guest_id)
    await db.commit()

    if refund.status == "approved" and guest:
        background_tasks.add_task(
            email_service.notify_refund_accepted,
            guest.email,
            guest.name,
            booking.email_details(),
            refund_amount=f"PHP {refund.amount:,.2f}",
        )
    return refund
