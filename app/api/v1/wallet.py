"""Guest wallet endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_verified_user, get_db
from app.models.user import User
from app.models.wallet import Wallet, WalletTransaction
from app.schemas.payment import (
    WalletResponse,
    WalletTopUpRequest,
    WalletTransactionListResponse,
    WalletTransactionResponse,
)
from app.services.gateway_service import gateway_service
from app.services.payment_service import payment_service
from app.services.wallet_service import wallet_service

router = APIRouter()


@router.get("/", response_model=WalletResponse)
async def get_wallet(
    current_user: Annotated[User, Depends(get_current_verified_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Wallet:
    """Current wallet balance."""
    return await wallet_service.get_or_create(db, current_user.id)


@router.get("/transactions", response_model=WalletTransactionListResponse)
async def list_transactions(
    current_user: Annotated[User, Depends(get_current_verified_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
) -> WalletTransactionListResponse:
    """Wallet history, newest first."""
    query = select(WalletTransaction).where(WalletTransaction.user_id == current_user.id)

    count_result = await db.execute(select(func.count()).select_from(query.subquery()))
    total = count_result.scalar() or 0

    result = await db.execute(
        query.order_by(WalletTransaction.created_at.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    return WalletTransactionListResponse(
        transactions=[WalletTransactionResponse.model_validate(t) for t in result.scalars().all()],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.post("/topup", response_model=WalletResponse, status_code=status.HTTP_201_CREATED)
async def top_up_wallet(
    request: WalletTopUpRequest,
    current_user: Annotated[User, Depends(get_current_verified_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Wallet:
    """Add funds after PayPal captured the order for the amount."""
    await payment_service.ensure_order_unused(db, gateway_service.provider, request.paypal_order_id)
    await gateway_service.verify_order(request.paypal_order_id, request.amount)

    wallet = await wallet_service.get_or_create(db, current_user.id)
    await wallet_service.credit(
        db,
        wallet,
        request.amount,
        "topup",
        paypal_order_id=request.paypal_order_id,
        description="Wallet top-up",
    )
    await payment_service.record(
        db,
        current_user.id,
        "topup",
        gateway_service.provider,
        request.amount,
        provider_reference=request.paypal_order_id,
    )
    return wallet
