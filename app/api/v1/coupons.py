"""Host coupon endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_host, get_db
from app.core.exceptions import AuthorizationError, ConflictError, NotFoundError
from app.models.coupon import Coupon
from app.models.user import User
from app.schemas.coupon import CouponCreate, CouponResponse
from app.utils.codes import generate_coupon_code
from app.utils.dates import utcnow

router = APIRouter()


async def _own_coupon(db: AsyncSession, coupon_id: UUID, host: User) -> Coupon:
    coupon = await db.get(Coupon, coupon_id)
    if not coupon:
        raise NotFoundError("Coupon", str(coupon_id))
    if coupon.host_id != host.id:
        raise AuthorizationError("Only the coupon owner can perform this action")
    return coupon


@router.post("/", response_model=CouponResponse, status_code=status.HTTP_201_CREATED)
async def create_coupon(
    coupon_data: CouponCreate,
    current_user: Annotated[User, Depends(get_current_host)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Coupon:
    """Create a coupon; a code is generated when none is given."""
    code = coupon_data.code
    if code:
        result = await db.execute(
            select(Coupon.id).where(Coupon.host_id == current_user.id, Coupon.code == code)
        )
        if result.scalar_one_or_none():
            raise ConflictError(f"Coupon code {code} already exists")
    else:
        code = await generate_coupon_code(db, current_user.id)

    coupon = Coupon(
        host_id=current_user.id,
        **coupon_data.model_dump(exclude={"code"}),
        code=code,
    )
    db.add(coupon)
    await db.flush()
    return coupon


@router.get("/mine", response_model=list[CouponResponse])
async def list_my_coupons(
    current_user: Annotated[User, Depends(get_current_host)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[Coupon]:
    """All of the host's coupons, newest first."""
    result = await db.execute(
        select(Coupon).where(Coupon.host_id == current_user.id).order_by(Coupon.created_at.desc())
    )
    return list(result.scalars().all())


@router.get("/", response_model=list[CouponResponse])
async def list_available_coupons(
    db: Annotated[AsyncSession, Depends(get_db)],
    host_id: UUID | None = Query(None),
    category: str | None = Query(None, pattern="^(home|experience|service)$"),
) -> list[Coupon]:
    """Active coupons currently inside their validity window."""
    query = select(Coupon).where(Coupon.active.is_(True))
    if host_id:
        query = query.where(Coupon.host_id == host_id)
    if category:
        query = query.where(Coupon.category.in_(("all", category)))
    result = await db.execute(query.order_by(Coupon.created_at.desc()))

    now = utcnow()
    return [coupon for coupon in result.scalars().all() if coupon.is_live(now)]


@router.post("/{coupon_id}/toggle", response_model=CouponResponse)
async def toggle_coupon(
    coupon_id: UUID,
    current_user: Annotated[User, Depends(get_current_host)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Coupon:
    """Switch a coupon between active and inactive."""
    coupon = await _own_coupon(db, coupon_id, current_user)
    coupon.active = not coupon.active
    return coupon


@router.delete("/{coupon_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_coupon(
    coupon_id: UUID,
    current_user: Annotated[User, Depends(get_current_host)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> None:
    """Delete a coupon."""
    coupon = await _own_coupon(db, coupon_id, current_user)
    await db.delete(coupon)
