"""Review endpoints."""

from decimal import ROUND_HALF_UP, Decimal
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_guest, get_db
from app.core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from app.domain.booking_state import ACTIVE_BOOKING_STATUSES
from app.models.booking import Booking
from app.models.review import Review
from app.models.user import User
from app.schemas.review import ListingReviewsResponse, ReviewCreate, ReviewResponse

router = APIRouter()


@router.post("/", response_model=ReviewResponse, status_code=status.HTTP_201_CREATED)
async def create_review(
    review_data: ReviewCreate,
    current_user: Annotated[User, Depends(get_current_guest)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Review:
    """Review a listing from one of the guest's own bookings."""
    booking = await db.get(Booking, review_data.booking_id)
    if not booking:
        raise NotFoundError("Booking", str(review_data.booking_id))
    if booking.guest_id != current_user.id:
        raise AuthorizationError("You can only review your own bookings")
    if booking.status not in ACTIVE_BOOKING_STATUSES:
        raise ValidationError("Only accepted or confirmed bookings can be reviewed")

    result = await db.execute(select(Review.id).where(Review.booking_id == booking.id))
    if result.scalar_one_or_none():
        raise ConflictError("This booking has already been reviewed")

    review = Review(
        booking_id=booking.id,
        listing_id=booking.listing_id,
        host_id=booking.host_id,
        guest_id=current_user.id,
        guest_name=current_user.display_name,
        listing_title=booking.listing_title,
        rating=review_data.rating,
        comment=review_data.comment.strip() if review_data.comment else None,
    )
    db.add(review)
    await db.flush()
    return review


@router.get("/listing/{listing_id}", response_model=ListingReviewsResponse)
async def list_listing_reviews(
    listing_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ListingReviewsResponse:
    """Reviews for a listing with the average rating."""
    result = await db.execute(
        select(Review).where(Review.listing_id == listing_id).order_by(Review.created_at.desc())
    )
    reviews = list(result.scalars().all())

    average = None
    if reviews:
        average = (Decimal(sum(r.rating for r in reviews)) / len(reviews)).quantize(
            Decimal("0.1"), rounding=ROUND_HALF_UP
        )

    return ListingReviewsResponse(
        reviews=[ReviewResponse.model_validate(r) for r in reviews],
        total=len(reviews),
        average_rating=average,
    )
