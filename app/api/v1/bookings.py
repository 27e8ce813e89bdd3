"""Booking endpoints."""

import logging
from datetime import date
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import (
    get_current_guest,
    get_current_host,
    get_current_verified_user,
    get_db,
    require_booking_guest,
    require_booking_host,
)
from app.config import settings
from app.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from app.core.middleware import booking_limiter
from app.domain.booking_state import ACTIVE_BOOKING_STATUSES
from app.models.booking import Booking
from app.models.listing import Listing
from app.models.payment import Refund
from app.models.user import User
from app.schemas.booking import (
    BookingCreate,
    BookingListResponse,
    BookingPayRequest,
    BookingQuoteRequest,
    BookingQuoteResponse,
    BookingRespondRequest,
    BookingResponse,
)
from app.schemas.host import CalendarEntry
from app.schemas.payment import RefundCreate, RefundResponse
from app.services.booking_service import booking_service
from app.services.email_service import email_service

logger = logging.getLogger(__name__)

router = APIRouter()


async def _get_listing(db: AsyncSession, listing_id: UUID) -> Listing:
    listing = await db.get(Listing, listing_id)
    if not listing:
        raise NotFoundError("Listing", str(listing_id))
    return listing


async def _paginate(db: AsyncSession, query, page: int, page_size: int) -> BookingListResponse:
    count_result = await db.execute(select(func.count()).select_from(query.subquery()))
    total = count_result.scalar() or 0

    query = query.order_by(Booking.created_at.desc()).offset((page - 1) * page_size).limit(page_size)
    result = await db.execute(query)

    return BookingListResponse(
        bookings=[BookingResponse.model_validate(b) for b in result.scalars().all()],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.post("/quote", response_model=BookingQuoteResponse)
async def quote_booking(
    request: BookingQuoteRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> BookingQuoteResponse:
    """Price a stay without booking it."""
    listing = await _get_listing(db, request.listing_id)
    quote = booking_service.quote(
        listing, request.check_in, request.check_out, request.guest_count, request.promo_code
    )
    return BookingQuoteResponse(
        listing_id=listing.id,
        nights=quote.nights,
        rate=quote.rate,
        subtotal=quote.subtotal,
        discount_percent=quote.discount_percent,
        discount_amount=quote.discount_amount,
        total=quote.total,
        promo_applied=quote.promo_applied,
        currency=settings.currency,
    )


@router.post(
    "/",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(booking_limiter)],
)
async def create_booking(
    booking_data: BookingCreate,
    current_user: Annotated[User, Depends(get_current_guest)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Booking:
    """Request a booking, optionally paying up front."""
    listing = await _get_listing(db, booking_data.listing_id)
    return await booking_service.create(
        db,
        current_user,
        listing,
        check_in=booking_data.check_in,
        check_out=booking_data.check_out,
        guest_count=booking_data.guest_count,
        payment_method=booking_data.payment_method,
        promo_code=booking_data.promo_code,
        paypal_order_id=booking_data.paypal_order_id,
        payer_id=booking_data.payer_id,
    )


@router.get("/", response_model=BookingListResponse)
async def list_my_bookings(
    current_user: Annotated[User, Depends(get_current_verified_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
) -> BookingListResponse:
    """Bookings the current user made as a guest."""
    query = select(Booking).where(Booking.guest_id == current_user.id)
    return await _paginate(db, query, page, page_size)


@router.get("/host", response_model=BookingListResponse)
async def list_host_bookings(
    current_user: Annotated[User, Depends(get_current_host)],
    db: Annotated[AsyncSession, Depends(get_db)],
    status_filter: str | None = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
) -> BookingListResponse:
    """Booking requests for the host's listings."""
    query = select(Booking).where(Booking.host_id == current_user.id)
    if status_filter:
        query = query.where(Booking.status == status_filter)
    return await _paginate(db, query, page, page_size)


@router.get("/calendar", response_model=list[CalendarEntry])
async def host_calendar(
    current_user: Annotated[User, Depends(get_current_host)],
    db: Annotated[AsyncSession, Depends(get_db)],
    start: date = Query(...),
    end: date = Query(...),
) -> list[CalendarEntry]:
    """Accepted and confirmed stays overlapping [start, end]."""
    if end < start:
        raise ValidationError("End date cannot be before the start date")

    result = await db.execute(
        select(Booking)
        .where(
            Booking.host_id == current_user.id,
            Booking.status.in_(ACTIVE_BOOKING_STATUSES),
            Booking.check_in <= end,
            Booking.check_out >= start,
        )
        .order_by(Booking.check_in)
    )
    return [
        CalendarEntry(
            booking_id=booking.id,
            reference=booking.reference,
            listing_id=booking.listing_id,
            listing_title=booking.listing_title,
            check_in=booking.check_in.isoformat(),
            check_out=booking.check_out.isoformat(),
            status=booking.status,
            guest_count=booking.guest_count,
        )
        for booking in result.scalars().all()
    ]


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(
    booking_id: UUID,
    current_user: Annotated[User, Depends(get_current_verified_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Booking:
    """Get booking details (guest, host or admin)."""
    booking = await db.get(Booking, booking_id)
    if not booking:
        raise NotFoundError("Booking", str(booking_id))

    if current_user.role != "admin" and current_user.id not in (booking.guest_id, booking.host_id):
        raise AuthorizationError("Not authorized to view this booking")

    return booking


@router.post("/{booking_id}/respond", response_model=BookingResponse)
async def respond_to_booking(
    request: BookingRespondRequest,
    booking: Annotated[Booking, Depends(require_booking_host)],
    db: Annotated[AsyncSession, Depends(get_db)],
    background_tasks: BackgroundTasks,
) -> Booking:
    """Accept or decline a pending request."""
    booking = await booking_service.respond(db, booking, request.status)
    guest = await db.get(User, booking.guest_id)
    await db.commit()

    # Guest hears about the acceptance only once it is stored
    if booking.status == "accepted" and guest:
        background_tasks.add_task(
            email_service.notify_booking_details,
            guest.email,
            guest.name,
            booking.email_details(),
            headline="Good news! Your booking request has been accepted by the host.",
            subject="Booking Accepted - VentureHub",
        )
    return booking


@router.post("/{booking_id}/pay", response_model=BookingResponse)
async def pay_booking(
    request: BookingPayRequest,
    booking: Annotated[Booking, Depends(require_booking_guest)],
    current_user: Annotated[User, Depends(get_current_guest)],
    db: Annotated[AsyncSession, Depends(get_db)],
    background_tasks: BackgroundTasks,
) -> Booking:
    """Pay for an accepted booking, confirming it."""
    booking = await booking_service.pay(
        db,
        current_user,
        booking,
        request.payment_method,
        paypal_order_id=request.paypal_order_id,
        payer_id=request.payer_id,
    )
    await db.commit()

    background_tasks.add_task(
        email_service.notify_booking_details,
        current_user.email,
        current_user.name,
        booking.email_details(),
    )
    return booking


@router.post(
    "/{booking_id}/refund",
    response_model=RefundResponse,
    status_code=status.HTTP_201_CREATED,
)
async def request_refund(
    request: RefundCreate,
    booking: Annotated[Booking, Depends(require_booking_guest)],
    current_user: Annotated[User, Depends(get_current_guest)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Refund:
    """Ask the host to refund a paid booking."""
    return await booking_service.request_refund(db, current_user, booking, request.reason)
