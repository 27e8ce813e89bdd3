"""Booking lifecycle: request, host response, payment and refunds.

Each public method mutates several rows (booking, wallet, earnings,
points, refund). They run inside the caller's session so the whole
operation commits or rolls back together.
"""

import logging
from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.exceptions import (
    AuthorizationError,
    DatesNotAvailable,
    InvalidBookingStatus,
    ListingNotAvailable,
    NotFoundError,
    ValidationError,
)
from app.domain import pricing
from app.domain.booking_state import (
    ACTIVE_BOOKING_STATUSES,
    assert_booking_transition,
    assert_refund_transition,
)
from app.models.booking import Booking
from app.models.host import HostProfile
from app.models.listing import Listing
from app.models.payment import Refund
from app.models.user import User
from app.services.earnings_service import earnings_service
from app.services.gateway_service import gateway_service
from app.services.payment_service import payment_service
from app.services.points_service import points_service
from app.services.wallet_service import wallet_service
from app.utils.codes import generate_booking_reference
from app.utils.dates import utcnow

logger = logging.getLogger(__name__)


class BookingService:
    """Guest and host booking operations."""

    # ==================== QUOTES ====================

    def quote(
        self,
        listing: Listing,
        check_in: date,
        check_out: date,
        guest_count: int,
        promo_code: str | None = None,
    ) -> pricing.Quote:
        """Validate a stay against the listing and price it."""
        pricing.validate_stay(check_in, check_out, guest_count, listing.max_guests)

        if listing.availability_start and check_in < listing.availability_start:
            raise ListingNotAvailable(
                f"This listing is available from {listing.availability_start.isoformat()}"
            )
        if listing.availability_end and check_out > listing.availability_end:
            raise ListingNotAvailable(
                f"This listing is available until {listing.availability_end.isoformat()}"
            )

        return pricing.quote(
            rate=listing.rate,
            nights=pricing.nights_between(check_in, check_out),
            discount_percent=listing.discount or Decimal("0"),
            listing_promo=listing.promo,
            promo_code=promo_code,
        )

    async def _assert_dates_free(
        self, db: AsyncSession, listing: Listing, check_in: date, check_out: date
    ) -> None:
        """Homes cannot be double-booked; experiences and services can."""
        if listing.category != "home":
            return
        result = await db.execute(
            select(Booking.id).where(
                Booking.listing_id == listing.id,
                Booking.status.in_(ACTIVE_BOOKING_STATUSES),
                and_(Booking.check_in < check_out, Booking.check_out > check_in),
            ).limit(1)
        )
        if result.scalar_one_or_none():
            raise DatesNotAvailable()

    # ==================== GUEST REQUESTS ====================

    async def create(
        self,
        db: AsyncSession,
        guest: User,
        listing: Listing,
        check_in: date,
        check_out: date,
        guest_count: int,
        payment_method: str,
        promo_code: str | None = None,
        paypal_order_id: str | None = None,
        payer_id: str | None = None,
    ) -> Booking:
        """Create a pending booking, paying up front by PayPal or wallet.

        Raises:
            ListingNotAvailable: Listing unpublished, or dates outside availability
            DatesNotAvailable: Home already booked for overlapping nights
            InsufficientBalance: Wallet payment without enough balance
            PaymentError: PayPal order not captured for the quoted total
        """
        if not listing.is_published:
            raise ListingNotAvailable()
        if listing.host_id == guest.id:
            raise ValidationError("You cannot book your own listing")

        quote = self.quote(listing, check_in, check_out, guest_count, promo_code)
        await self._assert_dates_free(db, listing, check_in, check_out)

        booking = Booking(
            reference=await generate_booking_reference(db),
            listing_id=listing.id,
            host_id=listing.host_id,
            guest_id=guest.id,
            listing_title=listing.title,
            listing_location=listing.location,
            listing_category=listing.category,
            check_in=check_in,
            check_out=check_out,
            nights=quote.nights,
            guest_count=guest_count,
            rate=quote.rate,
            subtotal=quote.subtotal,
            discount_amount=quote.discount_amount,
            total_price=quote.total,
            promo_applied=quote.promo_applied,
            promo_code=promo_code.strip() if quote.promo_applied and promo_code else None,
            payment_method=payment_method,
            status="pending",
        )
        db.add(booking)
        await db.flush()

        if payment_method != "none":
            await self._collect_payment(db, guest, booking, payment_method, paypal_order_id, payer_id)

        logger.info(
            f"Booking {booking.reference} created by guest {guest.id} "
            f"for listing {listing.id} ({payment_method})"
        )
        return booking

    async def _collect_payment(
        self,
        db: AsyncSession,
        guest: User,
        booking: Booking,
        method: str,
        paypal_order_id: str | None,
        payer_id: str | None,
    ) -> None:
        if booking.total_price <= 0:
            # Fully discounted: nothing to debit or capture
            booking.payment_id = f"free-{booking.reference}"
        elif method == "wallet":
            wallet = await wallet_service.get_or_create(db, guest.id)
            await wallet_service.debit(
                db,
                wallet,
                booking.total_price,
                booking_id=booking.id,
                description=f"Booking {booking.reference}",
            )
            await payment_service.record(
                db, guest.id, "booking", "wallet", booking.total_price, booking_id=booking.id
            )
            booking.payment_id = f"wallet-{booking.reference}"
        elif method == "paypal":
            if not paypal_order_id:
                raise ValidationError("A PayPal order id is required")
            await payment_service.ensure_order_unused(db, gateway_service.provider, paypal_order_id)
            verification = await gateway_service.verify_order(paypal_order_id, booking.total_price)
            booking.paypal_order_id = paypal_order_id
            booking.payer_id = payer_id or verification.payer_id
            booking.payment_id = verification.capture_id or paypal_order_id
            await payment_service.record(
                db,
                guest.id,
                "booking",
                gateway_service.provider,
                booking.total_price,
                provider_reference=paypal_order_id,
                booking_id=booking.id,
            )
        else:
            raise ValidationError(f"Unsupported payment method '{method}'")

        booking.payment_method = method
        booking.paid = True
        booking.payment_date = utcnow()

    async def pay(
        self,
        db: AsyncSession,
        guest: User,
        booking: Booking,
        method: str,
        paypal_order_id: str | None = None,
        payer_id: str | None = None,
    ) -> Booking:
        """Pay for an accepted booking, which confirms it."""
        if booking.paid:
            raise InvalidBookingStatus("This booking has already been paid")
        if booking.status != "accepted":
            raise InvalidBookingStatus("Only accepted bookings can be paid")
        assert_booking_transition(booking.status, "confirmed")

        await self._collect_payment(db, guest, booking, method, paypal_order_id, payer_id)
        booking.status = "confirmed"
        logger.info(f"Booking {booking.reference} paid via {method} and confirmed")
        return booking

    # ==================== HOST RESPONSES ====================

    async def respond(self, db: AsyncSession, booking: Booking, status: str) -> Booking:
        """Accept or decline a pending request.

        Accepting stamps the effective platform fee, credits host earnings
        with the net amount and awards booking points.
        """
        assert_booking_transition(booking.status, status)
        booking.status = status
        booking.responded_at = utcnow()

        if status == "accepted":
            await earnings_service.apply_accepted_booking(db, booking)
            profile = await self._host_profile(db, booking.host_id)
            await points_service.award(
                db,
                profile,
                settings.booking_points,
                "completed_booking",
                {"booking_id": str(booking.id)},
            )

        logger.info(f"Booking {booking.reference} {status} by host {booking.host_id}")
        return booking

    async def _host_profile(self, db: AsyncSession, host_id: UUID) -> HostProfile:
        result = await db.execute(select(HostProfile).where(HostProfile.user_id == host_id))
        profile = result.scalar_one_or_none()
        if profile is None:
            raise NotFoundError("Host profile")
        return profile

    # ==================== REFUNDS ====================

    async def request_refund(
        self, db: AsyncSession, guest: User, booking: Booking, reason: str
    ) -> Refund:
        """Open a refund request for the full booking total."""
        if booking.guest_id != guest.id:
            raise AuthorizationError("Only the booking guest can request a refund")
        if not booking.paid:
            raise InvalidBookingStatus("Only paid bookings can be refunded")
        if booking.status not in ACTIVE_BOOKING_STATUSES:
            raise InvalidBookingStatus(
                f"Refunds cannot be requested for {booking.status} bookings"
            )
        if booking.refund_requested:
            raise InvalidBookingStatus("A refund has already been requested for this booking")

        refund = Refund(
            booking_id=booking.id,
            guest_id=booking.guest_id,
            host_id=booking.host_id,
            listing_id=booking.listing_id,
            listing_title=booking.listing_title,
            reason=reason.strip(),
            amount=booking.total_price,
            status="pending",
        )
        db.add(refund)
        booking.refund_requested = True
        await db.flush()
        logger.info(f"Refund {refund.id} requested for booking {booking.reference}")
        return refund

    async def decide_refund(
        self, db: AsyncSession, refund: Refund, approve: bool
    ) -> tuple[Refund, Booking]:
        """Approve (credit wallet, reverse earnings, mark refunded) or reject."""
        target = "approved" if approve else "rejected"
        assert_refund_transition(refund.status, target)

        booking = await db.get(Booking, refund.booking_id)
        if booking is None:
            raise NotFoundError("Booking", str(refund.booking_id))

        if approve:
            assert_booking_transition(booking.status, "refunded")
            if refund.amount > 0:
                wallet = await wallet_service.get_or_create(db, refund.guest_id)
                await wallet_service.credit(
                    db,
                    wallet,
                    refund.amount,
                    "refund",
                    booking_id=booking.id,
                    refund_id=refund.id,
                    description=f"Refund for booking {booking.reference}",
                )
            await earnings_service.reverse_refund(db, booking)
            booking.status = "refunded"

        refund.status = target
        refund.decided_at = utcnow()
        await db.flush()
        logger.info(f"Refund {refund.id} {target} for booking {booking.reference}")
        return refund, booking


# Singleton instance
booking_service = BookingService()
