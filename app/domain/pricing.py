"""Booking price quotes.

Nights are the ceiling of the day difference between check-in and
check-out. A listing's discount only applies when the listing carries a
promo code and the guest enters the same code (case-insensitive).
"""

import math
from dataclasses import dataclass
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal

from app.core.exceptions import ValidationError


@dataclass(frozen=True)
class Quote:
    nights: int
    rate: Decimal
    subtotal: Decimal
    discount_percent: Decimal
    discount_amount: Decimal
    total: Decimal
    promo_applied: bool


def nights_between(check_in: date | datetime, check_out: date | datetime) -> int:
    """Number of nights, rounding partial days up."""
    if isinstance(check_in, datetime) and isinstance(check_out, datetime):
        seconds = (check_out - check_in).total_seconds()
        return math.ceil(seconds / 86400)
    return (check_out - check_in).days


def promo_matches(listing_promo: str | None, entered_code: str | None) -> bool:
    if not listing_promo or not entered_code:
        return False
    return listing_promo.strip().lower() == entered_code.strip().lower()


def validate_stay(
    check_in: date | None,
    check_out: date | None,
    guests: int,
    max_guests: int | None = None,
) -> None:
    """Raise ValidationError for an impossible stay request."""
    if not check_in or not check_out:
        raise ValidationError("Please select check-in and check-out dates")
    if check_out <= check_in:
        raise ValidationError("Check-out must be after check-in")
    if guests < 1:
        raise ValidationError("At least one guest is required")
    if max_guests and guests > max_guests:
        raise ValidationError(f"This listing allows at most {max_guests} guests")


def quote(
    rate: Decimal,
    nights: int,
    discount_percent: Decimal = Decimal("0"),
    listing_promo: str | None = None,
    promo_code: str | None = None,
) -> Quote:
    """Price a stay.

    Args:
        rate: Nightly rate of the listing
        nights: Number of nights
        discount_percent: Listing discount, applied only with a matching promo
        listing_promo: Promo code configured on the listing
        promo_code: Code entered by the guest

    Returns:
        Quote: Subtotal, discount (rounded to whole pesos) and total
    """
    if rate is None or rate <= 0:
        raise ValidationError("This listing does not have a valid rate yet")
    if nights < 1:
        raise ValidationError("A booking must be at least one night")

    subtotal = (rate * nights).quantize(Decimal("0.01"))
    applied = promo_matches(listing_promo, promo_code) and discount_percent > 0
    discount = Decimal("0")
    if applied:
        discount = (subtotal * discount_percent / 100).quantize(
            Decimal("1"), rounding=ROUND_HALF_UP
        )

    return Quote(
        nights=nights,
        rate=rate,
        subtotal=subtotal,
        discount_percent=discount_percent if applied else Decimal("0"),
        discount_amount=discount,
        total=subtotal - discount,
        promo_applied=applied,
    )
