"""Platform fee computation."""

from collections.abc import Iterable
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Protocol

from app.utils.dates import as_utc

CENT = Decimal("0.01")


class FeeDiscountWindow(Protocol):
    discount_percent: Decimal
    valid_from: datetime
    valid_until: datetime


def active_discount_percent(discounts: Iterable[FeeDiscountWindow], now: datetime) -> Decimal:
    """Largest discount whose validity window covers `now` (inclusive)."""
    best = Decimal("0")
    for discount in discounts:
        if as_utc(discount.valid_from) <= now <= as_utc(discount.valid_until):
            best = max(best, Decimal(discount.discount_percent))
    return best


def effective_platform_fee(
    base_percent: Decimal,
    discounts: Iterable[FeeDiscountWindow],
    now: datetime,
) -> Decimal:
    """Base fee minus the best active discount, never below zero."""
    return max(Decimal("0"), base_percent - active_discount_percent(discounts, now))


def split_amount(total: Decimal, fee_percent: Decimal) -> tuple[Decimal, Decimal]:
    """Split a booking total into (platform fee, host net)."""
    fee = (total * fee_percent / 100).quantize(CENT, rounding=ROUND_HALF_UP)
    return fee, total - fee
