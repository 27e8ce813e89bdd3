"""Booking reference and coupon code generation utilities."""

import random
import string
from datetime import datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

# Ambiguous glyphs (I, L, O, 0, 1) left out so codes survive being read aloud
COUPON_ALPHABET = "ABCDEFGHJKMNPQRSTUVWXYZ23456789"
COUPON_CODE_LENGTH = 8


def random_coupon_code(length: int = COUPON_CODE_LENGTH) -> str:
    """Random coupon code drawn from the unambiguous alphabet."""
    return "".join(random.choices(COUPON_ALPHABET, k=length))


async def generate_coupon_code(db: AsyncSession, host_id: UUID) -> str:
    """Generate a coupon code unique among the host's coupons.

    Args:
        db: Database session for uniqueness check
        host_id: Owner of the coupon

    Returns:
        str: Code like 'K7MPQ2XA'
    """
    from app.models.coupon import Coupon

    while True:
        code = random_coupon_code()
        result = await db.execute(
            select(Coupon.id).where(Coupon.host_id == host_id, Coupon.code == code)
        )
        if not result.scalar_one_or_none():
            return code


async def generate_booking_reference(db: AsyncSession) -> str:
    """Generate a unique booking reference in format VH-XXXXXX.

    Args:
        db: Database session for uniqueness check

    Returns:
        str: Unique reference like 'VH-A3B7K9'
    """
    from app.models.booking import Booking

    chars = string.ascii_uppercase + string.digits
    while True:
        reference = f"VH-{''.join(random.choices(chars, k=6))}"
        result = await db.execute(
            select(Booking.id).where(Booking.reference == reference)
        )
        if not result.scalar_one_or_none():
            return reference


def generate_manual_reference(prefix: str = "MAN") -> str:
    """Reference for payments recorded without a provider.

    Returns:
        str: Reference like 'MAN-20240115-A3B7'
    """
    date_part = datetime.now().strftime("%Y%m%d")
    random_part = "".join(random.choices(string.ascii_uppercase + string.digits, k=4))
    return f"{prefix}-{date_part}-{random_part}"
