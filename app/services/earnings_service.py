"""Host earnings and platform fee application."""

import logging
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.domain import fees
from app.models.booking import Booking
from app.models.host import HostEarnings, HostFeeDiscount
from app.utils.dates import utcnow

logger = logging.getLogger(__name__)


class EarningsService:
    """Platform fee lookup and the per-host earnings total."""

    async def get_or_create(self, db: AsyncSession, host_id: UUID) -> HostEarnings:
        result = await db.execute(select(HostEarnings).where(HostEarnings.host_id == host_id))
        earnings = result.scalar_one_or_none()
        if earnings is None:
            earnings = HostEarnings(
                host_id=host_id, total_earnings=Decimal("0"), currency=settings.currency
            )
            db.add(earnings)
            await db.flush()
        return earnings

    async def effective_fee_percent(self, db: AsyncSession, host_id: UUID) -> Decimal:
        """Base platform fee less the host's best active fee discount."""
        now = utcnow()
        result = await db.execute(
            select(HostFeeDiscount).where(
                HostFeeDiscount.host_id == host_id,
                HostFeeDiscount.valid_until >= now,
            )
        )
        discounts = list(result.scalars().all())
        return fees.effective_platform_fee(settings.base_platform_fee_percent, discounts, now)

    async def apply_accepted_booking(self, db: AsyncSession, booking: Booking) -> HostEarnings:
        """Stamp fee/net on the booking and credit the host's net amount."""
        fee_percent = await self.effective_fee_percent(db, booking.host_id)
        fee_amount, net_amount = fees.split_amount(booking.total_price, fee_percent)

        booking.platform_fee_percent = fee_percent
        booking.platform_fee_amount = fee_amount
        booking.host_net_amount = net_amount

        earnings = await self.get_or_create(db, booking.host_id)
        earnings.total_earnings = (earnings.total_earnings or Decimal("0")) + net_amount
        logger.info(
            f"Booking {booking.reference}: fee {fee_percent}% ({fee_amount}), "
            f"host net {net_amount}"
        )
        return earnings

    async def reverse_refund(self, db: AsyncSession, booking: Booking) -> HostEarnings:
        """Take a refunded booking's net credit back out of earnings, floored at zero."""
        earnings = await self.get_or_create(db, booking.host_id)
        credited = booking.host_net_amount if booking.host_net_amount is not None else Decimal("0")
        earnings.total_earnings = max(
            Decimal("0"), (earnings.total_earnings or Decimal("0")) - credited
        )
        logger.info(f"Booking {booking.reference} refunded: host net {credited} reversed")
        return earnings


# Singleton instance
earnings_service = EarningsService()
