"""Payment records for provider captures and wallet spends."""

import logging
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.exceptions import ConflictError
from app.models.payment import Payment
from app.utils.codes import generate_manual_reference

logger = logging.getLogger(__name__)


class PaymentService:
    """Creates the rows the admin payments console reviews."""

    async def record(
        self,
        db: AsyncSession,
        user_id: UUID,
        kind: str,
        provider: str,
        amount: Decimal,
        provider_reference: str | None = None,
        booking_id: UUID | None = None,
        status: str = "approved",
    ) -> Payment:
        """Record a payment.

        Args:
            db: Database session
            user_id: Paying user
            kind: booking, topup or subscription
            provider: paypal, wallet or manual
            amount: Amount in PHP
            provider_reference: Order/subscription id at the provider; wallet
                and manual payments get a generated reference
            booking_id: Related booking, if any
            status: pending, approved or rejected

        Returns:
            Payment: The created payment
        """
        if provider_reference is None:
            provider_reference = generate_manual_reference("WAL" if provider == "wallet" else "MAN")
        payment = Payment(
            user_id=user_id,
            booking_id=booking_id,
            kind=kind,
            provider=provider,
            provider_reference=provider_reference,
            amount=amount,
            currency=settings.currency,
            status=status,
        )
        db.add(payment)
        await db.flush()
        logger.info(f"Recorded {kind} payment {payment.id} via {provider}: {amount}")
        return payment

    async def ensure_order_unused(self, db: AsyncSession, provider: str, reference: str) -> None:
        """Reject a provider order that already paid for a booking or top-up.

        Raises:
            ConflictError: If the order id was recorded before
        """
        result = await db.execute(
            select(Payment.id)
            .where(
                Payment.provider == provider,
                Payment.provider_reference == reference,
                Payment.kind != "subscription",
            )
            .limit(1)
        )
        if result.scalar_one_or_none():
            logger.warning(f"Rejected reuse of {provider} order {reference}")
            raise ConflictError(f"Payment order {reference} has already been used")

    def update_status(self, payment: Payment, status: str, note: str | None = None) -> Payment:
        previous = payment.status
        payment.status = status
        if note is not None:
            payment.admin_note = note
        logger.info(f"Payment {payment.id} status {previous} -> {status}")
        return payment


# Singleton instance
payment_service = PaymentService()
