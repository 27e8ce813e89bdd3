"""Guest wallet balance and transaction ledger."""

import logging
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.exceptions import InsufficientBalance, ValidationError
from app.models.wallet import Wallet, WalletTransaction

logger = logging.getLogger(__name__)


class WalletService:
    """Every balance change is paired with a WalletTransaction row."""

    async def get_or_create(self, db: AsyncSession, user_id: UUID) -> Wallet:
        result = await db.execute(select(Wallet).where(Wallet.user_id == user_id))
        wallet = result.scalar_one_or_none()
        if wallet is None:
            wallet = Wallet(user_id=user_id, balance=Decimal("0"), currency=settings.currency)
            db.add(wallet)
            await db.flush()
        return wallet

    async def credit(
        self,
        db: AsyncSession,
        wallet: Wallet,
        amount: Decimal,
        type: str,
        **refs,
    ) -> WalletTransaction:
        """Add funds (top-up or refund)."""
        if amount <= 0:
            raise ValidationError("Amount must be greater than zero")
        wallet.balance = (wallet.balance or Decimal("0")) + amount
        return await self._record(db, wallet, amount, type, **refs)

    async def debit(
        self,
        db: AsyncSession,
        wallet: Wallet,
        amount: Decimal,
        **refs,
    ) -> WalletTransaction:
        """Spend funds; the balance may never go negative.

        Raises:
            InsufficientBalance: If the balance does not cover the amount
        """
        if amount <= 0:
            raise ValidationError("Amount must be greater than zero")
        if (wallet.balance or Decimal("0")) < amount:
            raise InsufficientBalance()
        wallet.balance = wallet.balance - amount
        return await self._record(db, wallet, amount, "spend", **refs)

    async def _record(
        self,
        db: AsyncSession,
        wallet: Wallet,
        amount: Decimal,
        type: str,
        booking_id: UUID | None = None,
        refund_id: UUID | None = None,
        paypal_order_id: str | None = None,
        description: str | None = None,
    ) -> WalletTransaction:
        transaction = WalletTransaction(
            wallet_id=wallet.id,
            user_id=wallet.user_id,
            type=type,
            amount=amount,
            booking_id=booking_id,
            refund_id=refund_id,
            paypal_order_id=paypal_order_id,
            description=description,
        )
        db.add(transaction)
        await db.flush()
        logger.info(f"Wallet {wallet.id}: {type} {amount} (balance {wallet.balance})")
        return transaction


# Singleton instance
wallet_service = WalletService()
