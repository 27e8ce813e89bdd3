"""Celery background tasks for periodic maintenance."""

import asyncio
import logging

from celery import shared_task
from sqlalchemy import update

from app.core.background_tasks import run_ledger_health_check as _run_ledger_health_check
from app.database import close_db, get_db_context
from app.models.coupon import Coupon
from app.models.user import User
from app.utils.dates import utcnow

logger = logging.getLogger(__name__)


def run_async(coro):
    """Run async function in sync context with a fresh event loop."""

    async def _run():
        try:
            return await coro
        finally:
            # Pooled connections are bound to this loop
            await close_db()

    return asyncio.run(_run())


# ==================== ACCOUNT TASKS ====================


@shared_task
def cleanup_expired_otps():
    """Clear verification codes that have expired on unverified accounts."""
    cleared = run_async(_cleanup_expired_otps())
    return {"status": "success", "cleared": cleared}


async def _cleanup_expired_otps() -> int:
    async with get_db_context() as db:
        result = await db.execute(
            update(User)
            .where(
                User.verified.is_(False),
                User.verification_otp.isnot(None),
                User.verification_otp_expiry < utcnow(),
            )
            .values(verification_otp=None, verification_otp_expiry=None)
        )
        cleared = result.rowcount or 0
    logger.info(f"Cleared {cleared} expired verification codes")
    return cleared


# ==================== COUPON TASKS ====================


@shared_task
def deactivate_expired_coupons():
    """Deactivate coupons whose validity window has closed."""
    deactivated = run_async(_deactivate_expired_coupons())
    return {"status": "success", "deactivated": deactivated}


async def _deactivate_expired_coupons() -> int:
    async with get_db_context() as db:
        result = await db.execute(
            update(Coupon)
            .where(
                Coupon.active.is_(True),
                Coupon.valid_until.isnot(None),
                Coupon.valid_until < utcnow(),
            )
            .values(active=False)
        )
        deactivated = result.rowcount or 0
    logger.info(f"Deactivated {deactivated} expired coupons")
    return deactivated


# ==================== HEALTH TASKS ====================


@shared_task(bind=True, max_retries=3)
def run_ledger_health_check(self):
    """Run the ledger health checks and persist the result."""
    try:
        return run_async(_run_ledger_health_check(trigger="scheduled"))
    except Exception as exc:
        raise self.retry(exc=exc, countdown=300)
