"""Background tasks for automatic ledger health checks."""

import asyncio
import logging
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db_context
from app.models.health import LedgerHealthRun
from app.services.ledger_health_service import ledger_health_service

logger = logging.getLogger(__name__)

# Flag to stop the background task
_stop_health_check = False


async def record_health_run(db: AsyncSession, trigger: str) -> LedgerHealthRun:
    """Run all ledger checks in the given session and persist the outcome."""
    started_at = datetime.now(UTC)
    logger.info(f"Starting ledger health check (trigger: {trigger})")

    try:
        result = await ledger_health_service.run_all_checks(db)
    except Exception as e:
        completed_at = datetime.now(UTC)
        health_run = LedgerHealthRun(
            status="ERROR",
            checks=[],
            counts={},
            trigger=trigger,
            started_at=started_at,
            completed_at=completed_at,
            duration_ms=int((completed_at - started_at).total_seconds() * 1000),
            error_message=str(e),
        )
        db.add(health_run)
        await db.flush()
        logger.error(f"Ledger health check failed: {e}")
        return health_run

    completed_at = datetime.now(UTC)
    duration_ms = int((completed_at - started_at).total_seconds() * 1000)
    health_run = LedgerHealthRun(
        status=result["status"],
        checks=result["checks"],
        counts=result["counts"],
        trigger=trigger,
        started_at=started_at,
        completed_at=completed_at,
        duration_ms=duration_ms,
    )
    db.add(health_run)
    await db.flush()

    logger.info(
        f"Ledger health check completed: status={result['status']}, "
        f"duration={duration_ms}ms, checks={len(result['checks'])}"
    )
    for check in result["checks"]:
        if check["status"] != "OK":
            logger.warning(
                f"Health check '{check['name']}': {check['status']} - {check['message']}"
            )
    return health_run


async def latest_health_run(db: AsyncSession) -> LedgerHealthRun | None:
    result = await db.execute(
        select(LedgerHealthRun).order_by(LedgerHealthRun.completed_at.desc()).limit(1)
    )
    return result.scalar_one_or_none()


async def run_ledger_health_check(trigger: str = "scheduled") -> dict[str, Any]:
    """Run a health check in its own session (startup, scheduler, worker)."""
    async with get_db_context() as db:
        health_run = await record_health_run(db, trigger)
        return {"id": str(health_run.id), "status": health_run.status}


async def start_health_check_scheduler() -> None:
    """Background task that reruns the health check every configured interval."""
    global _stop_health_check
    _stop_health_check = False
    interval = settings.ledger_health_interval_hours * 60 * 60

    logger.info("Ledger health check scheduler started")

    while not _stop_health_check:
        try:
            await run_ledger_health_check(trigger="scheduled")
        except Exception as e:
            logger.error(f"Scheduled health check error: {e}")

        # Wait for next interval (check stop flag every minute)
        for _ in range(max(1, interval // 60)):
            if _stop_health_check:
                break
            await asyncio.sleep(60)

    logger.info("Ledger health check scheduler stopped")


def stop_health_check_scheduler() -> None:
    """Signal the health check scheduler to stop."""
    global _stop_health_check
    _stop_health_check = True


async def run_startup_health_check() -> None:
    """Run health check on application startup."""
    logger.info("Running startup ledger health check")
    await run_ledger_health_check(trigger="startup")
