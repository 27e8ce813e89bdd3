"""Ledger health check service (read-only validation)."""

from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from sqlalchemy import case, exists, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain import tiers
from app.domain.booking_state import ACTIVE_BOOKING_STATUSES
from app.models.booking import Booking
from app.models.host import HostEarnings, HostProfile
from app.models.payment import Payment, Refund
from app.models.wallet import Wallet, WalletTransaction


CENT = Decimal("0.01")


class HealthStatus(str, Enum):
    OK = "OK"
    WARNING = "WARNING"
    ERROR = "ERROR"


def _ok(name: str, message: str) -> dict[str, Any]:
    return {"name": name, "status": HealthStatus.OK.value, "message": message, "details": {}}


class LedgerHealthService:
    """Read-only wallet, earnings and points integrity validator."""

    async def run_all_checks(self, db: AsyncSession) -> dict[str, Any]:
        """Run all ledger health checks."""
        checks = []
        overall_status = HealthStatus.OK

        check_methods = [
            self._check_wallet_balances,
            self._check_negative_balances,
            self._check_host_points,
            self._check_refunded_bookings,
            self._check_booking_fee_split,
        ]

        for check_method in check_methods:
            result = await check_method(db)
            checks.append(result)

            if result["status"] == HealthStatus.ERROR.value:
                overall_status = HealthStatus.ERROR
            elif (
                result["status"] == HealthStatus.WARNING.value
                and overall_status != HealthStatus.ERROR
            ):
                overall_status = HealthStatus.WARNING

        counts = await self._get_counts(db)

        return {
            "status": overall_status.value,
            "checks": checks,
            "counts": counts,
            "timestamp": datetime.now(UTC).isoformat(),
        }

    async def _check_wallet_balances(self, db: AsyncSession) -> dict[str, Any]:
        """Each wallet balance must equal topups + refunds - spends."""
        signed = case(
            (WalletTransaction.type == "spend", -WalletTransaction.amount),
            else_=WalletTransaction.amount,
        )
        ledger = (
            select(
                WalletTransaction.wallet_id.label("wallet_id"),
                func.coalesce(func.sum(signed), 0).label("net"),
            )
            .group_by(WalletTransaction.wallet_id)
            .subquery()
        )
        result = await db.execute(
            select(Wallet.id, Wallet.balance, ledger.c.net).outerjoin(
                ledger, ledger.c.wallet_id == Wallet.id
            )
        )

        mismatches = []
        for wallet_id, balance, net in result.all():
            expected = Decimal(str(net or 0)).quantize(CENT)
            if Decimal(str(balance or 0)).quantize(CENT) != expected:
                mismatches.append({
                    "wallet_id": str(wallet_id),
                    "balance": str(balance),
                    "expected": str(expected),
                })

        if mismatches:
            return {
                "name": "wallet_balances",
                "status": HealthStatus.ERROR.value,
                "message": f"{len(mismatches)} wallet(s) disagree with their transactions",
                "details": {"mismatches": mismatches[:10]},
            }
        return _ok("wallet_balances", "All wallet balances match their transactions")

    async def _check_negative_balances(self, db: AsyncSession) -> dict[str, Any]:
        """No wallet balance or host earnings total may be negative."""
        wallets = await db.execute(
            select(func.count()).select_from(Wallet).where(Wallet.balance < 0)
        )
        earnings = await db.execute(
            select(func.count()).select_from(HostEarnings).where(HostEarnings.total_earnings < 0)
        )
        negative_wallets = wallets.scalar() or 0
        negative_earnings = earnings.scalar() or 0

        issues = []
        if negative_wallets:
            issues.append(f"{negative_wallets} wallet(s) with negative balance")
        if negative_earnings:
            issues.append(f"{negative_earnings} host(s) with negative earnings")

        if issues:
            return {
                "name": "negative_balances",
                "status": HealthStatus.ERROR.value,
                "message": "Negative balances detected",
                "details": {"issues": issues},
            }
        return _ok("negative_balances", "No negative balances")

    async def _check_host_points(self, db: AsyncSession) -> dict[str, Any]:
        """Available points never exceed lifetime; tier follows lifetime."""
        result = await db.execute(
            select(
                HostProfile.user_id,
                HostProfile.points_available,
                HostProfile.points_lifetime,
                HostProfile.points_tier,
            )
        )

        issues = []
        for host_id, available, lifetime, tier in result.all():
            if available > lifetime or available < 0:
                issues.append({"host_id": str(host_id), "issue": "available exceeds lifetime"})
            expected = tiers.tier_for(lifetime).key
            if tier != expected:
                issues.append({
                    "host_id": str(host_id),
                    "issue": f"tier {tier} should be {expected}",
                })

        if issues:
            # Points are not money; flag without failing the run
            return {
                "name": "host_points",
                "status": HealthStatus.WARNING.value,
                "message": f"{len(issues)} host points inconsistencies",
                "details": {"issues": issues[:10]},
            }
        return _ok("host_points", "Host points and tiers are consistent")

    async def _check_refunded_bookings(self, db: AsyncSession) -> dict[str, Any]:
        """Every refunded booking must have an approved refund."""
        result = await db.execute(
            select(Booking.id).where(
                Booking.status == "refunded",
                ~exists(
                    select(Refund.id).where(
                        Refund.booking_id == Booking.id,
                        Refund.status == "approved",
                    )
                ),
            )
        )
        orphans = [str(row[0]) for row in result.all()]

        if orphans:
            return {
                "name": "refunded_bookings",
                "status": HealthStatus.ERROR.value,
                "message": f"{len(orphans)} refunded booking(s) without an approved refund",
                "details": {"booking_ids": orphans[:10]},
            }
        return _ok("refunded_bookings", "All refunded bookings have approved refunds")

    async def _check_booking_fee_split(self, db: AsyncSession) -> dict[str, Any]:
        """Accepted and confirmed bookings carry their fee and net amounts."""
        result = await db.execute(
            select(func.count()).select_from(Booking).where(
                Booking.status.in_(ACTIVE_BOOKING_STATUSES),
                (Booking.platform_fee_amount.is_(None)) | (Booking.host_net_amount.is_(None)),
            )
        )
        missing = result.scalar() or 0

        if missing:
            return {
                "name": "booking_fee_split",
                "status": HealthStatus.WARNING.value,
                "message": f"{missing} active booking(s) missing fee split",
                "details": {"count": missing},
            }
        return _ok("booking_fee_split", "All active bookings carry a fee split")

    async def _get_counts(self, db: AsyncSession) -> dict[str, int]:
        """Get entity counts for reporting."""
        counts = {}
        for name, model in (
            ("bookings", Booking),
            ("payments", Payment),
            ("refunds", Refund),
            ("wallets", Wallet),
            ("wallet_transactions", WalletTransaction),
            ("hosts", HostProfile),
        ):
            result = await db.execute(select(func.count()).select_from(model))
            counts[name] = result.scalar() or 0
        return counts


ledger_health_service = LedgerHealthService()
