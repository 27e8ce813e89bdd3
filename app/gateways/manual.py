"""Manual gateway: trusts client-reported captures.

Used in development and tests, where no PayPal credentials exist. Payments
recorded through it can be reviewed from the admin payments screen.
"""

from decimal import Decimal

from app.gateways.base import (
    GatewayType,
    OrderVerification,
    PaymentGateway,
    SubscriptionVerification,
)


class ManualGateway(PaymentGateway):
    """Accepts any non-empty order or subscription id."""

    @property
    def gateway_type(self) -> GatewayType:
        return GatewayType.MANUAL

    async def verify_order(
        self,
        order_id: str,
        expected_amount: Decimal,
        currency: str,
    ) -> OrderVerification:
        if not order_id:
            return OrderVerification(success=False, error_message="Order id is required")
        return OrderVerification(
            success=True,
            order_id=order_id,
            amount=expected_amount,
            currency=currency,
            capture_id=f"manual_{order_id}",
            raw_response={"status": "COMPLETED", "verified": False},
        )

    async def verify_subscription(
        self,
        subscription_id: str,
        plan_key: str,
    ) -> SubscriptionVerification:
        if not subscription_id:
            return SubscriptionVerification(
                success=False, error_message="Subscription id is required"
            )
        return SubscriptionVerification(
            success=True,
            subscription_id=subscription_id,
            plan_id=f"manual_{plan_key}",
            status="ACTIVE",
        )
