"""Payment gateway service.

Routes verification calls to the configured gateway adapter and turns
failed verifications into PaymentError. No business logic here.
"""

import logging
from decimal import Decimal

from app.config import settings
from app.core.exceptions import PaymentError
from app.gateways.base import (
    GatewayType,
    OrderVerification,
    PaymentGateway,
    SubscriptionVerification,
)
from app.gateways.manual import ManualGateway
from app.gateways.paypal import PayPalGateway

logger = logging.getLogger(__name__)


def _assert_gateway_allowed(gateway_type: GatewayType) -> None:
    """The manual gateway trusts the client, so production must not use it.

    Raises:
        RuntimeError: If the manual gateway is selected in production
    """
    if gateway_type == GatewayType.MANUAL and settings.environment == "production":
        raise RuntimeError(
            "The manual payment gateway cannot be used in production. "
            "Set PAYMENT_GATEWAY=paypal."
        )


class GatewayService:
    """Service for managing payment gateway operations."""

    def __init__(self):
        self._gateways: dict[GatewayType, PaymentGateway] = {}

    @property
    def provider(self) -> str:
        return settings.payment_gateway

    def _get_gateway(self, gateway_type: str | GatewayType | None = None) -> PaymentGateway:
        """Get or create gateway instance."""
        gateway_type = GatewayType(gateway_type or settings.payment_gateway)
        _assert_gateway_allowed(gateway_type)

        if gateway_type not in self._gateways:
            if gateway_type == GatewayType.PAYPAL:
                self._gateways[gateway_type] = PayPalGateway()
            else:
                self._gateways[gateway_type] = ManualGateway()

        return self._gateways[gateway_type]

    async def verify_order(
        self,
        order_id: str,
        expected_amount: Decimal,
        currency: str | None = None,
    ) -> OrderVerification:
        """Verify a captured order or raise PaymentError."""
        gateway = self._get_gateway()
        result = await gateway.verify_order(
            order_id=order_id,
            expected_amount=expected_amount,
            currency=currency or settings.currency,
        )
        if not result.success:
            logger.warning(f"Order {order_id} failed verification: {result.error_message}")
            raise PaymentError(result.error_message or "Payment could not be verified")
        return result

    async def verify_subscription(
        self,
        subscription_id: str,
        plan_key: str,
    ) -> SubscriptionVerification:
        """Verify an active subscription or raise PaymentError."""
        gateway = self._get_gateway()
        result = await gateway.verify_subscription(subscription_id, plan_key)
        if not result.success:
            logger.warning(
                f"Subscription {subscription_id} failed verification: {result.error_message}"
            )
            raise PaymentError(result.error_message or "Subscription could not be verified")
        return result


# Singleton instance
gateway_service = GatewayService()
