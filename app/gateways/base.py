"""Base payment gateway interface.

Adapters only talk to the provider and report what it says.
Business rules (amount checks against bookings, wallet updates) live in services.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum


class GatewayType(str, Enum):
    """Supported payment gateways."""

    PAYPAL = "paypal"
    MANUAL = "manual"


@dataclass
class OrderVerification:
    """Result of checking a captured checkout order."""

    success: bool
    order_id: str | None = None
    amount: Decimal | None = None
    currency: str | None = None
    payer_id: str | None = None
    capture_id: str | None = None
    error_message: str | None = None
    raw_response: dict | None = None


@dataclass
class SubscriptionVerification:
    """Result of checking a billing subscription."""

    success: bool
    subscription_id: str | None = None
    plan_id: str | None = None
    status: str | None = None
    error_message: str | None = None
    raw_response: dict | None = None


class PaymentGateway(ABC):
    """Abstract base class for payment gateways."""

    @property
    @abstractmethod
    def gateway_type(self) -> GatewayType:
        """Return the gateway type."""

    @abstractmethod
    async def verify_order(
        self,
        order_id: str,
        expected_amount: Decimal,
        currency: str,
    ) -> OrderVerification:
        """Confirm that an order was captured for the expected amount.

        Args:
            order_id: Provider order id returned to the client after approval
            expected_amount: Amount the order must have captured
            currency: ISO currency code (PHP)

        Returns:
            OrderVerification with capture details
        """

    @abstractmethod
    async def verify_subscription(
        self,
        subscription_id: str,
        plan_key: str,
    ) -> SubscriptionVerification:
        """Confirm that a subscription is active for the given plan.

        Args:
            subscription_id: Provider subscription id
            plan_key: basic, pro or annual

        Returns:
            SubscriptionVerification with provider status
        """
