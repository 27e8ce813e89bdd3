"""PayPal REST adapter (orders and billing subscriptions)."""

import logging
import time
from decimal import Decimal, InvalidOperation

import httpx

from app.config import settings
from app.gateways.base import (
    GatewayType,
    OrderVerification,
    PaymentGateway,
    SubscriptionVerification,
)

logger = logging.getLogger(__name__)

SANDBOX_URL = "https://api-m.sandbox.paypal.com"
LIVE_URL = "https://api-m.paypal.com"

ACTIVE_SUBSCRIPTION_STATES = {"ACTIVE", "APPROVED"}


class PayPalGateway(PaymentGateway):
    """Verifies client-side PayPal approvals against the REST API."""

    def __init__(self, http_client: httpx.AsyncClient | None = None):
        self.client_id = settings.paypal_client_id
        self.client_secret = settings.paypal_client_secret
        self.base_url = SANDBOX_URL if settings.paypal_sandbox else LIVE_URL
        self._http_client = http_client
        self._token: str | None = None
        self._token_expires_at = 0.0

    @property
    def gateway_type(self) -> GatewayType:
        return GatewayType.PAYPAL

    @property
    def http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(base_url=self.base_url, timeout=30.0)
        return self._http_client

    @property
    def configured(self) -> bool:
        return bool(self.client_id and self.client_secret)

    def plan_id_for(self, plan_key: str) -> str | None:
        return {
            "basic": settings.paypal_plan_id_basic,
            "pro": settings.paypal_plan_id_pro,
            "annual": settings.paypal_plan_id_annual,
        }.get(plan_key)

    async def _access_token(self) -> str:
        """Client-credentials token, cached until shortly before expiry."""
        if self._token and time.monotonic() < self._token_expires_at:
            return self._token

        response = await self.http_client.post(
            "/v1/oauth2/token",
            auth=(self.client_id or "", self.client_secret or ""),
            data={"grant_type": "client_credentials"},
            headers={"Accept": "application/json"},
        )
        response.raise_for_status()
        body = response.json()
        self._token = body["access_token"]
        self._token_expires_at = time.monotonic() + int(body.get("expires_in", 300)) - 60
        return self._token

    async def _get(self, path: str) -> httpx.Response:
        token = await self._access_token()
        return await self.http_client.get(
            path, headers={"Authorization": f"Bearer {token}"}
        )

    async def verify_order(
        self,
        order_id: str,
        expected_amount: Decimal,
        currency: str,
    ) -> OrderVerification:
        if not self.configured:
            return OrderVerification(success=False, error_message="PayPal not configured")

        try:
            response = await self._get(f"/v2/checkout/orders/{order_id}")
        except httpx.HTTPError as e:
            logger.warning(f"PayPal order lookup failed for {order_id}: {e}")
            return OrderVerification(success=False, order_id=order_id, error_message=str(e))

        if response.status_code == 404:
            return OrderVerification(
                success=False, order_id=order_id, error_message="PayPal order not found"
            )
        if response.status_code != 200:
            return OrderVerification(
                success=False,
                order_id=order_id,
                error_message=f"PayPal returned {response.status_code}",
            )

        order = response.json()
        if order.get("status") != "COMPLETED":
            return OrderVerification(
                success=False,
                order_id=order_id,
                error_message=f"PayPal order is {order.get('status', 'UNKNOWN')}",
                raw_response=order,
            )

        units = order.get("purchase_units") or [{}]
        captures = (units[0].get("payments") or {}).get("captures") or []
        amount_info = (captures[0] if captures else units[0]).get("amount") or {}
        try:
            captured = Decimal(str(amount_info.get("value", "0")))
        except InvalidOperation:
            captured = Decimal("0")
        captured_currency = amount_info.get("currency_code", currency)

        if captured_currency != currency or abs(captured - expected_amount) > Decimal("0.01"):
            return OrderVerification(
                success=False,
                order_id=order_id,
                amount=captured,
                currency=captured_currency,
                error_message=(
                    f"Captured {captured} {captured_currency} does not match "
                    f"expected {expected_amount} {currency}"
                ),
                raw_response=order,
            )

        return OrderVerification(
            success=True,
            order_id=order_id,
            amount=captured,
            currency=captured_currency,
            payer_id=(order.get("payer") or {}).get("payer_id"),
            capture_id=captures[0].get("id") if captures else None,
            raw_response={"status": order.get("status"), "id": order.get("id")},
        )

    async def verify_subscription(
        self,
        subscription_id: str,
        plan_key: str,
    ) -> SubscriptionVerification:
        if not self.configured:
            return SubscriptionVerification(success=False, error_message="PayPal not configured")

        try:
            response = await self._get(f"/v1/billing/subscriptions/{subscription_id}")
        except httpx.HTTPError as e:
            logger.warning(f"PayPal subscription lookup failed for {subscription_id}: {e}")
            return SubscriptionVerification(
                success=False, subscription_id=subscription_id, error_message=str(e)
            )

        if response.status_code != 200:
            return SubscriptionVerification(
                success=False,
                subscription_id=subscription_id,
                error_message=f"PayPal returned {response.status_code}",
            )

        body = response.json()
        status = body.get("status")
        plan_id = body.get("plan_id")
        expected_plan = self.plan_id_for(plan_key)

        if status not in ACTIVE_SUBSCRIPTION_STATES:
            return SubscriptionVerification(
                success=False,
                subscription_id=subscription_id,
                plan_id=plan_id,
                status=status,
                error_message=f"Subscription is {status}",
            )
        if expected_plan and plan_id != expected_plan:
            return SubscriptionVerification(
                success=False,
                subscription_id=subscription_id,
                plan_id=plan_id,
                status=status,
                error_message="Subscription belongs to a different plan",
            )

        return SubscriptionVerification(
            success=True,
            subscription_id=subscription_id,
            plan_id=plan_id,
            status=status,
            raw_response={"status": status, "id": body.get("id")},
        )
