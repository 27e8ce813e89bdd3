"""Transactional email via SendGrid.

Emails are secondary effects: callers use the ``notify_*`` helpers, which
log and swallow delivery failures so the primary action still succeeds.
"""

import logging
from html import escape
from typing import Any

import httpx
from jinja2 import TemplateError

from app.config import settings
from app.utils.templating import render_template

logger = logging.getLogger(__name__)

SENDGRID_URL = "https://api.sendgrid.com/v3/mail/send"


class EmailService:
    """Render and deliver VentureHub emails."""

    def __init__(self) -> None:
        self._http_client: httpx.AsyncClient | None = None

    @property
    def http_client(self) -> httpx.AsyncClient:
        """Lazy-load HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=30.0)
        return self._http_client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    # ==================== DELIVERY ====================

    async def send_email(self, to_email: str, subject: str, text_content: str) -> bool:
        """Send a plain-text email (with an HTML alternative) via SendGrid.

        Args:
            to_email: Recipient email
            subject: Email subject
            text_content: Plain text body

        Returns:
            bool: True if SendGrid accepted the message

        Raises:
            httpx.HTTPError: On transport failures
        """
        if not settings.sendgrid_api_key:
            logger.info(f"SendGrid not configured; skipping email '{subject}' to {to_email}")
            return False

        html_content = "<br>".join(escape(line) for line in text_content.splitlines())
        payload: dict[str, Any] = {
            "personalizations": [{"to": [{"email": to_email}]}],
            "from": {
                "email": settings.email_from_address,
                "name": settings.email_from_name,
            },
            "subject": subject,
            "content": [
                {"type": "text/plain", "value": text_content},
                {"type": "text/html", "value": html_content},
            ],
        }
        response = await self.http_client.post(
            SENDGRID_URL,
            headers={
                "Authorization": f"Bearer {settings.sendgrid_api_key}",
                "Content-Type": "application/json",
            },
            json=payload,
        )
        if response.status_code not in (200, 202):
            logger.warning(
                f"SendGrid rejected email to {to_email}: "
                f"{response.status_code} {response.text[:200]}"
            )
            return False
        return True

    async def _deliver_quietly(
        self, to_email: str, subject: str, template_name: str, **context: Any
    ) -> bool:
        """Render and send; rendering or delivery failures are logged, never raised."""
        try:
            body = render_template(template_name, **context)
            return await self.send_email(to_email, subject, body)
        except (httpx.HTTPError, TemplateError) as exc:
            logger.warning(f"Email '{subject}' to {to_email} failed: {exc}")
            return False

    # ==================== TEMPLATES ====================

    async def notify_verification_otp(self, email: str, name: str, otp: str) -> bool:
        return await self._deliver_quietly(
            email,
            "Verify Your Email - VentureHub",
            "email/verification_otp.txt",
            name=name or email,
            otp=otp,
            expiry_minutes=settings.otp_expiry_minutes,
        )

    async def notify_booking_details(
        self,
        email: str,
        name: str,
        details: dict[str, str],
        headline: str = "Congratulations! Your booking has been confirmed and payment has been successfully processed.",
        subject: str = "Booking Confirmation - VentureHub",
    ) -> bool:
        return await self._deliver_quietly(
            email,
            subject,
            "email/booking_details.txt",
            name=name or email,
            headline=headline,
            **details,
        )

    async def notify_refund_accepted(
        self,
        email: str,
        name: str,
        details: dict[str, str],
        refund_amount: str,
    ) -> bool:
        return await self._deliver_quietly(
            email,
            "Refund Request Accepted - VentureHub",
            "email/refund_notification.txt",
            name=name or email,
            refund_amount=refund_amount,
            **details,
        )


# Singleton instance
email_service = EmailService()
