"""Registration, OTP verification and token endpoints."""

import asyncio
from datetime import timedelta

import pytest
from jinja2 import TemplateError
from sqlalchemy import update

from app.database import AsyncSessionLocal
from app.models.user import User
from app.services import email_service as email_module
from app.services.email_service import email_service
from app.utils.dates import utcnow
from tests.conftest import API, PASSWORD, login, read_otp, register_guest, register_host


async def _expire_otp(email: str) -> None:
    async with AsyncSessionLocal() as session:
        await session.execute(
            update(User)
            .where(User.email == email)
            .values(verification_otp_expiry=utcnow() - timedelta(minutes=1))
        )
        await session.commit()


def _register(client, email="new@example.com"):
    return client.post(
        f"{API}/auth/register",
        json={"email": email, "name": "New Person", "password": PASSWORD},
    )


def test_register_issues_six_digit_otp(client):
    response = _register(client, "Mixed.Case@Example.com")

    assert response.status_code == 201
    body = response.json()
    assert body["user"]["email"] == "mixed.case@example.com"
    assert body["user"]["verified"] is False
    assert body["user"]["role"] == "guest"

    otp = read_otp("mixed.case@example.com")
    assert otp is not None and len(otp) == 6 and otp.isdigit()


def test_duplicate_email_conflicts(client):
    assert _register(client).status_code == 201
    response = _register(client)
    assert response.status_code == 409
    assert response.json()["detail"] == "Email already registered"


def test_login_requires_verified_email(client):
    _register(client)
    response = client.post(f"{API}/auth/login", json={"email": "new@example.com", "password": PASSWORD})

    assert response.status_code == 403
    assert response.json()["detail"] == "Please verify your email"


def test_wrong_otp_is_rejected(client):
    _register(client)
    otp = read_otp("new@example.com")
    wrong = "000000" if otp != "000000" else "111111"

    response = client.post(f"{API}/auth/verify-otp", json={"email": "new@example.com", "otp": wrong})
    assert response.status_code == 422
    assert response.json()["detail"] == "Invalid OTP"


def test_expired_otp_is_rejected(client):
    _register(client)
    asyncio.run(_expire_otp("new@example.com"))

    response = client.post(
        f"{API}/auth/verify-otp",
        json={"email": "new@example.com", "otp": read_otp("new@example.com")},
    )
    assert response.status_code == 422
    assert response.json()["detail"] == "OTP has expired"


def test_verify_then_login(client):
    _register(client)
    otp = read_otp("new@example.com")

    response = client.post(f"{API}/auth/verify-otp", json={"email": "new@example.com", "otp": otp})
    assert response.status_code == 200
    assert response.json()["message"] == "Email verified successfully"
    assert read_otp("new@example.com") is None

    # A second verification is harmless
    response = client.post(f"{API}/auth/verify-otp", json={"email": "new@example.com", "otp": otp})
    assert response.json()["message"] == "Email already verified"

    headers = login(client, "new@example.com")
    me = client.get(f"{API}/auth/me", headers=headers)
    assert me.status_code == 200
    assert me.json()["verified"] is True


def test_resend_replaces_previous_code(client):
    _register(client)
    first = read_otp("new@example.com")

    for _ in range(5):
        response = client.post(f"{API}/auth/resend-otp", json={"email": "new@example.com"})
        assert response.status_code == 200
        if read_otp("new@example.com") != first:
            break

    assert read_otp("new@example.com") != first


def test_wrong_password(client):
    register_guest(client)
    response = client.post(
        f"{API}/auth/login", json={"email": "guest@example.com", "password": "not-the-password"}
    )
    assert response.status_code == 401


def test_refresh_token_flow(client):
    register_guest(client)
    tokens = client.post(
        f"{API}/auth/login", json={"email": "guest@example.com", "password": PASSWORD}
    ).json()

    response = client.post(f"{API}/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert response.status_code == 200
    assert response.json()["access_token"]

    # An access token cannot be used as a refresh token
    response = client.post(f"{API}/auth/refresh", json={"refresh_token": tokens["access_token"]})
    assert response.status_code == 401


def test_host_registration_creates_profile_with_signup_bonus(client):
    headers = register_host(client, plan="pro")

    response = client.get(f"{API}/hosts/me", headers=headers)
    assert response.status_code == 200
    account = response.json()
    assert account["plan_key"] == "pro"
    assert account["profile"]["listing_limit"] == 8
    assert account["points"]["lifetime"] == 100
    assert [p["key"] for p in account["upgrade_options"]] == ["annual"]


def test_deactivated_user_cannot_log_in(client, admin_headers):
    register_guest(client)
    users = client.get(f"{API}/admin/users", params={"role": "guest"}, headers=admin_headers).json()
    guest_id = users["users"][0]["id"]

    response = client.patch(
        f"{API}/admin/users/{guest_id}", json={"is_active": False}, headers=admin_headers
    )
    assert response.status_code == 200

    response = client.post(
        f"{API}/auth/login", json={"email": "guest@example.com", "password": PASSWORD}
    )
    assert response.status_code == 401
    assert response.json()["detail"] == "Account is deactivated"


def test_profile_update(client, guest_headers):
    response = client.patch(
        f"{API}/users/me", json={"name": "Gina G.", "phone": "+63 917 123 4567"}, headers=guest_headers
    )
    assert response.status_code == 200
    assert response.json()["name"] == "Gina G."

    response = client.patch(f"{API}/users/me", json={"phone": "abc"}, headers=guest_headers)
    assert response.status_code == 422


@pytest.fixture
def sent_emails(monkeypatch):
    sent = []

    async def fake_send(to_email, subject, text_content):
        sent.append({"to": to_email, "subject": subject, "body": text_content})
        return True

    monkeypatch.setattr(email_service, "send_email", fake_send)
    return sent


def test_verification_email_greets_user_by_name(client, sent_emails):
    response = _register(client)
    assert response.status_code == 201

    assert len(sent_emails) == 1
    email = sent_emails[0]
    assert email["to"] == "new@example.com"
    assert email["subject"] == "Verify Your Email - VentureHub"
    assert email["body"].startswith("Dear New Person,")
    assert read_otp("new@example.com") in email["body"]


def test_registration_survives_template_failure(client, monkeypatch, sent_emails):
    def broken_render(template_name, **context):
        raise TemplateError("template missing")

    monkeypatch.setattr(email_module, "render_template", broken_render)

    response = _register(client)
    assert response.status_code == 201
    assert sent_emails == []
    assert read_otp("new@example.com") is not None

    response = client.post(f"{API}/auth/resend-otp", json={"email": "new@example.com"})
    assert response.status_code == 200
