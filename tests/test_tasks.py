"""Periodic maintenance tasks, called directly without a broker."""

import asyncio

from app.tasks import cleanup_expired_otps, deactivate_expired_coupons, run_ledger_health_check
from tests.conftest import API, PASSWORD, read_otp
from tests.test_auth import _expire_otp


def test_cleanup_expired_otps(client):
    client.post(
        f"{API}/auth/register",
        json={"email": "stale@example.com", "name": "Stale", "password": PASSWORD},
    )
    client.post(
        f"{API}/auth/register",
        json={"email": "fresh@example.com", "name": "Fresh", "password": PASSWORD},
    )
    asyncio.run(_expire_otp("stale@example.com"))

    assert cleanup_expired_otps() == {"status": "success", "cleared": 1}
    assert read_otp("stale@example.com") is None
    assert read_otp("fresh@example.com") is not None


def test_deactivate_expired_coupons(client, host_headers):
    for code, until in (("OLD", "2020-02-01T00:00:00Z"), ("OPEN", None)):
        client.post(
            f"{API}/coupons/",
            json={"code": code, "discount_percent": "5", "min_amount": "0", "valid_until": until},
            headers=host_headers,
        )

    assert deactivate_expired_coupons() == {"status": "success", "deactivated": 1}

    mine = client.get(f"{API}/coupons/mine", headers=host_headers).json()
    assert {c["code"]: c["active"] for c in mine} == {"OLD": False, "OPEN": True}


def test_scheduled_ledger_health_check(client, admin_headers):
    result = run_ledger_health_check()
    assert result["status"] == "OK"

    latest = client.get(f"{API}/admin/health/ledger", headers=admin_headers).json()
    assert latest["id"] == result["id"]
    assert latest["trigger"] == "scheduled"
