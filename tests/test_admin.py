"""Admin console: stats, reports, payments and ledger health."""

import csv
import io
from decimal import Decimal

import pytest

from app.services.report_service import report_service
from tests.conftest import API, create_listing, stay, top_up


@pytest.fixture
def paid_booking(client, host_headers, guest_headers):
    listing = create_listing(client, host_headers)
    top_up(client, guest_headers, "5000")
    check_in, check_out = stay()
    booking = client.post(
        f"{API}/bookings/",
        json={
            "listing_id": listing["id"],
            "check_in": check_in,
            "check_out": check_out,
            "payment_method": "wallet",
        },
        headers=guest_headers,
    ).json()
    client.post(f"{API}/bookings/{booking['id']}/respond", json={"status": "accepted"}, headers=host_headers)
    return booking


def test_admin_routes_require_admin(client, guest_headers):
    assert client.get(f"{API}/admin/stats", headers=guest_headers).status_code == 403
    assert client.get(f"{API}/admin/stats").status_code in (401, 403)


def test_dashboard_stats(client, admin_headers, paid_booking):
    stats = client.get(f"{API}/admin/stats", headers=admin_headers).json()

    assert stats["users_by_role"] == {"admin": 1, "guest": 1, "host": 1}
    assert stats["total_hosts"] == 1
    assert stats["published_listings"] == 1
    assert stats["total_bookings"] == 1
    assert stats["subscription_count"] == 1
    assert Decimal(stats["total_earnings"]) == Decimal("2550")
    assert stats["currency"] == "PHP"


def test_recent_activity_lists_bookings(client, admin_headers, paid_booking):
    activity = client.get(f"{API}/admin/activity", headers=admin_headers).json()
    assert "booking" in {item["type"] for item in activity}


def test_bookings_report_json_csv_and_html(client, admin_headers, paid_booking):
    report = client.get(f"{API}/admin/reports/bookings", headers=admin_headers).json()
    assert report["title"] == "Bookings Report"
    assert report["total"] == 1
    assert report["rows"][0]["reference"] == paid_booking["reference"]

    response = client.get(f"{API}/admin/reports/bookings/csv", headers=admin_headers)
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    rows = list(csv.DictReader(io.StringIO(response.text)))
    assert rows[0]["reference"] == paid_booking["reference"]

    response = client.get(f"{API}/admin/reports/bookings/html", headers=admin_headers)
    assert response.status_code == 200
    assert "<h1>Bookings Report</h1>" in response.text
    assert paid_booking["reference"] in response.text


def test_report_status_filter(client, admin_headers, paid_booking):
    report = client.get(
        f"{API}/admin/reports/bookings", params={"status": "declined"}, headers=admin_headers
    ).json()
    assert report["total"] == 0

    response = client.get(
        f"{API}/admin/reports/bookings/csv", params={"status": "declined"}, headers=admin_headers
    )
    assert response.status_code == 422


def test_unknown_report_type(client, admin_headers):
    response = client.get(f"{API}/admin/reports/reviews", headers=admin_headers)
    assert response.status_code == 422


def test_earnings_and_hosts_reports(client, admin_headers, paid_booking):
    earnings = client.get(f"{API}/admin/reports/earnings", headers=admin_headers).json()
    assert [Decimal(row["total_earnings"]) for row in earnings["rows"]] == [Decimal("2550")]

    hosts = client.get(f"{API}/admin/reports/hosts", headers=admin_headers).json()
    assert hosts["rows"][0]["listings"] == 1
    assert hosts["rows"][0]["listing_limit"] == 3


def test_policies_page(client, admin_headers):
    response = client.get(f"{API}/admin/policies/html", headers=admin_headers)
    assert response.status_code == 200
    assert "Cancellation Rules" in response.text
    assert "Registered hosts" in response.text


def test_payments_list_and_status_update(client, admin_headers, paid_booking):
    payments = client.get(f"{API}/admin/payments", headers=admin_headers).json()
    # host subscription, wallet top-up and the booking itself
    assert payments["total"] == 3
    kinds = {p["kind"]: p for p in payments["payments"]}
    assert kinds["booking"]["provider"] == "wallet"
    assert kinds["booking"]["provider_reference"].startswith("WAL-")

    payment_id = kinds["topup"]["id"]
    response = client.patch(
        f"{API}/admin/payments/{payment_id}",
        json={"status": "rejected", "note": "Chargeback"},
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert response.json()["admin_note"] == "Chargeback"

    rejected = client.get(
        f"{API}/admin/payments", params={"status": "rejected"}, headers=admin_headers
    ).json()
    assert [p["id"] for p in rejected["payments"]] == [payment_id]


def test_analytics(client, admin_headers, paid_booking):
    analytics = client.get(f"{API}/admin/analytics", headers=admin_headers).json()
    assert analytics["bookings_by_status"] == {"accepted": 1}
    assert Decimal(analytics["total_revenue"]) == Decimal("3000")
    assert analytics["top_hosts"][0]["name"] == "Hana Host"


def test_ledger_health_run(client, admin_headers, paid_booking):
    assert client.get(f"{API}/admin/health/ledger", headers=admin_headers).status_code == 404

    response = client.post(f"{API}/admin/health/ledger", headers=admin_headers)
    assert response.status_code == 200
    run = response.json()
    assert run["status"] == "OK"
    assert run["trigger"] == "manual"
    assert {check["name"] for check in run["checks"]} == {
        "wallet_balances",
        "negative_balances",
        "host_points",
        "refunded_bookings",
        "booking_fee_split",
    }
    assert run["counts"]["bookings"] == 1

    latest = client.get(f"{API}/admin/health/ledger", headers=admin_headers).json()
    assert latest["id"] == run["id"]


def test_admin_cannot_deactivate_self(client, admin_headers):
    me = client.get(f"{API}/auth/me", headers=admin_headers).json()
    response = client.patch(
        f"{API}/admin/users/{me['id']}", json={"is_active": False}, headers=admin_headers
    )
    assert response.status_code == 422


def test_to_csv_empty_and_ordered():
    assert report_service.to_csv({"rows": []}) == ""

    text = report_service.to_csv({"rows": [{"b": 1, "a": "x"}, {"b": 2, "a": "y"}]})
    assert text.splitlines() == ["b,a", "1,x", "2,y"]


def test_health_endpoint(client):
    body = client.get("/health").json()
    assert body["status"] == "healthy"
    assert body["payment_gateway"] == "manual"
