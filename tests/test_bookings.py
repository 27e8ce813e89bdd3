"""Booking lifecycle: quote, request, host response, payment and refunds."""

from decimal import Decimal
from uuid import UUID

import pytest

from app.database import AsyncSessionLocal
from app.models.booking import Booking
from app.services.email_service import email_service
from tests.conftest import API, create_listing, register_guest, stay, top_up


@pytest.fixture
def sent_emails(monkeypatch):
    sent = []

    async def fake_send(to_email, subject, text_content):
        sent.append({"to": to_email, "subject": subject, "body": text_content})
        return True

    monkeypatch.setattr(email_service, "send_email", fake_send)
    return sent


@pytest.fixture
def listing(client, host_headers):
    return create_listing(client, host_headers, promo="SUMMER", discount="10")


def _book(client, headers, listing_id, start_in_days=10, nights=3, **extra):
    check_in, check_out = stay(start_in_days, nights)
    payload = {"listing_id": listing_id, "check_in": check_in, "check_out": check_out, "guest_count": 2}
    payload.update(extra)
    return client.post(f"{API}/bookings/", json=payload, headers=headers)


def test_quote_applies_matching_promo(client, listing):
    check_in, check_out = stay(nights=3)
    response = client.post(
        f"{API}/bookings/quote",
        json={
            "listing_id": listing["id"],
            "check_in": check_in,
            "check_out": check_out,
            "guest_count": 2,
            "promo_code": "summer",
        },
    )

    assert response.status_code == 200
    quote = response.json()
    assert quote["nights"] == 3
    assert Decimal(quote["subtotal"]) == Decimal("3000")
    assert Decimal(quote["discount_amount"]) == Decimal("300")
    assert Decimal(quote["total"]) == Decimal("2700")
    assert quote["currency"] == "PHP"


def test_quote_rejects_too_many_guests(client, listing):
    check_in, check_out = stay()
    response = client.post(
        f"{API}/bookings/quote",
        json={"listing_id": listing["id"], "check_in": check_in, "check_out": check_out, "guest_count": 9},
    )
    assert response.status_code == 422


def test_full_booking_and_refund_flow(client, host_headers, guest_headers, listing, sent_emails):
    response = _book(client, guest_headers, listing["id"], promo_code="SUMMER")
    assert response.status_code == 201
    booking = response.json()
    assert booking["status"] == "pending"
    assert booking["paid"] is False
    assert booking["reference"].startswith("VH-")
    assert Decimal(booking["total_price"]) == Decimal("2700")

    # Host accepts: 15% fee, net credited to earnings, booking points awarded
    response = client.post(
        f"{API}/bookings/{booking['id']}/respond", json={"status": "accepted"}, headers=host_headers
    )
    assert response.status_code == 200
    accepted = response.json()
    assert accepted["status"] == "accepted"
    assert Decimal(accepted["platform_fee_percent"]) == Decimal("15")
    assert Decimal(accepted["platform_fee_amount"]) == Decimal("405")
    assert Decimal(accepted["host_net_amount"]) == Decimal("2295")
    assert sent_emails[-1]["subject"] == "Booking Accepted - VentureHub"

    dashboard = client.get(f"{API}/hosts/me/dashboard", headers=host_headers).json()
    assert Decimal(dashboard["total_earnings"]) == Decimal("2295")
    # signup 100 + publish 10 + booking 50
    assert dashboard["points"]["lifetime"] == 160

    # Guest pays from the wallet, which confirms the booking
    top_up(client, guest_headers, "5000")
    response = client.post(
        f"{API}/bookings/{booking['id']}/pay", json={"payment_method": "wallet"}, headers=guest_headers
    )
    assert response.status_code == 200
    assert response.json()["status"] == "confirmed"
    assert response.json()["paid"] is True
    wallet = client.get(f"{API}/wallet/", headers=guest_headers).json()
    assert Decimal(wallet["balance"]) == Decimal("2300")

    # Paying twice is refused
    response = client.post(
        f"{API}/bookings/{booking['id']}/pay", json={"payment_method": "wallet"}, headers=guest_headers
    )
    assert response.status_code == 400

    # Refund request, then host approval
    response = client.post(
        f"{API}/bookings/{booking['id']}/refund", json={"reason": "Change of plans"}, headers=guest_headers
    )
    assert response.status_code == 201
    refund = response.json()
    assert refund["status"] == "pending"
    assert Decimal(refund["amount"]) == Decimal("2700")

    response = client.post(
        f"{API}/bookings/{booking['id']}/refund", json={"reason": "Again please"}, headers=guest_headers
    )
    assert response.status_code == 400

    pending = client.get(f"{API}/refunds/", params={"status": "pending"}, headers=host_headers).json()
    assert [r["id"] for r in pending] == [refund["id"]]

    response = client.post(
        f"{API}/refunds/{refund['id']}/decide", json={"status": "approved"}, headers=host_headers
    )
    assert response.status_code == 200
    assert response.json()["status"] == "approved"
    assert "PHP 2,700.00" in sent_emails[-1]["body"]

    booking_after = client.get(f"{API}/bookings/{booking['id']}", headers=guest_headers).json()
    assert booking_after["status"] == "refunded"

    wallet = client.get(f"{API}/wallet/", headers=guest_headers).json()
    assert Decimal(wallet["balance"]) == Decimal("5000")

    types = [t["type"] for t in client.get(f"{API}/wallet/transactions", headers=guest_headers).json()["transactions"]]
    assert sorted(types) == ["refund", "spend", "topup"]

    dashboard = client.get(f"{API}/hosts/me/dashboard", headers=host_headers).json()
    assert Decimal(dashboard["total_earnings"]) == Decimal("0")

    # A decided refund cannot be decided again
    response = client.post(
        f"{API}/refunds/{refund['id']}/decide", json={"status": "rejected"}, headers=host_headers
    )
    assert response.status_code == 400


def test_pay_up_front_with_wallet(client, guest_headers, listing):
    top_up(client, guest_headers, "4000")

    response = _book(client, guest_headers, listing["id"], payment_method="wallet")
    assert response.status_code == 201
    booking = response.json()
    assert booking["paid"] is True
    assert booking["status"] == "pending"
    assert booking["payment_method"] == "wallet"

    wallet = client.get(f"{API}/wallet/", headers=guest_headers).json()
    assert Decimal(wallet["balance"]) == Decimal("1000")


def test_insufficient_wallet_balance_creates_nothing(client, guest_headers, listing):
    top_up(client, guest_headers, "100")

    response = _book(client, guest_headers, listing["id"], payment_method="wallet")
    assert response.status_code == 400

    mine = client.get(f"{API}/bookings/", headers=guest_headers).json()
    assert mine["total"] == 0


def test_paypal_payment_requires_order_id(client, guest_headers, listing):
    response = _book(client, guest_headers, listing["id"], payment_method="paypal")
    assert response.status_code == 422

    response = _book(
        client, guest_headers, listing["id"], payment_method="paypal", paypal_order_id="ORDER-123"
    )
    assert response.status_code == 201
    assert response.json()["paid"] is True


def test_homes_cannot_be_double_booked(client, host_headers, guest_headers, listing):
    first = _book(client, guest_headers, listing["id"], start_in_days=10, nights=3).json()
    client.post(f"{API}/bookings/{first['id']}/respond", json={"status": "accepted"}, headers=host_headers)

    other_guest = register_guest(client, email="second@example.com", name="Sam Second")
    response = _book(client, other_guest, listing["id"], start_in_days=11, nights=2)
    assert response.status_code == 409

    # Back-to-back stays are fine
    response = _book(client, other_guest, listing["id"], start_in_days=13, nights=2)
    assert response.status_code == 201


def test_experiences_allow_overlapping_bookings(client, host_headers, guest_headers):
    tour = create_listing(client, host_headers, title="Island Tour", category="experience")
    first = _book(client, guest_headers, tour["id"]).json()
    client.post(f"{API}/bookings/{first['id']}/respond", json={"status": "accepted"}, headers=host_headers)

    other_guest = register_guest(client, email="second@example.com", name="Sam Second")
    assert _book(client, other_guest, tour["id"]).status_code == 201


def test_booking_outside_availability_window(client, host_headers, guest_headers):
    check_in, _ = stay(start_in_days=30)
    listing = create_listing(client, host_headers, availability_start=check_in)

    response = _book(client, guest_headers, listing["id"], start_in_days=5)
    assert response.status_code == 400


def test_host_cannot_book_and_draft_is_unavailable(client, host_headers, guest_headers):
    draft = create_listing(client, host_headers, publish=False)
    assert _book(client, guest_headers, draft["id"]).status_code == 400

    published = create_listing(client, host_headers)
    assert _book(client, host_headers, published["id"]).status_code == 403


def test_decline_is_final(client, host_headers, guest_headers, listing):
    booking = _book(client, guest_headers, listing["id"]).json()

    response = client.post(
        f"{API}/bookings/{booking['id']}/respond", json={"status": "declined"}, headers=host_headers
    )
    assert response.json()["status"] == "declined"

    response = client.post(
        f"{API}/bookings/{booking['id']}/respond", json={"status": "accepted"}, headers=host_headers
    )
    assert response.status_code == 400


def test_only_the_host_can_respond(client, guest_headers, listing):
    booking = _book(client, guest_headers, listing["id"]).json()
    response = client.post(
        f"{API}/bookings/{booking['id']}/respond", json={"status": "accepted"}, headers=guest_headers
    )
    assert response.status_code == 403


def test_unpaid_booking_cannot_be_refunded(client, host_headers, guest_headers, listing):
    booking = _book(client, guest_headers, listing["id"]).json()
    client.post(f"{API}/bookings/{booking['id']}/respond", json={"status": "accepted"}, headers=host_headers)

    response = client.post(
        f"{API}/bookings/{booking['id']}/refund", json={"reason": "Never mind"}, headers=guest_headers
    )
    assert response.status_code == 400


def test_rejected_refund_keeps_booking(client, host_headers, guest_headers, listing):
    top_up(client, guest_headers, "5000")
    booking = _book(client, guest_headers, listing["id"], payment_method="wallet").json()
    client.post(f"{API}/bookings/{booking['id']}/respond", json={"status": "accepted"}, headers=host_headers)
    refund = client.post(
        f"{API}/bookings/{booking['id']}/refund", json={"reason": "Weather"}, headers=guest_headers
    ).json()

    response = client.post(
        f"{API}/refunds/{refund['id']}/decide", json={"status": "rejected"}, headers=host_headers
    )
    assert response.json()["status"] == "rejected"

    booking_after = client.get(f"{API}/bookings/{booking['id']}", headers=host_headers).json()
    assert booking_after["status"] == "accepted"
    assert booking_after["refund_requested"] is True

    mine = client.get(f"{API}/refunds/mine", headers=guest_headers).json()
    assert [r["status"] for r in mine] == ["rejected"]


def test_host_calendar_and_notifications(client, host_headers, guest_headers, listing):
    booking = _book(client, guest_headers, listing["id"], start_in_days=10, nights=3).json()
    client.post(f"{API}/bookings/{booking['id']}/respond", json={"status": "accepted"}, headers=host_headers)

    check_in, check_out = stay(start_in_days=0, nights=60)
    calendar = client.get(
        f"{API}/bookings/calendar", params={"start": check_in, "end": check_out}, headers=host_headers
    ).json()
    assert [entry["reference"] for entry in calendar] == [booking["reference"]]

    notifications = client.get(f"{API}/hosts/me/notifications", headers=host_headers).json()
    assert notifications[0]["id"] == f"booking-{booking['id']}"
    assert notifications[0]["type"] == "booking"


def test_refund_reverses_only_the_host_net(client, host_headers, guest_headers, listing):
    first = _book(client, guest_headers, listing["id"], start_in_days=10, nights=3).json()
    second = _book(client, guest_headers, listing["id"], start_in_days=20, nights=3).json()
    for booking in (first, second):
        client.post(f"{API}/bookings/{booking['id']}/respond", json={"status": "accepted"}, headers=host_headers)

    dashboard = client.get(f"{API}/hosts/me/dashboard", headers=host_headers).json()
    assert Decimal(dashboard["total_earnings"]) == Decimal("5100")

    top_up(client, guest_headers, "3000")
    client.post(f"{API}/bookings/{first['id']}/pay", json={"payment_method": "wallet"}, headers=guest_headers)
    refund = client.post(
        f"{API}/bookings/{first['id']}/refund", json={"reason": "Flight cancelled"}, headers=guest_headers
    ).json()
    response = client.post(
        f"{API}/refunds/{refund['id']}/decide", json={"status": "approved"}, headers=host_headers
    )
    assert response.status_code == 200

    # The other booking's 2550 net is untouched
    dashboard = client.get(f"{API}/hosts/me/dashboard", headers=host_headers).json()
    assert Decimal(dashboard["total_earnings"]) == Decimal("2550")


def test_topup_order_cannot_be_reused(client, guest_headers, listing):
    top_up(client, guest_headers, "500", order_id="ORDER-ONCE")

    response = client.post(
        f"{API}/wallet/topup",
        json={"paypal_order_id": "ORDER-ONCE", "amount": "500"},
        headers=guest_headers,
    )
    assert response.status_code == 409

    # Nor can it pay for a booking
    response = _book(
        client, guest_headers, listing["id"], payment_method="paypal", paypal_order_id="ORDER-ONCE"
    )
    assert response.status_code == 409

    wallet = client.get(f"{API}/wallet/", headers=guest_headers).json()
    assert Decimal(wallet["balance"]) == Decimal("500")
    assert client.get(f"{API}/bookings/", headers=guest_headers).json()["total"] == 0


def test_booking_order_cannot_pay_twice(client, host_headers, guest_headers, listing):
    response = _book(
        client, guest_headers, listing["id"], payment_method="paypal", paypal_order_id="ORDER-STAY"
    )
    assert response.status_code == 201

    pending = _book(client, guest_headers, listing["id"], start_in_days=20).json()
    client.post(f"{API}/bookings/{pending['id']}/respond", json={"status": "accepted"}, headers=host_headers)
    response = client.post(
        f"{API}/bookings/{pending['id']}/pay",
        json={"payment_method": "paypal", "paypal_order_id": "ORDER-STAY"},
        headers=guest_headers,
    )
    assert response.status_code == 409

    booking_after = client.get(f"{API}/bookings/{pending['id']}", headers=guest_headers).json()
    assert booking_after["paid"] is False
    assert booking_after["status"] == "accepted"


def test_fully_discounted_stay_needs_no_funds(client, host_headers, guest_headers):
    listing = create_listing(client, host_headers, promo="FREE", discount="100")

    response = _book(client, guest_headers, listing["id"], payment_method="wallet", promo_code="FREE")
    assert response.status_code == 201
    booking = response.json()
    assert Decimal(booking["total_price"]) == Decimal("0")
    assert booking["paid"] is True
    assert booking["payment_id"] == f"free-{booking['reference']}"

    client.post(f"{API}/bookings/{booking['id']}/respond", json={"status": "accepted"}, headers=host_headers)
    refund = client.post(
        f"{API}/bookings/{booking['id']}/refund", json={"reason": "Plans changed"}, headers=guest_headers
    ).json()
    response = client.post(
        f"{API}/refunds/{refund['id']}/decide", json={"status": "approved"}, headers=host_headers
    )
    assert response.status_code == 200

    wallet = client.get(f"{API}/wallet/", headers=guest_headers).json()
    assert Decimal(wallet["balance"]) == Decimal("0")
    transactions = client.get(f"{API}/wallet/transactions", headers=guest_headers).json()
    assert transactions["total"] == 0


def test_emails_go_out_after_the_change_is_saved(client, host_headers, guest_headers, listing, monkeypatch):
    booking = _book(client, guest_headers, listing["id"]).json()
    seen = []

    async def fake_send(to_email, subject, text_content):
        # Read through a separate session: only committed rows are visible
        async with AsyncSessionLocal() as session:
            stored = await session.get(Booking, UUID(booking["id"]))
            seen.append((subject, stored.status))
        return True

    monkeypatch.setattr(email_service, "send_email", fake_send)

    client.post(f"{API}/bookings/{booking['id']}/respond", json={"status": "accepted"}, headers=host_headers)
    top_up(client, guest_headers, "3000")
    client.post(f"{API}/bookings/{booking['id']}/pay", json={"payment_method": "wallet"}, headers=guest_headers)

    assert seen == [
        ("Booking Accepted - VentureHub", "accepted"),
        ("Booking Confirmation - VentureHub", "confirmed"),
    ]
