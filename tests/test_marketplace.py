"""Coupons, messaging, reviews, wishlist and host rewards."""

from decimal import Decimal

from tests.conftest import API, create_listing, register_guest, register_host, stay, top_up


def _accepted_booking(client, host_headers, guest_headers, listing_id):
    check_in, check_out = stay()
    booking = client.post(
        f"{API}/bookings/",
        json={"listing_id": listing_id, "check_in": check_in, "check_out": check_out},
        headers=guest_headers,
    ).json()
    client.post(f"{API}/bookings/{booking['id']}/respond", json={"status": "accepted"}, headers=host_headers)
    return booking


class TestCoupons:
    def test_create_normalises_code_and_rejects_duplicates(self, client, host_headers):
        response = client.post(
            f"{API}/coupons/",
            json={"code": " save10 ", "discount_percent": "10", "min_amount": "1000"},
            headers=host_headers,
        )
        assert response.status_code == 201
        assert response.json()["code"] == "SAVE10"

        response = client.post(
            f"{API}/coupons/",
            json={"code": "SAVE10", "discount_percent": "5", "min_amount": "0"},
            headers=host_headers,
        )
        assert response.status_code == 409

    def test_generated_code(self, client, host_headers):
        response = client.post(
            f"{API}/coupons/",
            json={"discount_percent": "15", "min_amount": "0", "category": "home"},
            headers=host_headers,
        )
        code = response.json()["code"]
        assert len(code) == 8
        assert not set(code) & set("IO01L")

    def test_toggle_hides_coupon_from_guests(self, client, host_headers):
        coupon = client.post(
            f"{API}/coupons/",
            json={"code": "WELCOME", "discount_percent": "5", "min_amount": "0"},
            headers=host_headers,
        ).json()

        assert [c["code"] for c in client.get(f"{API}/coupons/").json()] == ["WELCOME"]

        response = client.post(f"{API}/coupons/{coupon['id']}/toggle", headers=host_headers)
        assert response.json()["active"] is False
        assert client.get(f"{API}/coupons/").json() == []
        assert len(client.get(f"{API}/coupons/mine", headers=host_headers).json()) == 1

    def test_expired_coupon_not_listed(self, client, host_headers):
        client.post(
            f"{API}/coupons/",
            json={
                "code": "OLD",
                "discount_percent": "5",
                "min_amount": "0",
                "valid_from": "2020-01-01T00:00:00Z",
                "valid_until": "2020-02-01T00:00:00Z",
            },
            headers=host_headers,
        )
        assert client.get(f"{API}/coupons/").json() == []

    def test_only_owner_can_delete(self, client, host_headers):
        coupon = client.post(
            f"{API}/coupons/",
            json={"code": "MINE", "discount_percent": "5", "min_amount": "0"},
            headers=host_headers,
        ).json()
        other = register_host(client, email="other@example.com")

        assert client.delete(f"{API}/coupons/{coupon['id']}", headers=other).status_code == 403
        assert client.delete(f"{API}/coupons/{coupon['id']}", headers=host_headers).status_code == 204


class TestMessages:
    def test_guest_and_host_share_one_thread(self, client, host_headers, guest_headers):
        listing = create_listing(client, host_headers)

        response = client.post(
            f"{API}/messages/",
            json={"listing_id": listing["id"], "text": "Is parking available?"},
            headers=guest_headers,
        )
        assert response.status_code == 201
        guest_id = response.json()["guest_id"]
        assert response.json()["sender_role"] == "guest"

        # Hosts must say which guest they answer
        response = client.post(
            f"{API}/messages/",
            json={"listing_id": listing["id"], "text": "Yes!"},
            headers=host_headers,
        )
        assert response.status_code == 422

        response = client.post(
            f"{API}/messages/",
            json={"listing_id": listing["id"], "text": "Yes, two slots.", "guest_id": guest_id},
            headers=host_headers,
        )
        assert response.status_code == 201
        assert response.json()["sender_role"] == "host"

        thread = client.get(
            f"{API}/messages/thread", params={"listing_id": listing["id"]}, headers=guest_headers
        ).json()
        assert [m["text"] for m in thread] == ["Is parking available?", "Yes, two slots."]

        inbox = client.get(f"{API}/messages/inbox", params={"role": "host"}, headers=host_headers).json()
        assert len(inbox) == 1
        assert inbox[0]["message_count"] == 2
        assert inbox[0]["last_message"]["text"] == "Yes, two slots."

    def test_outsiders_cannot_read_threads(self, client, host_headers, guest_headers):
        listing = create_listing(client, host_headers)
        message = client.post(
            f"{API}/messages/",
            json={"listing_id": listing["id"], "text": "Hello"},
            headers=guest_headers,
        ).json()
        stranger = register_guest(client, email="stranger@example.com", name="Stan")

        response = client.get(
            f"{API}/messages/thread",
            params={"listing_id": listing["id"], "guest_id": message["guest_id"]},
            headers=stranger,
        )
        assert response.status_code == 403

    def test_blank_message_rejected(self, client, host_headers, guest_headers):
        listing = create_listing(client, host_headers)
        response = client.post(
            f"{API}/messages/", json={"listing_id": listing["id"], "text": "   "}, headers=guest_headers
        )
        assert response.status_code == 422


class TestReviews:
    def test_review_once_per_booking(self, client, host_headers, guest_headers):
        listing = create_listing(client, host_headers)
        booking = _accepted_booking(client, host_headers, guest_headers, listing["id"])

        response = client.post(
            f"{API}/reviews/",
            json={"booking_id": booking["id"], "rating": 5, "comment": " Lovely stay "},
            headers=guest_headers,
        )
        assert response.status_code == 201
        assert response.json()["comment"] == "Lovely stay"
        assert response.json()["guest_name"] == "Gina Guest"

        response = client.post(
            f"{API}/reviews/", json={"booking_id": booking["id"], "rating": 4}, headers=guest_headers
        )
        assert response.status_code == 409

        reviews = client.get(f"{API}/reviews/listing/{listing['id']}").json()
        assert reviews["total"] == 1
        assert Decimal(reviews["average_rating"]) == Decimal("5.0")

    def test_pending_booking_cannot_be_reviewed(self, client, host_headers, guest_headers):
        listing = create_listing(client, host_headers)
        check_in, check_out = stay()
        booking = client.post(
            f"{API}/bookings/",
            json={"listing_id": listing["id"], "check_in": check_in, "check_out": check_out},
            headers=guest_headers,
        ).json()

        response = client.post(
            f"{API}/reviews/", json={"booking_id": booking["id"], "rating": 3}, headers=guest_headers
        )
        assert response.status_code == 422

    def test_rating_range(self, client, host_headers, guest_headers):
        listing = create_listing(client, host_headers)
        booking = _accepted_booking(client, host_headers, guest_headers, listing["id"])
        response = client.post(
            f"{API}/reviews/", json={"booking_id": booking["id"], "rating": 6}, headers=guest_headers
        )
        assert response.status_code == 422


class TestWishlist:
    def test_favorite_toggle(self, client, host_headers, guest_headers):
        listing = create_listing(client, host_headers)

        response = client.post(f"{API}/wishlist/favorites/{listing['id']}", headers=guest_headers)
        assert response.json()["favorited"] is True
        favorites = client.get(f"{API}/wishlist/favorites", headers=guest_headers).json()
        assert [f["id"] for f in favorites] == [listing["id"]]

        response = client.post(f"{API}/wishlist/favorites/{listing['id']}", headers=guest_headers)
        assert response.json()["favorited"] is False
        assert client.get(f"{API}/wishlist/favorites", headers=guest_headers).json() == []

    def test_suggestion_reaches_host(self, client, host_headers, guest_headers):
        listing = create_listing(client, host_headers)
        booking = _accepted_booking(client, host_headers, guest_headers, listing["id"])

        response = client.post(
            f"{API}/wishlist/suggestions",
            json={"booking_id": booking["id"], "message": "A hammock would be great"},
            headers=guest_headers,
        )
        assert response.status_code == 201

        suggestions = client.get(f"{API}/wishlist/suggestions", headers=host_headers).json()
        assert [s["message"] for s in suggestions] == ["A hammock would be great"]

    def test_unknown_preference_category(self, client, guest_headers):
        response = client.put(
            f"{API}/wishlist/preferences", json={"categories": ["castle"]}, headers=guest_headers
        )
        assert response.status_code == 422


class TestHostRewards:
    def test_fee_discount_lowers_platform_fee(self, client):
        host = register_host(client, plan="annual")
        guest = register_guest(client)
        listings = [create_listing(client, host, title=f"Villa {i}") for i in range(5)]

        # 100 signup + 5 x 10 publish = 150, exactly the fee discount cost
        response = client.post(f"{API}/hosts/me/redeem", json={"reward": "fee_discount"}, headers=host)
        assert response.status_code == 200
        assert response.json()["points_available"] == 0
        assert response.json()["valid_until"] is not None

        fee = client.get(f"{API}/hosts/me/fee", headers=host).json()
        assert Decimal(fee["effective_fee_percent"]) == Decimal("5")

        booking = _accepted_booking(client, host, guest, listings[0]["id"])
        accepted = client.get(f"{API}/bookings/{booking['id']}", headers=host).json()
        assert Decimal(accepted["platform_fee_percent"]) == Decimal("5")
        assert Decimal(accepted["platform_fee_amount"]) == Decimal("150")

        points = client.get(f"{API}/hosts/me/points", headers=host).json()
        assert points["available"] == 50
        assert points["lifetime"] == 200

    def test_rewards_catalogue(self, client):
        rewards = client.get(f"{API}/hosts/rewards").json()
        assert {r["type"]: r["cost"] for r in rewards} == {
            "fee_discount": 150,
            "free_listing": 200,
            "promotion_boost": 120,
        }

    def test_plans_catalogue(self, client):
        plans = client.get(f"{API}/plans/").json()
        assert [p["key"] for p in plans] == ["basic", "pro", "annual"]


def test_wallet_topup_history(client, guest_headers):
    top_up(client, guest_headers, "250.50", order_id="ORDER-A")
    wallet = top_up(client, guest_headers, "100", order_id="ORDER-B")
    assert Decimal(wallet["balance"]) == Decimal("350.50")

    history = client.get(f"{API}/wallet/transactions", headers=guest_headers).json()
    assert history["total"] == 2
    assert {t["paypal_order_id"] for t in history["transactions"]} == {"ORDER-A", "ORDER-B"}
