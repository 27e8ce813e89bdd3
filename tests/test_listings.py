"""Listing management, plan limits, points and browsing."""

from decimal import Decimal

from tests.conftest import API, create_listing, register_guest, register_host


def test_new_listing_starts_as_draft(client, host_headers):
    listing = create_listing(client, host_headers, publish=False)

    assert listing["status"] == "draft"
    assert listing["published_at"] is None
    assert listing["amenities"] == ["wifi", "pool"]

    browse = client.get(f"{API}/listings/").json()
    assert browse["total"] == 0


def test_guest_cannot_create_listing(client, guest_headers):
    response = client.post(
        f"{API}/listings/",
        json={"title": "Nope", "location": "Cebu"},
        headers=guest_headers,
    )
    assert response.status_code == 403


def test_invalid_availability_window(client, host_headers):
    response = client.post(
        f"{API}/listings/",
        json={
            "title": "Cabin",
            "location": "Baguio",
            "availability_start": "2026-12-10",
            "availability_end": "2026-12-01",
        },
        headers=host_headers,
    )
    assert response.status_code == 422


def test_publish_awards_points_once(client, host_headers):
    listing = create_listing(client, host_headers)
    assert listing["status"] == "published"

    points = client.get(f"{API}/hosts/me/points", headers=host_headers).json()
    # signup bonus + first publish
    assert points["lifetime"] == 110

    client.post(f"{API}/listings/{listing['id']}/unpublish", headers=host_headers)
    client.post(f"{API}/listings/{listing['id']}/publish", headers=host_headers)

    points = client.get(f"{API}/hosts/me/points", headers=host_headers).json()
    assert points["lifetime"] == 110

    events = client.get(f"{API}/hosts/me/points/events", headers=host_headers).json()
    assert [e["reason"] for e in events].count("published_listing") == 1


def test_basic_plan_publish_limit(client, host_headers):
    for i in range(3):
        create_listing(client, host_headers, title=f"Room {i}")

    extra = create_listing(client, host_headers, publish=False, title="Room 4")
    response = client.post(f"{API}/listings/{extra['id']}/publish", headers=host_headers)
    assert response.status_code == 400
    assert "3 published listings" in response.json()["detail"]

    mine = client.get(f"{API}/listings/mine", headers=host_headers).json()
    assert mine["published"] == 3
    assert mine["drafts"] == 1


def test_free_listing_credit_lifts_limit(client):
    headers = register_host(client)
    for i in range(3):
        create_listing(client, headers, title=f"Room {i}")

    # 100 signup + 3 x 10 publish = 130, short of the 200 a free listing costs
    response = client.post(f"{API}/hosts/me/redeem", json={"reward": "free_listing"}, headers=headers)
    assert response.status_code == 400

    upgrade = client.post(
        f"{API}/hosts/me/plan",
        json={"plan": "annual", "subscription_id": "I-ANNUAL-002"},
        headers=headers,
    )
    assert upgrade.status_code == 200
    assert upgrade.json()["listing_limit"] is None

    create_listing(client, headers, title="Room 4")
    mine = client.get(f"{API}/listings/mine", headers=headers).json()
    assert mine["published"] == 4


def test_plan_cannot_be_downgraded(client):
    headers = register_host(client, plan="pro")
    response = client.post(
        f"{API}/hosts/me/plan",
        json={"plan": "basic", "subscription_id": "I-BASIC-003"},
        headers=headers,
    )
    assert response.status_code == 422


def test_drafts_hidden_from_public(client, host_headers):
    listing = create_listing(client, host_headers, publish=False)

    assert client.get(f"{API}/listings/{listing['id']}").status_code == 404
    assert client.get(f"{API}/listings/{listing['id']}", headers=host_headers).status_code == 200


def test_public_listing_hides_promo_code(client, host_headers):
    listing = create_listing(client, host_headers, promo="SUMMER", discount="10")

    public = client.get(f"{API}/listings/{listing['id']}").json()
    assert "promo" not in public
    assert public["has_promo"] is True


def test_browse_filters(client, host_headers):
    create_listing(client, host_headers, title="Seaside Cottage", location="El Nido")
    create_listing(client, host_headers, title="Island Hopping", location="Coron", category="experience")

    homes = client.get(f"{API}/listings/", params={"category": "home"}).json()
    assert [l["title"] for l in homes["listings"]] == ["Seaside Cottage"]

    search = client.get(f"{API}/listings/", params={"q": "coron"}).json()
    assert search["total"] == 1
    assert search["listings"][0]["category"] == "experience"


def test_update_and_delete(client, host_headers):
    listing = create_listing(client, host_headers, publish=False)

    response = client.patch(
        f"{API}/listings/{listing['id']}",
        json={"rate": "1500", "amenities": None},
        headers=host_headers,
    )
    assert response.status_code == 200
    assert Decimal(response.json()["rate"]) == Decimal("1500")
    assert response.json()["amenities"] == []

    other = register_host(client, email="other@example.com")
    response = client.patch(f"{API}/listings/{listing['id']}", json={"rate": "1"}, headers=other)
    assert response.status_code == 403

    response = client.delete(f"{API}/listings/{listing['id']}", headers=host_headers)
    assert response.status_code == 204


def test_recommendations_use_preferences(client, host_headers):
    create_listing(client, host_headers, title="Beach House", amenities=["pool", "beach access"])
    create_listing(client, host_headers, title="City Loft", amenities=["gym"])
    guest = register_guest(client)

    response = client.put(
        f"{API}/wishlist/preferences",
        json={"categories": ["home"], "tags": {"home": ["pool"]}},
        headers=guest,
    )
    assert response.status_code == 200

    recommended = client.get(f"{API}/listings/recommendations", headers=guest).json()
    assert [l["title"] for l in recommended] == ["Beach House"]
    assert recommended[0]["match_score"] >= 1
