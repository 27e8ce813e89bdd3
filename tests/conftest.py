"""Shared fixtures: a throwaway SQLite database and API helpers."""

import asyncio
import os
import tempfile
from datetime import date, timedelta

_TMP_DIR = tempfile.mkdtemp(prefix="venturehub-tests-")

os.environ["DB_URL"] = f"sqlite+aiosqlite:///{_TMP_DIR}/test.db"
os.environ["ENVIRONMENT"] = "development"
os.environ["PAYMENT_GATEWAY"] = "manual"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SENDGRID_API_KEY"] = ""
os.environ["LEDGER_HEALTH_ON_STARTUP"] = "false"
os.environ["LEDGER_HEALTH_INTERVAL_HOURS"] = "0"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import select  # noqa: E402

import app.models  # noqa: E402,F401
from app.core.security import get_password_hash  # noqa: E402
from app.database import AsyncSessionLocal, Base, engine  # noqa: E402
from app.main import app as fastapi_app  # noqa: E402
from app.models.user import User  # noqa: E402
from app.utils.dates import utcnow  # noqa: E402

API = "/api/v1"
PASSWORD = "secret123"


async def _reset_schema() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)


async def _read_otp(email: str) -> str | None:
    async with AsyncSessionLocal() as session:
        result = await session.execute(select(User.verification_otp).where(User.email == email))
        return result.scalar_one_or_none()


async def _create_admin(email: str) -> None:
    async with AsyncSessionLocal() as session:
        session.add(
            User(
                email=email,
                name="Ada Admin",
                password_hash=get_password_hash(PASSWORD),
                role="admin",
                verified=True,
                verified_at=utcnow(),
            )
        )
        await session.commit()


def read_otp(email: str) -> str | None:
    return asyncio.run(_read_otp(email))


def auth(tokens: dict) -> dict[str, str]:
    return {"Authorization": f"Bearer {tokens['access_token']}"}


def login(client: TestClient, email: str) -> dict[str, str]:
    response = client.post(f"{API}/auth/login", json={"email": email, "password": PASSWORD})
    assert response.status_code == 200, response.text
    return auth(response.json())


def verify(client: TestClient, email: str) -> None:
    response = client.post(f"{API}/auth/verify-otp", json={"email": email, "otp": read_otp(email)})
    assert response.status_code == 200, response.text


def register_guest(client: TestClient, email: str = "guest@example.com", name: str = "Gina Guest") -> dict[str, str]:
    response = client.post(
        f"{API}/auth/register",
        json={"email": email, "name": name, "password": PASSWORD},
    )
    assert response.status_code == 201, response.text
    verify(client, email)
    return login(client, email)


def register_host(
    client: TestClient,
    email: str = "host@example.com",
    name: str = "Hana Host",
    plan: str = "basic",
) -> dict[str, str]:
    response = client.post(
        f"{API}/auth/register-host",
        json={
            "email": email,
            "name": name,
            "password": PASSWORD,
            "plan": plan,
            "subscription_id": f"I-{plan.upper()}-001",
        },
    )
    assert response.status_code == 201, response.text
    verify(client, email)
    return login(client, email)


def register_admin(client: TestClient, email: str = "admin@example.com") -> dict[str, str]:
    asyncio.run(_create_admin(email))
    return login(client, email)


def create_listing(client: TestClient, headers: dict, publish: bool = True, **fields) -> dict:
    payload = {
        "title": "Seaside Cottage",
        "location": "El Nido, Palawan",
        "category": "home",
        "rate": "1000",
        "max_guests": 4,
        "amenities": ["wifi", "pool"],
    }
    payload.update(fields)
    response = client.post(f"{API}/listings/", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    listing = response.json()
    if publish:
        response = client.post(f"{API}/listings/{listing['id']}/publish", headers=headers)
        assert response.status_code == 200, response.text
        listing = response.json()
    return listing


def stay(start_in_days: int = 10, nights: int = 3) -> tuple[str, str]:
    check_in = date.today() + timedelta(days=start_in_days)
    return check_in.isoformat(), (check_in + timedelta(days=nights)).isoformat()


def top_up(client: TestClient, headers: dict, amount: str, order_id: str = "ORDER-TOPUP-1") -> dict:
    response = client.post(
        f"{API}/wallet/topup",
        json={"paypal_order_id": order_id, "amount": amount},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def client():
    asyncio.run(_reset_schema())
    with TestClient(fastapi_app) as test_client:
        yield test_client


@pytest.fixture
def host_headers(client):
    return register_host(client)


@pytest.fixture
def guest_headers(client):
    return register_guest(client)


@pytest.fixture
def admin_headers(client):
    return register_admin(client)
