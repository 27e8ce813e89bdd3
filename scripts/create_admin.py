#!/usr/bin/env python3
"""Create (or promote) a VentureHub admin account with a hashed password."""

import argparse
import asyncio

from sqlalchemy import select

from app.core.security import get_password_hash
from app.database import AsyncSessionLocal, close_db
from app.models.user import User
from app.services.wallet_service import wallet_service
from app.utils.dates import utcnow


async def create_admin(
    email: str = "admin@venturehub.ph",
    password: str = "Admin@123",
    name: str = "VentureHub Admin",
) -> None:
    """Create an admin user if it doesn't exist, otherwise reset it."""
    async with AsyncSessionLocal() as session:
        result = await session.execute(select(User).where(User.email == email))
        admin = result.scalar_one_or_none()

        if admin:
            admin.password_hash = get_password_hash(password)
            admin.role = "admin"
            admin.name = name
            admin.is_active = True
            if not admin.verified:
                admin.verified = True
                admin.verified_at = utcnow()
            print(f"Updated existing admin user: {email}")
        else:
            admin = User(
                email=email,
                name=name,
                password_hash=get_password_hash(password),
                role="admin",
                verified=True,
                verified_at=utcnow(),
                is_active=True,
            )
            session.add(admin)
            await session.flush()
            await wallet_service.get_or_create(session, admin.id)
            print(f"Created admin user: {email}")

        await session.commit()

    await close_db()
    print(f"Email: {email}")
    print("Role: admin")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create an admin user")
    parser.add_argument("--email", default="admin@venturehub.ph", help="Admin email")
    parser.add_argument("--password", default="Admin@123", help="Admin password")
    parser.add_argument("--name", default="VentureHub Admin", help="Display name")
    args = parser.parse_args()

    asyncio.run(create_admin(email=args.email, password=args.password, name=args.name))
