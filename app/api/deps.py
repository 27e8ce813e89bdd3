"""API dependencies for authentication and common operations."""

from typing import Annotated
from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    AppException,
    AuthenticationError,
    AuthorizationError,
    EmailNotVerified,
    NotFoundError,
)
from app.core.security import verify_token
from app.database import get_db
from app.models.booking import Booking
from app.models.host import HostProfile
from app.models.listing import Listing
from app.models.user import User

__all__ = [
    "get_db",
    "get_current_user",
    "get_current_active_user",
    "get_current_verified_user",
    "get_current_guest",
    "get_current_host",
    "get_current_host_profile",
    "get_optional_user",
    "require_listing_owner",
    "require_booking_host",
    "require_booking_guest",
]

# Security scheme
security = HTTPBearer()


def _user_id_from_token(token: str) -> UUID:
    payload = verify_token(token, token_type="access")
    user_id = payload.get("sub")
    if not user_id:
        raise AuthenticationError("Invalid token payload")
    try:
        return UUID(user_id)
    except ValueError:
        raise AuthenticationError("Invalid token payload")


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """Get the current authenticated user from JWT token."""
    user_id = _user_id_from_token(credentials.credentials)

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if not user:
        raise AuthenticationError("User not found")
    if not user.is_active:
        raise AuthenticationError("User account is deactivated")

    return user


async def get_current_active_user(
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    """Get current user and verify they are active."""
    if not current_user.is_active:
        raise AuthorizationError("User account is deactivated")
    return current_user


async def get_current_verified_user(
    current_user: Annotated[User, Depends(get_current_active_user)],
) -> User:
    """Get current user and verify their email OTP was confirmed."""
    if not current_user.verified:
        raise EmailNotVerified()
    return current_user


async def get_current_guest(
    current_user: Annotated[User, Depends(get_current_verified_user)],
) -> User:
    """Get current user and verify they can act as a guest."""
    if current_user.role not in ("guest", "admin"):
        raise AuthorizationError("Guest access required")
    return current_user


async def get_current_host(
    current_user: Annotated[User, Depends(get_current_verified_user)],
) -> User:
    """Get current user and verify they are a host."""
    if current_user.role != "host":
        raise AuthorizationError("Host access required")
    return current_user


async def get_current_host_profile(
    current_user: Annotated[User, Depends(get_current_host)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> HostProfile:
    """Load the host profile of the current host."""
    result = await db.execute(
        select(HostProfile).where(HostProfile.user_id == current_user.id)
    )
    profile = result.scalar_one_or_none()
    if not profile:
        raise NotFoundError("Host profile")
    return profile


async def get_optional_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(HTTPBearer(auto_error=False))],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User | None:
    """Optionally get the current user if authenticated."""
    if not credentials:
        return None

    try:
        user_id = _user_id_from_token(credentials.credentials)
    except AppException:
        return None

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    return user if user and user.is_active else None


class ListingOwnerChecker:
    """Resolve a listing the current host owns."""

    async def __call__(
        self,
        listing_id: UUID,
        current_user: Annotated[User, Depends(get_current_host)],
        db: Annotated[AsyncSession, Depends(get_db)],
    ) -> Listing:
        result = await db.execute(select(Listing).where(Listing.id == listing_id))
        listing = result.scalar_one_or_none()

        if not listing:
            raise NotFoundError("Listing", str(listing_id))
        if listing.host_id != current_user.id:
            raise AuthorizationError("Only the listing owner can perform this action")

        return listing


class BookingParticipantChecker:
    """Resolve a booking the current user takes part in as host or guest."""

    def __init__(self, side: str):
        self.side = side

    async def __call__(
        self,
        booking_id: UUID,
        current_user: Annotated[User, Depends(get_current_verified_user)],
        db: Annotated[AsyncSession, Depends(get_db)],
    ) -> Booking:
        result = await db.execute(select(Booking).where(Booking.id == booking_id))
        booking = result.scalar_one_or_none()

        if not booking:
            raise NotFoundError("Booking", str(booking_id))

        owner_id = booking.host_id if self.side == "host" else booking.guest_id
        if owner_id != current_user.id:
            raise AuthorizationError(f"Only the booking {self.side} can perform this action")

        return booking


# Convenience instances
require_listing_owner = ListingOwnerChecker()
require_booking_host = BookingParticipantChecker(side="host")
require_booking_guest = BookingParticipantChecker(side="guest")
