"""Pydantic schemas for API validation."""

from app.schemas.booking import (
    BookingCreate,
    BookingListResponse,
    BookingQuoteRequest,
    BookingQuoteResponse,
    BookingResponse,
)
from app.schemas.listing import (
    ListingCreate,
    ListingResponse,
    ListingUpdate,
    PublicListingResponse,
)
from app.schemas.payment import (
    RefundResponse,
    WalletResponse,
    WalletTransactionResponse,
)
from app.schemas.user import (
    HostCreate,
    TokenResponse,
    UserCreate,
    UserLogin,
    UserResponse,
)

__all__ = [
    # Booking
    "BookingCreate",
    "BookingListResponse",
    "BookingQuoteRequest",
    "BookingQuoteResponse",
    "BookingResponse",
    # Listing
    "ListingCreate",
    "ListingResponse",
    "ListingUpdate",
    "PublicListingResponse",
    # Payment
    "RefundResponse",
    "WalletResponse",
    "WalletTransactionResponse",
    # User
    "HostCreate",
    "TokenResponse",
    "UserCreate",
    "UserLogin",
    "UserResponse",
]
