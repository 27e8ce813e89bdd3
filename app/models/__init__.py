"""Database models."""

from app.models.booking import Booking
from app.models.coupon import Coupon
from app.models.health import LedgerHealthRun
from app.models.host import (
    HostEarnings,
    HostFeeDiscount,
    HostFreeListing,
    HostPointsEvent,
    HostProfile,
    HostPromotion,
)
from app.models.listing import Listing
from app.models.message import Message
from app.models.payment import Payment, Refund
from app.models.review import Review
from app.models.user import User
from app.models.wallet import Wallet, WalletTransaction
from app.models.wishlist import Favorite, WishlistPreference, WishlistSuggestion

__all__ = [
    # User
    "User",
    # Host
    "HostProfile",
    "HostEarnings",
    "HostPointsEvent",
    "HostFeeDiscount",
    "HostFreeListing",
    "HostPromotion",
    # Listing
    "Listing",
    # Booking
    "Booking",
    # Payment
    "Payment",
    "Refund",
    # Wallet
    "Wallet",
    "WalletTransaction",
    # Engagement
    "Coupon",
    "Message",
    "Favorite",
    "WishlistSuggestion",
    "WishlistPreference",
    "Review",
    # Health
    "LedgerHealthRun",
]
