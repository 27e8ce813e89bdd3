"""Core utilities and security modules."""

from app.core.exceptions import (
    AppException,
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DatesNotAvailable,
    EmailNotVerified,
    InsufficientBalance,
    InsufficientPoints,
    InvalidBookingStatus,
    InvalidRefundStatus,
    ListingLimitReached,
    ListingNotAvailable,
    NotFoundError,
    PaymentError,
    ValidationError,
)
from app.core.security import (
    create_access_token,
    create_refresh_token,
    generate_otp,
    get_password_hash,
    verify_password,
    verify_token,
)

__all__ = [
    "AppException",
    "AuthenticationError",
    "AuthorizationError",
    "ConflictError",
    "DatesNotAvailable",
    "EmailNotVerified",
    "InsufficientBalance",
    "InsufficientPoints",
    "InvalidBookingStatus",
    "InvalidRefundStatus",
    "ListingLimitReached",
    "ListingNotAvailable",
    "NotFoundError",
    "PaymentError",
    "ValidationError",
    "create_access_token",
    "create_refresh_token",
    "generate_otp",
    "get_password_hash",
    "verify_password",
    "verify_token",
]
