"""Role-based access control and permissions."""

from enum import Enum
from typing import Any, Callable

from fastapi import Depends

from app.api.deps import get_current_user
from app.core.exceptions import AuthorizationError
from app.models.user import User


class UserRole(str, Enum):
    """User roles in the system."""

    GUEST = "guest"
    HOST = "host"
    ADMIN = "admin"


class Permission(str, Enum):
    """System permissions."""

    # Profile
    VIEW_PROFILE = "view_profile"
    EDIT_PROFILE = "edit_profile"

    # Guest actions
    CREATE_BOOKING = "create_booking"
    REQUEST_REFUND = "request_refund"
    MANAGE_WALLET = "manage_wallet"
    WRITE_REVIEW = "write_review"

    # Host actions
    MANAGE_LISTINGS = "manage_listings"
    RESPOND_BOOKING = "respond_booking"
    DECIDE_REFUND = "decide_refund"
    MANAGE_COUPONS = "manage_coupons"
    REDEEM_POINTS = "redeem_points"

    # Admin
    VIEW_ALL_USERS = "view_all_users"
    MANAGE_USERS = "manage_users"
    MANAGE_PAYMENTS = "manage_payments"
    VIEW_REPORTS = "view_reports"
    RUN_HEALTH_CHECKS = "run_health_checks"


ROLE_PERMISSIONS: dict[UserRole, set[Permission]] = {
    UserRole.GUEST: {
        Permission.VIEW_PROFILE,
        Permission.EDIT_PROFILE,
        Permission.CREATE_BOOKING,
        Permission.REQUEST_REFUND,
        Permission.MANAGE_WALLET,
        Permission.WRITE_REVIEW,
    },
    UserRole.HOST: {
        Permission.VIEW_PROFILE,
        Permission.EDIT_PROFILE,
        Permission.MANAGE_LISTINGS,
        Permission.RESPOND_BOOKING,
        Permission.DECIDE_REFUND,
        Permission.MANAGE_COUPONS,
        Permission.REDEEM_POINTS,
    },
    UserRole.ADMIN: {
        # Admins have all permissions
        perm for perm in Permission
    },
}


def has_permission(role: UserRole, permission: Permission) -> bool:
    """Check if a role has a specific permission."""
    return permission in ROLE_PERMISSIONS.get(role, set())


def require_permission(permission: Permission) -> Callable[..., Any]:
    """Dependency to require a specific permission."""

    async def permission_checker(current_user: User = Depends(get_current_user)) -> User:
        if not has_permission(UserRole(current_user.role), permission):
            raise AuthorizationError(
                f"Permission '{permission.value}' is required for this action"
            )
        return current_user

    return permission_checker


# Admin console dependencies
require_user_management = require_permission(Permission.MANAGE_USERS)
require_payment_management = require_permission(Permission.MANAGE_PAYMENTS)
require_reports = require_permission(Permission.VIEW_REPORTS)
require_health_checks = require_permission(Permission.RUN_HEALTH_CHECKS)
