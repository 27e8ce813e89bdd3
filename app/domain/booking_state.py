"""Booking and refund state machines."""

from app.core.exceptions import InvalidBookingStatus, InvalidRefundStatus

BOOKING_TRANSITIONS = {
    "pending": {"accepted", "declined"},
    "accepted": {"confirmed", "refunded"},
    "confirmed": {"refunded"},
    "declined": set(),
    "refunded": set(),
}

# Host may answer a request with either of these
HOST_RESPONSES = {"accepted", "declined"}

# Bookings the host has committed to
ACTIVE_BOOKING_STATUSES = {"accepted", "confirmed"}

REFUND_TRANSITIONS = {
    "pending": {"approved", "rejected"},
    "approved": set(),
    "rejected": set(),
}


def assert_booking_transition(current: str, target: str) -> None:
    allowed = BOOKING_TRANSITIONS.get(current, set())
    if target not in allowed:
        raise InvalidBookingStatus(
            f"Invalid booking transition: {current} → {target}"
        )


def assert_refund_transition(current: str, target: str) -> None:
    allowed = REFUND_TRANSITIONS.get(current, set())
    if target not in allowed:
        raise InvalidRefundStatus(
            f"Invalid refund transition: {current} → {target}"
        )
