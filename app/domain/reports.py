"""Admin report filters: reporting periods and status groupings."""

from datetime import date, datetime, time, timedelta
from enum import Enum

from app.utils.dates import as_utc


class ReportType(str, Enum):
    BOOKINGS = "bookings"
    EARNINGS = "earnings"
    HOSTS = "hosts"


class Period(str, Enum):
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


REPORT_TITLES = {
    ReportType.BOOKINGS: "Bookings Report",
    ReportType.EARNINGS: "Earnings Report",
    ReportType.HOSTS: "Hosts Report",
}

# Booking status filter -> statuses it covers. None matches a missing status.
BOOKING_STATUS_GROUPS: dict[str, set[str | None]] = {
    "completed": {"confirmed", "completed"},
    "pending": {"pending", None, ""},
    "declined": {"rejected", "declined", "cancelled", "canceled"},
}

PAYMENT_STATUS_GROUPS: dict[str, set[str | None]] = {
    "approved": {"approved", "confirmed"},
    "rejected": {"rejected", "declined"},
    "pending": {"pending", None, ""},
}


def period_window(period: Period | str, base_date: date) -> tuple[datetime, datetime]:
    """Inclusive [start, end] of the week, month or year containing base_date.

    Weeks run Monday through Sunday. Unknown periods fall back to month.
    """
    try:
        period = Period(period)
    except ValueError:
        period = Period.MONTH

    if period is Period.WEEK:
        start_day = base_date - timedelta(days=base_date.weekday())
        end_day = start_day + timedelta(days=6)
    elif period is Period.YEAR:
        start_day = base_date.replace(month=1, day=1)
        end_day = base_date.replace(month=12, day=31)
    else:
        start_day = base_date.replace(day=1)
        next_month = (start_day + timedelta(days=32)).replace(day=1)
        end_day = next_month - timedelta(days=1)

    start = as_utc(datetime.combine(start_day, time.min))
    end = as_utc(datetime.combine(end_day, time.max))
    return start, end


def in_window(value: datetime | None, window: tuple[datetime, datetime]) -> bool:
    """Rows without a timestamp never fall inside a period."""
    if value is None:
        return False
    start, end = window
    return start <= as_utc(value) <= end


def status_matches(status_filter: str | None, status: str | None) -> bool:
    """Match a booking status against a report filter ('all' or a group)."""
    if not status_filter or status_filter == "all":
        return True
    group = BOOKING_STATUS_GROUPS.get(status_filter)
    if group is None:
        return status == status_filter
    return status in group


def payment_status_matches(status_filter: str | None, status: str | None) -> bool:
    """Match a payment status against the admin payments filter."""
    if not status_filter or status_filter == "all":
        return True
    group = PAYMENT_STATUS_GROUPS.get(status_filter)
    if group is None:
        return status == status_filter
    return status in group
