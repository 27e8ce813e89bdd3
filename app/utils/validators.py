"""Custom validation and normalisation utilities."""

import re
from collections.abc import Iterable
from typing import Any


def validate_phone(phone: str) -> bool:
    """Loose phone number check.

    Accepts international (+63 917 123 4567) and local (0917-123-4567)
    formats: 7 to 15 digits once spaces, dashes, dots and parentheses are
    removed, with an optional leading plus sign.

    Args:
        phone: Phone number to validate

    Returns:
        bool: True if the number looks dialable
    """
    cleaned = re.sub(r"[\s\-\.\(\)]", "", phone)
    if cleaned.startswith("+"):
        cleaned = cleaned[1:]
    return cleaned.isdigit() and 7 <= len(cleaned) <= 15


def normalize_code(code: str) -> str:
    """Trim and upper-case a promo or coupon code."""
    return code.strip().upper()


def normalize_email(email: str) -> str:
    """Lower-case and trim an email address."""
    return email.strip().lower()


def split_list_field(value: Any) -> list[str]:
    """Normalise a free-form list field into lowercase tokens.

    Listing amenities, rules and service fields may arrive as a list of
    strings or as one comma/slash separated string.

    Args:
        value: List, string or None

    Returns:
        list[str]: Non-empty, trimmed, lowercased tokens
    """
    if value is None:
        return []
    if isinstance(value, str):
        parts: Iterable[Any] = re.split(r"[,/]", value)
    elif isinstance(value, Iterable):
        parts = value
    else:
        parts = [value]

    tokens = []
    for part in parts:
        token = str(part).strip().lower()
        if token:
            tokens.append(token)
    return tokens
