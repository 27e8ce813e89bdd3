"""Host subscription plans and the upgrade ladder."""

from dataclasses import dataclass
from decimal import Decimal

from app.core.exceptions import ValidationError


@dataclass(frozen=True)
class Plan:
    key: str
    label: str
    price: Decimal
    listing_limit: int | None  # None = unlimited


PLANS: dict[str, Plan] = {
    "basic": Plan("basic", "Basic Monthly", Decimal("299"), 3),
    "pro": Plan("pro", "Pro Monthly", Decimal("599"), 8),
    "annual": Plan("annual", "Annual Unlimited", Decimal("1299"), None),
}

UPGRADE_PATHS: dict[str | None, tuple[str, ...]] = {
    None: ("basic", "pro", "annual"),
    "basic": ("pro", "annual"),
    "pro": ("annual",),
    "annual": (),
}


def get_plan(key: str) -> Plan:
    try:
        return PLANS[key]
    except KeyError:
        raise ValidationError(f"Unknown plan '{key}'")


def plan_key_from_label(label: str | None) -> str | None:
    """Recover the plan key from a stored label such as "Pro Monthly"."""
    if not label:
        return None
    text = label.lower()
    # "annual" first: its label contains neither of the others
    for key in ("annual", "pro", "basic"):
        if key in text:
            return key
    return None


def upgrade_options(current_key: str | None) -> list[Plan]:
    """Plans the host may move to from their current plan."""
    return [PLANS[key] for key in UPGRADE_PATHS.get(current_key, ())]


def assert_upgrade_allowed(current_key: str | None, target_key: str) -> Plan:
    target = get_plan(target_key)
    if target_key not in UPGRADE_PATHS.get(current_key, ()):
        raise ValidationError(
            f"Cannot change plan from {current_key or 'none'} to {target_key}"
        )
    return target
