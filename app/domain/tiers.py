"""Host loyalty tiers.

Tiers are derived from lifetime points only; spending points never
demotes a host.

- bronze:      0 - 499
- silver:    500 - 1499
- gold:     1500 - 3499
- platinum: 3500 - 6999
- diamond:  7000+
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Tier:
    key: str
    label: str
    min_points: int
    max_points: int | None  # None for the top tier


TIERS: tuple[Tier, ...] = (
    Tier("bronze", "Bronze", 0, 499),
    Tier("silver", "Silver", 500, 1499),
    Tier("gold", "Gold", 1500, 3499),
    Tier("platinum", "Platinum", 3500, 6999),
    Tier("diamond", "Diamond", 7000, None),
)


def tier_for(lifetime_points: int) -> Tier:
    """Return the tier whose range contains the lifetime total."""
    points = max(0, lifetime_points)
    for tier in reversed(TIERS):
        if points >= tier.min_points:
            return tier
    return TIERS[0]


def next_tier(tier: Tier) -> Tier | None:
    """The tier above, or None at the top."""
    index = TIERS.index(tier)
    if index + 1 < len(TIERS):
        return TIERS[index + 1]
    return None


def tier_progress(lifetime_points: int) -> int:
    """Percent of the way from the current tier's floor to the next tier.

    Returns:
        int: 0-100, and 100 at the top tier
    """
    current = tier_for(lifetime_points)
    upcoming = next_tier(current)
    if upcoming is None:
        return 100

    span = upcoming.min_points - current.min_points
    progress = (lifetime_points - current.min_points) * 100 / span
    return int(min(100, max(0, progress)))


def points_to_next_tier(lifetime_points: int) -> int:
    """Points still needed to reach the next tier (0 at the top)."""
    upcoming = next_tier(tier_for(lifetime_points))
    if upcoming is None:
        return 0
    return max(0, upcoming.min_points - lifetime_points)
