"""Guest listing recommendations from booking history and wishlist."""

import logging
from collections import Counter
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.booking import Booking
from app.models.listing import Listing
from app.models.wishlist import WishlistPreference

logger = logging.getLogger(__name__)

TOP_BOOKED_CATEGORIES = 3


def preference_keywords(tags: dict[str, Any] | None) -> set[str]:
    """Lowercased wishlist tags across every category."""
    keywords: set[str] = set()
    for values in (tags or {}).values():
        if not isinstance(values, list):
            continue
        for tag in values:
            if isinstance(tag, str) and tag.strip():
                keywords.add(tag.strip().lower())
    return keywords


def match_score(listing: Listing, keywords: set[str]) -> int:
    """Count keyword/token pairs where either contains the other."""
    score = 0
    for token in listing.keyword_pool():
        for keyword in keywords:
            if keyword in token or token in keyword:
                score += 1
    return score


class RecommendationService:

    async def recommend(self, db: AsyncSession, guest_id: UUID) -> list[tuple[Listing, int | None]]:
        """Published listings in the guest's favourite categories.

        Categories come from the three most booked plus wishlist
        preferences. Listings already booked are skipped. When any
        listing matches a wishlist tag only the matching ones are kept,
        best match first.
        """
        bookings = await db.execute(
            select(Booking.listing_id, Booking.listing_category).where(Booking.guest_id == guest_id)
        )
        booked_ids: set[UUID] = set()
        category_counts: Counter[str] = Counter()
        for listing_id, category in bookings.all():
            booked_ids.add(listing_id)
            if category:
                category_counts[category] += 1

        preference = await db.get(WishlistPreference, guest_id)
        wishlist_categories = list(preference.categories or []) if preference else []

        categories = [category for category, _ in category_counts.most_common(TOP_BOOKED_CATEGORIES)]
        for category in wishlist_categories:
            if category not in categories:
                categories.append(category)
        if not categories:
            return []

        result = await db.execute(
            select(Listing)
            .where(Listing.status == "published", Listing.category.in_(categories))
            .order_by(Listing.published_at.desc())
        )
        listings = [listing for listing in result.scalars() if listing.id not in booked_ids]

        keywords = preference_keywords(preference.tags if preference else None)
        if not keywords:
            return [(listing, None) for listing in listings]

        scored = [(listing, match_score(listing, keywords)) for listing in listings]
        positives = sorted(
            (item for item in scored if item[1] > 0), key=lambda item: item[1], reverse=True
        )
        if positives:
            return positives
        return [(listing, None) for listing in listings]


recommendation_service = RecommendationService()
