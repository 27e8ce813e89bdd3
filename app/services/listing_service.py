"""Listing publication rules: plan limits, free-listing credits, points."""

import logging
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.exceptions import ListingLimitReached
from app.models.host import HostFreeListing, HostProfile
from app.models.listing import Listing
from app.services.points_service import points_service
from app.utils.dates import utcnow

logger = logging.getLogger(__name__)


class ListingService:
    """Publishing and unpublishing host listings."""

    async def count_by_status(self, db: AsyncSession, host_id: UUID) -> dict[str, int]:
        result = await db.execute(
            select(Listing.status, func.count())
            .where(Listing.host_id == host_id)
            .group_by(Listing.status)
        )
        counts = {status: count for status, count in result.all()}
        return {
            "total": sum(counts.values()),
            "published": counts.get("published", 0),
            "drafts": counts.get("draft", 0),
        }

    async def _consume_free_listing(self, db: AsyncSession, host_id: UUID) -> bool:
        result = await db.execute(
            select(HostFreeListing)
            .where(
                HostFreeListing.host_id == host_id,
                HostFreeListing.remaining_listings > 0,
            )
            .order_by(HostFreeListing.created_at)
            .limit(1)
        )
        credit = result.scalar_one_or_none()
        if credit is None:
            return False
        credit.remaining_listings -= 1
        logger.info(f"Host {host_id} used free-listing credit {credit.id}")
        return True

    async def publish(self, db: AsyncSession, profile: HostProfile, listing: Listing) -> Listing:
        """Publish a draft, enforcing the plan's listing limit.

        Over the limit, one free-listing credit is consumed instead. The
        first publish of each listing earns points.

        Raises:
            ListingLimitReached: At the limit with no free-listing credit left
        """
        if listing.is_published:
            return listing

        if profile.listing_limit is not None:
            counts = await self.count_by_status(db, profile.user_id)
            if counts["published"] >= profile.listing_limit:
                if not await self._consume_free_listing(db, profile.user_id):
                    raise ListingLimitReached(
                        f"Your plan allows {profile.listing_limit} published listings. "
                        "Upgrade your plan or redeem a free listing to publish more."
                    )

        listing.status = "published"
        listing.published_at = utcnow()

        if not listing.publish_rewarded:
            await points_service.award(
                db,
                profile,
                settings.publish_points,
                "published_listing",
                {"listing_id": str(listing.id)},
            )
            listing.publish_rewarded = True

        logger.info(f"Listing {listing.id} published by host {profile.user_id}")
        return listing

    def unpublish(self, listing: Listing) -> Listing:
        listing.status = "draft"
        logger.info(f"Listing {listing.id} moved back to draft")
        return listing


# Singleton instance
listing_service = ListingService()
