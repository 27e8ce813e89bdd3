"""Listing endpoints: host management, public browsing, recommendations."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import (
    get_current_guest,
    get_current_host,
    get_current_host_profile,
    get_db,
    get_optional_user,
    require_listing_owner,
)
from app.core.exceptions import NotFoundError, ValidationError
from app.models.booking import Booking
from app.models.host import HostProfile
from app.models.listing import Listing
from app.models.user import User
from app.schemas.listing import (
    HostListingsResponse,
    ListingCreate,
    ListingListResponse,
    ListingResponse,
    ListingUpdate,
    PublicListingResponse,
)
from app.services.listing_service import listing_service
from app.services.recommendation_service import recommendation_service

router = APIRouter()

LIST_FIELDS = ("image_urls", "amenities", "rules", "service_time_slots")


def _public(listing: Listing, match_score: int | None = None) -> PublicListingResponse:
    response = PublicListingResponse.model_validate(listing)
    response.has_promo = bool(listing.promo)
    response.match_score = match_score
    return response


@router.post("/", response_model=ListingResponse, status_code=status.HTTP_201_CREATED)
async def create_listing(
    listing_data: ListingCreate,
    current_user: Annotated[User, Depends(get_current_host)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Listing:
    """Create a new listing as a draft."""
    listing = Listing(
        host_id=current_user.id,
        status="draft",
        **listing_data.model_dump(exclude_none=True),
    )
    db.add(listing)
    await db.flush()
    return listing


@router.get("/mine", response_model=HostListingsResponse)
async def list_my_listings(
    current_user: Annotated[User, Depends(get_current_host)],
    db: Annotated[AsyncSession, Depends(get_db)],
    status_filter: str | None = Query(None, alias="status", pattern="^(draft|published)$"),
) -> HostListingsResponse:
    """List the host's listings with published/draft counts."""
    query = select(Listing).where(Listing.host_id == current_user.id)
    if status_filter:
        query = query.where(Listing.status == status_filter)
    result = await db.execute(query.order_by(Listing.created_at.desc()))
    listings = result.scalars().all()

    counts = await listing_service.count_by_status(db, current_user.id)
    return HostListingsResponse(
        listings=[ListingResponse.model_validate(listing) for listing in listings],
        total=counts["total"],
        published=counts["published"],
        drafts=counts["drafts"],
    )


@router.get("/", response_model=ListingListResponse)
async def browse_listings(
    db: Annotated[AsyncSession, Depends(get_db)],
    category: str | None = Query(None, pattern="^(home|experience|service)$"),
    q: str | None = Query(None, max_length=100),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
) -> ListingListResponse:
    """Browse published listings."""
    query = select(Listing).where(Listing.status == "published")
    if category:
        query = query.where(Listing.category == category)
    if q and q.strip():
        pattern = f"%{q.strip()}%"
        query = query.where(or_(Listing.title.ilike(pattern), Listing.location.ilike(pattern)))

    count_result = await db.execute(select(func.count()).select_from(query.subquery()))
    total = count_result.scalar() or 0

    query = query.order_by(Listing.published_at.desc()).offset((page - 1) * page_size).limit(page_size)
    result = await db.execute(query)

    return ListingListResponse(
        listings=[_public(listing) for listing in result.scalars().all()],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/recommendations", response_model=list[PublicListingResponse])
async def recommended_listings(
    current_user: Annotated[User, Depends(get_current_guest)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[PublicListingResponse]:
    """Listings picked from the guest's bookings and wishlist preferences."""
    ranked = await recommendation_service.recommend(db, current_user.id)
    return [_public(listing, score) for listing, score in ranked]


@router.get("/{listing_id}", response_model=PublicListingResponse)
async def get_listing(
    listing_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User | None, Depends(get_optional_user)],
) -> PublicListingResponse:
    """Get a published listing; owners and admins also see drafts."""
    listing = await db.get(Listing, listing_id)
    if not listing:
        raise NotFoundError("Listing", str(listing_id))

    if not listing.is_published:
        can_see = current_user is not None and (
            current_user.role == "admin" or current_user.id == listing.host_id
        )
        if not can_see:
            raise NotFoundError("Listing", str(listing_id))

    return _public(listing)


@router.patch("/{listing_id}", response_model=ListingResponse)
async def update_listing(
    updates: ListingUpdate,
    listing: Annotated[Listing, Depends(require_listing_owner)],
) -> Listing:
    """Update a listing."""
    update_data = updates.model_dump(exclude_unset=True)

    start = update_data.get("availability_start", listing.availability_start)
    end = update_data.get("availability_end", listing.availability_end)
    if start and end and end < start:
        raise ValidationError("Availability end date cannot be before the start date")

    for field, value in update_data.items():
        if field in ("title", "location", "category") and value is None:
            continue
        if field in LIST_FIELDS and value is None:
            value = []
        setattr(listing, field, value)

    return listing


@router.delete("/{listing_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_listing(
    listing: Annotated[Listing, Depends(require_listing_owner)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> None:
    """Delete a listing that has never been booked."""
    result = await db.execute(
        select(func.count()).select_from(Booking).where(Booking.listing_id == listing.id)
    )
    if result.scalar():
        raise ValidationError("Listings with bookings cannot be deleted; unpublish it instead")
    await db.delete(listing)


@router.post("/{listing_id}/publish", response_model=ListingResponse)
async def publish_listing(
    listing: Annotated[Listing, Depends(require_listing_owner)],
    profile: Annotated[HostProfile, Depends(get_current_host_profile)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Listing:
    """Publish a draft within the plan's listing limit."""
    return await listing_service.publish(db, profile, listing)


@router.post("/{listing_id}/unpublish", response_model=ListingResponse)
async def unpublish_listing(
    listing: Annotated[Listing, Depends(require_listing_owner)],
) -> Listing:
    """Move a listing back to draft."""
    return listing_service.unpublish(listing)
