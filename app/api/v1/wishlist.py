"""Favorites, wishlist suggestions and recommendation preferences."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_guest, get_current_host, get_db
from app.core.exceptions import AuthorizationError, NotFoundError
from app.models.booking import Booking
from app.models.listing import Listing
from app.models.user import User
from app.models.wishlist import Favorite, WishlistPreference, WishlistSuggestion
from app.schemas.listing import PublicListingResponse
from app.schemas.wishlist import (
    FavoriteToggleResponse,
    WishlistPreferences,
    WishlistSuggestionCreate,
    WishlistSuggestionResponse,
)

router = APIRouter()


@router.post("/favorites/{listing_id}", response_model=FavoriteToggleResponse)
async def toggle_favorite(
    listing_id: UUID,
    current_user: Annotated[User, Depends(get_current_guest)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> FavoriteToggleResponse:
    """Add the listing to favorites, or remove it when already there."""
    listing = await db.get(Listing, listing_id)
    if not listing:
        raise NotFoundError("Listing", str(listing_id))

    result = await db.execute(
        select(Favorite).where(Favorite.user_id == current_user.id, Favorite.listing_id == listing_id)
    )
    favorite = result.scalar_one_or_none()
    if favorite:
        await db.delete(favorite)
        return FavoriteToggleResponse(listing_id=listing_id, favorited=False)

    db.add(Favorite(user_id=current_user.id, listing_id=listing_id))
    await db.flush()
    return FavoriteToggleResponse(listing_id=listing_id, favorited=True)


@router.get("/favorites", response_model=list[PublicListingResponse])
async def list_favorites(
    current_user: Annotated[User, Depends(get_current_guest)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[PublicListingResponse]:
    """Favorited listings, most recently added first."""
    result = await db.execute(
        select(Listing)
        .join(Favorite, Favorite.listing_id == Listing.id)
        .where(Favorite.user_id == current_user.id)
        .order_by(Favorite.created_at.desc())
    )
    listings = []
    for listing in result.scalars().all():
        response = PublicListingResponse.model_validate(listing)
        response.has_promo = bool(listing.promo)
        listings.append(response)
    return listings


@router.post(
    "/suggestions",
    response_model=WishlistSuggestionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_suggestion(
    suggestion_data: WishlistSuggestionCreate,
    current_user: Annotated[User, Depends(get_current_guest)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> WishlistSuggestion:
    """Send the host a wish for a listing the guest has booked."""
    booking = await db.get(Booking, suggestion_data.booking_id)
    if not booking:
        raise NotFoundError("Booking", str(suggestion_data.booking_id))
    if booking.guest_id != current_user.id:
        raise AuthorizationError("You can only send suggestions for your own bookings")

    suggestion = WishlistSuggestion(
        host_id=booking.host_id,
        guest_id=current_user.id,
        listing_id=booking.listing_id,
        booking_id=booking.id,
        message=suggestion_data.message,
    )
    db.add(suggestion)
    await db.flush()
    return suggestion


@router.get("/suggestions", response_model=list[WishlistSuggestionResponse])
async def list_suggestions(
    current_user: Annotated[User, Depends(get_current_host)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[WishlistSuggestion]:
    """Suggestions guests left for the host, newest first."""
    result = await db.execute(
        select(WishlistSuggestion)
        .where(WishlistSuggestion.host_id == current_user.id)
        .order_by(WishlistSuggestion.created_at.desc())
    )
    return list(result.scalars().all())


@router.get("/preferences", response_model=WishlistPreferences)
async def get_preferences(
    current_user: Annotated[User, Depends(get_current_guest)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> WishlistPreferences:
    """Categories and tags used for recommendations."""
    preference = await db.get(WishlistPreference, current_user.id)
    if not preference:
        return WishlistPreferences()
    return WishlistPreferences(categories=preference.categories or [], tags=preference.tags or {})


@router.put("/preferences", response_model=WishlistPreferences)
async def update_preferences(
    preferences: WishlistPreferences,
    current_user: Annotated[User, Depends(get_current_guest)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> WishlistPreferences:
    """Replace the stored categories and tags."""
    preference = await db.get(WishlistPreference, current_user.id)
    if not preference:
        preference = WishlistPreference(user_id=current_user.id)
        db.add(preference)

    preference.categories = preferences.categories
    preference.tags = preferences.tags
    await db.flush()
    return preferences
