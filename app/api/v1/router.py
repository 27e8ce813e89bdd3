"""Main API router that includes all endpoint routers."""

from fastapi import APIRouter

from app.api.v1 import (
    admin,
    auth,
    bookings,
    coupons,
    hosts,
    listings,
    messages,
    plans,
    refunds,
    reviews,
    users,
    wallet,
    wishlist,
)

api_router = APIRouter()

# Authentication
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])

# Users
api_router.include_router(users.router, prefix="/users", tags=["Users"])

# Hosts & plans
api_router.include_router(hosts.router, prefix="/hosts", tags=["Hosts"])
api_router.include_router(plans.router, prefix="/plans", tags=["Plans"])

# Listings
api_router.include_router(listings.router, prefix="/listings", tags=["Listings"])

# Bookings
api_router.include_router(bookings.router, prefix="/bookings", tags=["Bookings"])

# Refunds
api_router.include_router(refunds.router, prefix="/refunds", tags=["Refunds"])

# Wallet
api_router.include_router(wallet.router, prefix="/wallet", tags=["Wallet"])

# Coupons
api_router.include_router(coupons.router, prefix="/coupons", tags=["Coupons"])

# Messages
api_router.include_router(messages.router, prefix="/messages", tags=["Messages"])

# Favorites & wishlist
api_router.include_router(wishlist.router, prefix="/wishlist", tags=["Wishlist"])

# Reviews
api_router.include_router(reviews.router, prefix="/reviews", tags=["Reviews"])

# Admin
api_router.include_router(admin.router, prefix="/admin", tags=["Admin"])
