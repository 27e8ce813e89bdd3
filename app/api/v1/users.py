"""User profile endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends

from app.api.deps import get_current_user
from app.models.user import User
from app.schemas.user import UserResponse, UserUpdate

router = APIRouter()


@router.get("/me", response_model=UserResponse)
async def get_my_profile(
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    """Get current user's profile."""
    return current_user


@router.patch("/me", response_model=UserResponse)
async def update_my_profile(
    updates: UserUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    """Update current user's name or phone."""
    update_data = updates.model_dump(exclude_unset=True)

    for field, value in update_data.items():
        if field == "name":
            if value is None:
                continue
            value = value.strip()
        setattr(current_user, field, value)

    return current_user
