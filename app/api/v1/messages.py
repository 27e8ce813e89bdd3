"""Messaging endpoints: one thread per (listing, guest)."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_verified_user, get_db
from app.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from app.core.middleware import message_limiter
from app.models.listing import Listing
from app.models.message import Message
from app.models.user import User
from app.schemas.message import MessageCreate, MessageResponse, ThreadSummary

router = APIRouter()


@router.post(
    "/",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(message_limiter)],
)
async def send_message(
    message_data: MessageCreate,
    current_user: Annotated[User, Depends(get_current_verified_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Message:
    """Guests write to a listing's host; hosts reply inside a guest's thread."""
    listing = await db.get(Listing, message_data.listing_id)
    if not listing:
        raise NotFoundError("Listing", str(message_data.listing_id))

    if listing.host_id == current_user.id:
        if not message_data.guest_id:
            raise ValidationError("guest_id is required when replying as the host")
        guest = await db.get(User, message_data.guest_id)
        if not guest:
            raise NotFoundError("User", str(message_data.guest_id))
        sender_role = "host"
    else:
        if message_data.guest_id and message_data.guest_id != current_user.id:
            raise AuthorizationError("You can only write in your own thread")
        guest = current_user
        sender_role = "guest"

    message = Message(
        listing_id=listing.id,
        host_id=listing.host_id,
        guest_id=guest.id,
        sender_id=current_user.id,
        sender_role=sender_role,
        text=message_data.text,
        listing_title=listing.title,
        guest_email=guest.email,
    )
    db.add(message)
    await db.flush()
    return message


@router.get("/thread", response_model=list[MessageResponse])
async def get_thread(
    current_user: Annotated[User, Depends(get_current_verified_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    listing_id: UUID = Query(...),
    guest_id: UUID | None = Query(None),
) -> list[Message]:
    """Messages of one thread, oldest first."""
    listing = await db.get(Listing, listing_id)
    if not listing:
        raise NotFoundError("Listing", str(listing_id))

    guest_id = guest_id or current_user.id
    if current_user.id not in (guest_id, listing.host_id):
        raise AuthorizationError("Not a participant in this conversation")

    result = await db.execute(
        select(Message)
        .where(Message.listing_id == listing_id, Message.guest_id == guest_id)
        .order_by(Message.created_at)
    )
    return list(result.scalars().all())


@router.get("/inbox", response_model=list[ThreadSummary])
async def get_inbox(
    current_user: Annotated[User, Depends(get_current_verified_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    role: str | None = Query(None, pattern="^(host|guest)$"),
) -> list[ThreadSummary]:
    """Threads the user takes part in, most recently active first."""
    if role == "host":
        condition = Message.host_id == current_user.id
    elif role == "guest":
        condition = Message.guest_id == current_user.id
    else:
        condition = or_(Message.host_id == current_user.id, Message.guest_id == current_user.id)

    result = await db.execute(select(Message).where(condition).order_by(Message.created_at))

    threads: dict[tuple[UUID, UUID], list[Message]] = {}
    for message in result.scalars().all():
        threads.setdefault((message.listing_id, message.guest_id), []).append(message)

    summaries = []
    for (listing_id, guest_id), messages in threads.items():
        last = messages[-1]
        summaries.append(
            ThreadSummary(
                listing_id=listing_id,
                guest_id=guest_id,
                host_id=last.host_id,
                listing_title=last.listing_title,
                guest_email=last.guest_email,
                last_message=MessageResponse.model_validate(last),
                message_count=len(messages),
            )
        )

    summaries.sort(key=lambda summary: summary.last_message.created_at, reverse=True)
    return summaries
