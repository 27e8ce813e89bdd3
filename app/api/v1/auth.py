"""Authentication endpoints: registration, email OTP verification, tokens."""

import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_db
from app.core.exceptions import (
    AuthenticationError,
    ConflictError,
    EmailNotVerified,
    NotFoundError,
    ValidationError,
)
from app.core.middleware import login_limiter, otp_limiter, register_limiter
from app.core.security import (
    create_tokens,
    generate_otp,
    get_password_hash,
    is_otp_expired,
    otp_expiry,
    verify_password,
    verify_token,
)
from app.models.user import User
from app.schemas.user import (
    HostCreate,
    MessageResponse,
    OTPResendRequest,
    OTPVerifyRequest,
    RefreshTokenRequest,
    RegistrationResponse,
    TokenResponse,
    UserCreate,
    UserLogin,
    UserResponse,
)
from app.services.email_service import email_service
from app.services.host_service import host_service
from app.services.wallet_service import wallet_service
from app.utils.dates import utcnow

logger = logging.getLogger(__name__)

router = APIRouter()


async def _create_account(db: AsyncSession, user_data: UserCreate, role: str) -> User:
    result = await db.execute(select(User).where(User.email == user_data.email))
    if result.scalar_one_or_none():
        raise ConflictError("Email already registered")

    user = User(
        email=user_data.email,
        name=user_data.name,
        phone=user_data.phone,
        password_hash=get_password_hash(user_data.password),
        role=role,
        verified=False,
        verification_otp=generate_otp(),
        verification_otp_expiry=otp_expiry(),
    )
    db.add(user)
    await db.flush()

    await wallet_service.get_or_create(db, user.id)
    return user


def _parse_uuid(value: str) -> UUID:
    try:
        return UUID(value)
    except ValueError:
        raise AuthenticationError("Invalid token")


async def _user_by_email(db: AsyncSession, email: str) -> User:
    result = await db.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()
    if not user:
        raise NotFoundError("User")
    return user


@router.post(
    "/register",
    response_model=RegistrationResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(register_limiter)],
)
async def register(
    user_data: UserCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    background_tasks: BackgroundTasks,
) -> RegistrationResponse:
    """Register a guest account and email a verification code."""
    user = await _create_account(db, user_data, "guest")
    logger.info(f"Guest registered: {user.email}")

    await db.commit()

    background_tasks.add_task(
        email_service.notify_verification_otp, user.email, user.name, user.verification_otp
    )
    return RegistrationResponse(user=UserResponse.model_validate(user))


@router.post(
    "/register-host",
    response_model=RegistrationResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(register_limiter)],
)
async def register_host(
    host_data: HostCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    background_tasks: BackgroundTasks,
) -> RegistrationResponse:
    """Register a host on a paid plan; the subscription must verify first."""
    user = await _create_account(db, host_data, "host")
    await host_service.create_profile(db, user, host_data.plan, host_data.subscription_id)
    logger.info(f"Host registered: {user.email} ({host_data.plan})")

    await db.commit()

    background_tasks.add_task(
        email_service.notify_verification_otp, user.email, user.name, user.verification_otp
    )
    return RegistrationResponse(user=UserResponse.model_validate(user))


@router.post("/verify-otp", response_model=MessageResponse, dependencies=[Depends(otp_limiter)])
async def verify_otp(
    request: OTPVerifyRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> MessageResponse:
    """Confirm the emailed 6-digit code."""
    user = await _user_by_email(db, request.email)

    if user.verified:
        return MessageResponse(message="Email already verified")
    if not user.verification_otp or user.verification_otp != request.otp:
        raise ValidationError("Invalid OTP")
    if is_otp_expired(user.verification_otp_expiry):
        raise ValidationError("OTP has expired")

    user.verified = True
    user.verified_at = utcnow()
    user.verification_otp = None
    user.verification_otp_expiry = None
    logger.info(f"Email verified: {user.email}")
    return MessageResponse(message="Email verified successfully")


@router.post("/resend-otp", response_model=MessageResponse, dependencies=[Depends(otp_limiter)])
async def resend_otp(
    request: OTPResendRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    background_tasks: BackgroundTasks,
) -> MessageResponse:
    """Issue a fresh code; the previous one stops working."""
    user = await _user_by_email(db, request.email)
    if user.verified:
        raise ValidationError("Email already verified")

    user.verification_otp = generate_otp()
    user.verification_otp_expiry = otp_expiry()

    await db.commit()

    background_tasks.add_task(
        email_service.notify_verification_otp, user.email, user.name, user.verification_otp
    )
    return MessageResponse(message="A new verification code has been sent")


@router.post("/login", response_model=TokenResponse, dependencies=[Depends(login_limiter)])
async def login(
    credentials: UserLogin,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TokenResponse:
    """Login with email and password."""
    result = await db.execute(select(User).where(User.email == credentials.email))
    user = result.scalar_one_or_none()

    if not user or not verify_password(credentials.password, user.password_hash):
        raise AuthenticationError("Invalid email or password")

    if not user.is_active:
        raise AuthenticationError("Account is deactivated")

    if not user.verified:
        raise EmailNotVerified("Please verify your email")

    user.last_login_at = utcnow()

    tokens = create_tokens(str(user.id), user.email, user.role)
    return TokenResponse(**tokens)


@router.post("/refresh", response_model=TokenResponse)
async def refresh_token(
    request: RefreshTokenRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TokenResponse:
    """Refresh access token using refresh token."""
    payload = verify_token(request.refresh_token, token_type="refresh")
    user_id = payload.get("sub")
    if not user_id:
        raise AuthenticationError("Invalid token")

    result = await db.execute(select(User).where(User.id == _parse_uuid(user_id)))
    user = result.scalar_one_or_none()

    if not user or not user.is_active:
        raise AuthenticationError("User not found or inactive")

    tokens = create_tokens(str(user.id), user.email, user.role)
    return TokenResponse(**tokens)


@router.get("/me", response_model=UserResponse)
async def me(
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    """Get the authenticated account."""
    return current_user
