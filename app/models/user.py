"""User account model."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from app.database import Base
from app.utils.dates import utcnow

if TYPE_CHECKING:
    from app.models.host import HostProfile
    from app.models.wallet import Wallet


class User(Base):
    """User account model."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(150), nullable=False, default="")
    phone: Mapped[str | None] = mapped_column(String(20))
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(
        String(20), nullable=False, default="guest", index=True
    )  # guest, host, admin
    provider: Mapped[str] = mapped_column(String(20), default="password")  # password, google

    # Status
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    verified: Mapped[bool] = mapped_column(Boolean, default=False)
    verified_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    # Email OTP
    verification_otp: Mapped[str | None] = mapped_column(String(6))
    verification_otp_expiry: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow
    )
    last_login_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    # Relationships
    host_profile: Mapped["HostProfile | None"] = relationship(
        "HostProfile", back_populates="user", uselist=False, lazy="raise"
    )
    wallet: Mapped["Wallet | None"] = relationship(
        "Wallet", back_populates="user", uselist=False, lazy="raise"
    )

    @property
    def display_name(self) -> str:
        """Name used in emails, falling back to the address."""
        return self.name or self.email
