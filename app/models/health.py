"""Ledger health check persistence model."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from app.database import Base
from app.utils.dates import utcnow


class LedgerHealthRun(Base):
    """Persisted ledger health check results."""

    __tablename__ = "ledger_health_runs"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    # Result
    status: Mapped[str] = mapped_column(String(20), nullable=False)  # OK, WARNING, ERROR
    checks: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False)
    counts: Mapped[dict[str, int]] = mapped_column(JSON, nullable=False)

    # Trigger info
    trigger: Mapped[str] = mapped_column(String(30), nullable=False)  # startup, scheduled, manual

    # Timing
    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    completed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )
    duration_ms: Mapped[int] = mapped_column(Integer, nullable=False)

    error_message: Mapped[str | None] = mapped_column(Text)
