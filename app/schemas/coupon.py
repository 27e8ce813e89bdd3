"""Coupon schemas."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from app.utils.validators import normalize_code


class CouponCreate(BaseModel):
    code: str | None = Field(None, max_length=30)
    discount_percent: Decimal = Field(..., gt=0, le=100)
    min_amount: Decimal = Field(..., ge=0)
    description: str | None = Field(None, max_length=1000)
    category: str = Field(default="all", pattern="^(all|home|experience|service)$")
    active: bool = True
    valid_from: datetime | None = None
    valid_until: datetime | None = None

    @field_validator("code")
    @classmethod
    def upper_code(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = normalize_code(v)
        if not v:
            return None
        if not v.replace("-", "").isalnum():
            raise ValueError("Coupon codes may only contain letters, digits and dashes")
        return v

    @model_validator(mode="after")
    def check_window(self) -> "CouponCreate":
        if self.valid_from and self.valid_until and self.valid_until < self.valid_from:
            raise ValueError("valid_until must be after valid_from")
        return self


class CouponResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    host_id: UUID
    code: str
    discount_percent: Decimal
    min_amount: Decimal
    description: str | None
    category: str
    active: bool
    valid_from: datetime | None
    valid_until: datetime | None
    created_at: datetime
