# lpg_orders/schemas/coupons.py
from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import ConfigDict, Field, field_validator

from lpg_orders.schemas.common import CamelModel, CouponCylinderType, CylinderType, DiscountType, Money


class CouponValidateIn(CamelModel):
    code: str = Field(min_length=1, max_length=50)
    subtotal: Decimal = Field(gt=0)
    cylinder_type: CylinderType

    @field_validator("code")
    @classmethod
    def code_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Coupon code is required")
        return v


class CouponValidateOut(CamelModel):
    code: str
    kind: str  # "percent" | "flat"
    discount_percent: Optional[Money] = None
    discount_amount: Money


class CouponCreateIn(CamelModel):
    model_config = ConfigDict(extra="forbid")

    code: str = Field(min_length=1, max_length=50)
    discount_type: DiscountType
    discount_value: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    applicable_cylinder_type: CouponCylinderType
    min_order_amount: Optional[Decimal] = Field(default=None, ge=0)
    expiry_date: Optional[date] = None
    usage_limit: Optional[int] = Field(default=None, ge=1)
    is_active: bool = True


class CouponUpdateIn(CamelModel):
    model_config = ConfigDict(extra="forbid")

    discount_type: Optional[DiscountType] = None
    discount_value: Optional[Decimal] = Field(default=None, gt=0, max_digits=10, decimal_places=2)
    applicable_cylinder_type: Optional[CouponCylinderType] = None
    min_order_amount: Optional[Decimal] = Field(default=None, ge=0)
    expiry_date: Optional[date] = None
    usage_limit: Optional[int] = Field(default=None, ge=1)
    is_active: Optional[bool] = None


class CouponOut(CamelModel):
    code: str
    discount_type: str
    discount_value: Money
    applicable_cylinder_type: str
    min_order_amount: Optional[Money] = None
    expiry_date: Optional[date] = None
    usage_limit: Optional[int] = None
    usage_count: int = 0
    is_active: bool
    created_at: datetime
    updated_at: datetime


class CouponRedemptionOut(CamelModel):
    id: int
    coupon_code: str
    order_id: int
    discount_amount: Money
    created_at: datetime
