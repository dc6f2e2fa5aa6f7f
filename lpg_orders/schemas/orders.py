# lpg_orders/schemas/orders.py
from __future__ import annotations

import re
from datetime import datetime
from typing import Annotated, List, Optional

from pydantic import AfterValidator, ConfigDict, Field, field_validator

from lpg_orders.schemas.common import CamelModel, CylinderType, Money, OrderStatus

_NON_DIGITS = re.compile(r"[^\d]")


def _phone_digits(v: str) -> str:
    digits = _NON_DIGITS.sub("", v or "")
    if len(digits) < 7:
        raise ValueError("Phone number must contain at least 7 digits")
    if len(digits) > 15:
        raise ValueError("Phone number is too long")
    return digits


def _optional_code(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    v = v.strip()
    return v or None


Phone = Annotated[str, AfterValidator(_phone_digits)]
CouponCode = Annotated[Optional[str], AfterValidator(_optional_code)]


class OrderCreateIn(CamelModel):
    """Body of POST /api/orders."""

    model_config = ConfigDict(extra="forbid")

    customer_name: str = Field(min_length=1, max_length=100)
    phone: Phone
    address: str = Field(min_length=1, max_length=500)
    cylinder_type: CylinderType
    quantity: int = Field(ge=1, le=999, strict=True)
    coupon_code: CouponCode = Field(default=None, max_length=50)

    @field_validator("customer_name", "address")
    @classmethod
    def strip_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class SimpleOrderCreateIn(CamelModel):
    """Body of POST /api/order (the storefront quick-order form)."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=100)
    phone: Phone
    address: str = Field(max_length=500)
    cylinder_type: CylinderType
    quantity: int = Field(ge=1, le=999)
    coupon_code: CouponCode = Field(default=None, max_length=50)

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 2:
            raise ValueError("Name is required and must be at least 2 characters")
        return v

    @field_validator("address")
    @classmethod
    def check_address(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 10:
            raise ValueError("Address is required and must be at least 10 characters")
        return v


class OrderCreatedOut(CamelModel):
    order_id: int
    price_per_cylinder: Money
    subtotal: Money
    discount: Money
    total_price: Money
    coupon_code: Optional[str] = None
    status: str
    created_at: datetime


class OrderCreatedEnvelope(CamelModel):
    success: bool = True
    data: OrderCreatedOut


class OrderOut(CamelModel):
    id: int
    customer_name: str
    phone: Phone
    address: str
    cylinder_type: str
    quantity: int
    price_per_cylinder: Money
    subtotal: Money
    discount: Money
    total_price: Money
    coupon_code: Optional[str] = None
    status: str
    created_at: datetime
    updated_at: datetime


class OrdersListOut(CamelModel):
    items: List[OrderOut] = Field(default_factory=list)
    limit: int
    offset: int
    total: int


class OrderStatusPatchIn(CamelModel):
    model_config = ConfigDict(extra="forbid")

    status: OrderStatus
    notes: Optional[str] = Field(default=None, max_length=500)


class OrderStatusHistoryOut(CamelModel):
    id: int
    order_id: int
    status: str
    notes: Optional[str] = None
    changed_at: datetime
