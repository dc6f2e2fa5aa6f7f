# lpg_orders/schemas/common.py
from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel

# Decimals go out as JSON numbers, not strings
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class CylinderType(str, Enum):
    DOMESTIC = "Domestic"
    COMMERCIAL = "Commercial"


class CouponCylinderType(str, Enum):
    DOMESTIC = "Domestic"
    COMMERCIAL = "Commercial"
    BOTH = "Both"


class DiscountType(str, Enum):
    PERCENTAGE = "percentage"
    FLAT = "flat"


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    IN_TRANSIT = "in-transit"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ErrorOut(BaseModel):
    success: bool = False
    error: str
