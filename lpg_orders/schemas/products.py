# lpg_orders/schemas/products.py
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import ConfigDict, Field

from lpg_orders.schemas.common import CamelModel, CylinderType, Money


class ProductCreateIn(CamelModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1, max_length=100)
    category: CylinderType
    description: Optional[str] = None
    price: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    image_url: Optional[str] = Field(default=None, max_length=500)
    in_stock: bool = True


class ProductUpdateIn(CamelModel):
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(default=None, gt=0, max_digits=10, decimal_places=2)
    image_url: Optional[str] = Field(default=None, max_length=500)
    in_stock: Optional[bool] = None


class ProductOut(CamelModel):
    id: int
    name: str
    category: str
    description: Optional[str] = None
    price: Money
    image_url: Optional[str] = None
    in_stock: bool
    created_at: datetime
    updated_at: datetime
