from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from lpg_orders.core.db import bounded
from lpg_orders.models.product import Product
from lpg_orders.services.errors import ProductNotFound
from lpg_orders.utils.money import round_money

CATEGORIES = ("Domestic", "Commercial")


@dataclass(frozen=True)
class CatalogPricing:
    category: str
    unit_price: Decimal
    in_stock: bool


async def get_pricing(db: AsyncSession, category: str) -> CatalogPricing:
    # Read fresh every time: an admin price change applies to the next quote
    res = await bounded(
        db.execute(
            select(Product.price, Product.in_stock).where(Product.category == category)
        )
    )
    row = res.one_or_none()
    if row is None or row.price is None or row.price <= 0:
        raise ProductNotFound(category)

    return CatalogPricing(
        category=category,
        unit_price=round_money(row.price),
        in_stock=bool(row.in_stock),
    )
