from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from lpg_orders.core.db import get_db
from lpg_orders.schemas.products import ProductOut
from lpg_orders.services.products import get_product, list_products


router = APIRouter(prefix="/api/products", tags=["Products"])


@router.get("", response_model=list[ProductOut])
async def public_list_products(db: AsyncSession = Depends(get_db)):
    return await list_products(db)


@router.get("/{product_id}", response_model=ProductOut)
async def public_get_product(product_id: int, db: AsyncSession = Depends(get_db)):
    return await get_product(db, product_id)
