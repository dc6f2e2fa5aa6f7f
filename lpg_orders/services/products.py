from __future__ import annotations

from typing import List

from fastapi import HTTPException
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from lpg_orders.models.product import Product
from lpg_orders.services.catalog import CATEGORIES


async def list_products(db: AsyncSession) -> List[Product]:
    res = await db.execute(
        select(Product)
        .where(Product.category.in_(CATEGORIES))
        .order_by(Product.category.asc(), Product.id.asc())
    )
    return list(res.scalars().all())


async def get_product(db: AsyncSession, product_id: int) -> Product:
    product = await db.get(Product, product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


async def create_product(db: AsyncSession, **fields) -> Product:
    res = await db.execute(select(Product.id).where(Product.category == fields["category"]))
    if res.scalar_one_or_none() is not None:
        raise HTTPException(status_code=409, detail=f"A {fields['category']} product already exists")

    product = Product(**fields)
    db.add(product)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=409, detail="Product violates a catalog constraint")

    await db.refresh(product)
    return product


async def update_product(db: AsyncSession, product_id: int, **changes) -> Product:
    product = await get_product(db, product_id)
    for key, value in changes.items():
        setattr(product, key, value)

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=409, detail="Product violates a catalog constraint")

    await db.refresh(product)
    return product


async def delete_product(db: AsyncSession, product_id: int) -> None:
    product = await get_product(db, product_id)
    try:
        await db.delete(product)
        await db.commit()
    except Exception:
        await db.rollback()
        raise
