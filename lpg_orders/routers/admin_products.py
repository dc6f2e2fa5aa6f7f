from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from lpg_orders.core.db import get_db
from lpg_orders.core.deps import require_admin
from lpg_orders.schemas.products import ProductCreateIn, ProductOut, ProductUpdateIn
from lpg_orders.services.products import (
    create_product,
    delete_product,
    get_product,
    list_products,
    update_product,
)


router = APIRouter(
    prefix="/api/admin/products",
    tags=["Admin - Products"],
    dependencies=[Depends(require_admin)],
)


@router.get("", response_model=list[ProductOut])
async def admin_list_products(db: AsyncSession = Depends(get_db)):
    return await list_products(db)


@router.post("", response_model=ProductOut, status_code=status.HTTP_201_CREATED)
async def admin_create_product(body: ProductCreateIn, db: AsyncSession = Depends(get_db)):
    fields = body.model_dump()
    fields["category"] = body.category.value
    return await create_product(db, **fields)


@router.get("/{product_id}", response_model=ProductOut)
async def admin_get_product(product_id: int, db: AsyncSession = Depends(get_db)):
    return await get_product(db, product_id)


@router.patch("/{product_id}", response_model=ProductOut)
async def admin_update_product(
    product_id: int,
    body: ProductUpdateIn,
    db: AsyncSession = Depends(get_db),
):
    return await update_product(db, product_id, **body.model_dump(exclude_unset=True))


@router.delete("/{product_id}")
async def admin_delete_product(product_id: int, db: AsyncSession = Depends(get_db)):
    await delete_product(db, product_id)
    return {"success": True, "message": "Product deleted successfully"}
