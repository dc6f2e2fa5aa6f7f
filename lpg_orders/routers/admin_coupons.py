# lpg_orders/routers/admin_coupons.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from lpg_orders.core.db import get_db
from lpg_orders.core.deps import require_admin
from lpg_orders.models.coupon import Coupon
from lpg_orders.schemas.coupons import (
    CouponCreateIn,
    CouponOut,
    CouponRedemptionOut,
    CouponUpdateIn,
)
from lpg_orders.services.coupons import (
    create_coupon,
    delete_coupon,
    get_coupon,
    list_coupons,
    list_redemptions,
    update_coupon,
)

router = APIRouter(
    prefix="/api/admin/coupons",
    tags=["Admin - Coupons"],
    dependencies=[Depends(require_admin)],
)


def _coupon_out(coupon: Coupon, usage_count: int) -> CouponOut:
    return CouponOut.model_validate(coupon).model_copy(update={"usage_count": usage_count})


def _enum_values(data: dict) -> dict:
    return {k: getattr(v, "value", v) for k, v in data.items()}


@router.post("", response_model=CouponOut, status_code=status.HTTP_201_CREATED)
async def admin_create_coupon(body: CouponCreateIn, db: AsyncSession = Depends(get_db)):
    coupon = await create_coupon(db, **_enum_values(body.model_dump()))
    return _coupon_out(coupon, 0)


@router.get("", response_model=list[CouponOut])
async def admin_list_coupons(
    is_active: Optional[bool] = Query(default=None, alias="isActive"),
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    rows = await list_coupons(db, is_active=is_active, limit=limit, offset=offset)
    return [_coupon_out(c, n) for c, n in rows]


@router.get("/{code}", response_model=CouponOut)
async def admin_get_coupon(code: str, db: AsyncSession = Depends(get_db)):
    coupon, used = await get_coupon(db, code)
    return _coupon_out(coupon, used)


@router.patch("/{code}", response_model=CouponOut)
async def admin_update_coupon(code: str, body: CouponUpdateIn, db: AsyncSession = Depends(get_db)):
    coupon, used = await update_coupon(db, code, **_enum_values(body.model_dump(exclude_unset=True)))
    return _coupon_out(coupon, used)


@router.delete("/{code}")
async def admin_delete_coupon(code: str, db: AsyncSession = Depends(get_db)):
    removed = await delete_coupon(db, code)
    return {"success": True, "message": "Coupon deleted successfully", "removedUsages": removed}


@router.get("/{code}/redemptions", response_model=list[CouponRedemptionOut])
async def admin_list_redemptions(code: str, db: AsyncSession = Depends(get_db)):
    return await list_redemptions(db, code)
