# lpg_orders/services/coupons.py
from __future__ import annotations

from typing import Optional

from fastapi import HTTPException
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from lpg_orders.core.config import settings
from lpg_orders.models.coupon import Coupon
from lpg_orders.services import ledger
from lpg_orders.services.coupon_evaluator import normalize_code
from lpg_orders.utils.money import D


def _check_percentage(discount_type: str, discount_value) -> None:
    if discount_type == "percentage" and D(discount_value) > 100:
        raise HTTPException(status_code=400, detail="Percentage discount cannot exceed 100%")


async def _get_or_404(db: AsyncSession, code: str) -> Coupon:
    coupon = await db.get(Coupon, normalize_code(code))
    if not coupon:
        raise HTTPException(status_code=404, detail="Coupon not found")
    return coupon


async def create_coupon(
    db: AsyncSession,
    *,
    code: str,
    discount_type: str,
    discount_value,
    applicable_cylinder_type: str,
    min_order_amount=None,
    expiry_date=None,
    usage_limit: Optional[int] = None,
    is_active: bool = True,
) -> Coupon:
    normalized = normalize_code(code)
    if not normalized:
        raise HTTPException(status_code=400, detail="Coupon code is required")
    _check_percentage(discount_type, discount_value)

    if await db.get(Coupon, normalized):
        raise HTTPException(status_code=409, detail="Coupon code already exists")

    coupon = Coupon(
        code=normalized,
        discount_type=discount_type,
        discount_value=discount_value,
        applicable_cylinder_type=applicable_cylinder_type,
        min_order_amount=min_order_amount or None,
        expiry_date=expiry_date,
        usage_limit=usage_limit or settings.DEFAULT_USAGE_LIMIT,
        is_active=is_active,
    )
    db.add(coupon)
    try:
        await db.commit()
    except IntegrityError:
        # Lost a create race on the same code
        await db.rollback()
        raise HTTPException(status_code=409, detail="Coupon code already exists")

    await db.refresh(coupon)
    return coupon


async def list_coupons(
    db: AsyncSession,
    *,
    is_active: Optional[bool] = None,
    limit: int = 100,
    offset: int = 0,
) -> list[tuple[Coupon, int]]:
    stmt = select(Coupon).order_by(Coupon.created_at.desc(), Coupon.code.asc())
    if is_active is not None:
        stmt = stmt.where(Coupon.is_active == is_active)

    res = await db.execute(stmt.limit(limit).offset(offset))
    coupons = list(res.scalars().all())
    counts = await ledger.usage_counts(db, [c.code for c in coupons])
    return [(c, counts.get(c.code, 0)) for c in coupons]


async def get_coupon(db: AsyncSession, code: str) -> tuple[Coupon, int]:
    coupon = await _get_or_404(db, code)
    return coupon, await ledger.count_usage(db, coupon.code)


async def update_coupon(db: AsyncSession, code: str, **changes) -> tuple[Coupon, int]:
    coupon = await _get_or_404(db, code)

    discount_type = changes.get("discount_type") or coupon.discount_type
    discount_value = changes.get("discount_value", coupon.discount_value)
    _check_percentage(discount_type, discount_value)

    for key, value in changes.items():
        if key == "min_order_amount" and not value:
            value = None
        setattr(coupon, key, value)

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=400, detail="Coupon violates a constraint")

    await db.refresh(coupon)
    return coupon, await ledger.count_usage(db, coupon.code)


async def delete_coupon(db: AsyncSession, code: str) -> int:
    """Delete a coupon together with its ledger rows. Returns removed usage rows."""
    coupon = await _get_or_404(db, code)
    try:
        removed = await ledger.delete_for_coupon(db, coupon.code)
        await db.delete(coupon)
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    return removed


async def list_redemptions(db: AsyncSession, code: str):
    coupon = await _get_or_404(db, code)
    return await ledger.list_for_coupon(db, coupon.code)
