from __future__ import annotations

from decimal import Decimal
from typing import List

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from lpg_orders.core.db import bounded
from lpg_orders.models.coupon_usage import CouponUsage
from lpg_orders.utils.money import round_money


class DuplicateRedemption(Exception):
    def __init__(self, coupon_code: str):
        self.coupon_code = coupon_code
        super().__init__(f"Coupon {coupon_code} already has a redemption recorded")


async def count_usage(db: AsyncSession, code: str) -> int:
    res = await bounded(
        db.execute(select(func.count()).select_from(CouponUsage).where(CouponUsage.coupon_code == code))
    )
    return int(res.scalar_one())


async def record(
    db: AsyncSession,
    *,
    code: str,
    order_id: int,
    discount_amount: Decimal,
) -> CouponUsage:
    """
    Add a ledger row inside the caller's transaction and flush it.

    The unique constraint on coupon_code decides races: the losing flush raises
    DuplicateRedemption and the caller must roll back its session.
    """
    entry = CouponUsage(
        coupon_code=code,
        order_id=order_id,
        discount_amount=round_money(discount_amount),
    )
    db.add(entry)
    try:
        await bounded(db.flush())
    except IntegrityError as e:
        raise DuplicateRedemption(code) from e
    return entry


async def list_for_coupon(db: AsyncSession, code: str) -> List[CouponUsage]:
    res = await db.execute(
        select(CouponUsage)
        .where(CouponUsage.coupon_code == code)
        .order_by(CouponUsage.created_at.asc(), CouponUsage.id.asc())
    )
    return list(res.scalars().all())


async def usage_counts(db: AsyncSession, codes: List[str]) -> dict[str, int]:
    if not codes:
        return {}
    res = await db.execute(
        select(CouponUsage.coupon_code, func.count())
        .where(CouponUsage.coupon_code.in_(codes))
        .group_by(CouponUsage.coupon_code)
    )
    return {str(r[0]): int(r[1]) for r in res.all()}


async def delete_for_coupon(db: AsyncSession, code: str) -> int:
    # Explicit delete so the cascade does not depend on the driver enforcing FKs
    res = await db.execute(delete(CouponUsage).where(CouponUsage.coupon_code == code))
    return int(res.rowcount or 0)


async def has_usage_for_order(db: AsyncSession, order_id: int) -> bool:
    res = await db.execute(select(CouponUsage.id).where(CouponUsage.order_id == order_id).limit(1))
    return res.scalar_one_or_none() is not None
