from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional, Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from lpg_orders.core.config import settings
from lpg_orders.core.db import bounded
from lpg_orders.models.coupon import Coupon
from lpg_orders.services import ledger
from lpg_orders.utils.money import D, round_money, round_units


class RejectReason(str, Enum):
    NOT_FOUND = "NotFound"
    INACTIVE = "Inactive"
    EXPIRED = "Expired"
    WRONG_CATEGORY = "WrongCategory"
    BELOW_MINIMUM = "BelowMinimum"
    LIMIT_REACHED = "LimitReached"


_MESSAGES = {
    RejectReason.NOT_FOUND: "Coupon code not found",
    RejectReason.INACTIVE: "Coupon is not active",
    RejectReason.EXPIRED: "Coupon has expired",
    RejectReason.WRONG_CATEGORY: "Coupon not applicable for this cylinder type",
    RejectReason.LIMIT_REACHED: "Coupon usage limit reached",
}


@dataclass(frozen=True)
class CouponApplied:
    normalized_code: str
    discount_amount: Decimal
    discount_type: str
    discount_value: Decimal


@dataclass(frozen=True)
class CouponRejected:
    reason: RejectReason
    min_order_amount: Optional[Decimal] = None

    @property
    def message(self) -> str:
        if self.reason is RejectReason.BELOW_MINIMUM:
            return f"Minimum order amount of {self.min_order_amount:f} required"
        return _MESSAGES[self.reason]


CouponResult = Union[CouponApplied, CouponRejected]


def normalize_code(code: str | None) -> str:
    return (code or "").strip().upper()


def compute_discount(discount_type: str, discount_value: Decimal, subtotal: Decimal) -> Decimal:
    subtotal = D(subtotal)
    value = D(discount_value)

    if discount_type == "percentage":
        # Round after multiplying, to whole currency units
        return min(subtotal, round_units(subtotal * value / Decimal(100)))
    if discount_type == "flat":
        return round_money(min(subtotal, value))
    raise ValueError(f"Unknown discount type: {discount_type}")


async def evaluate(
    db: AsyncSession,
    code: str,
    category: str,
    subtotal: Decimal,
    *,
    today: date | None = None,
) -> CouponResult:
    """
    Decide whether a coupon applies to a prospective order.

    Checks run in a fixed order and the first failure is reported:
    lookup, active flag, expiry, category, minimum amount, usage limit.
    """
    normalized = normalize_code(code)
    if not normalized:
        return CouponRejected(RejectReason.NOT_FOUND)

    res = await bounded(db.execute(select(Coupon).where(Coupon.code == normalized)))
    coupon = res.scalar_one_or_none()
    if coupon is None:
        return CouponRejected(RejectReason.NOT_FOUND)

    if not coupon.is_active:
        return CouponRejected(RejectReason.INACTIVE)

    today = today or date.today()
    if coupon.expiry_date is not None and today > coupon.expiry_date:
        return CouponRejected(RejectReason.EXPIRED)

    if coupon.applicable_cylinder_type != "Both" and coupon.applicable_cylinder_type != category:
        return CouponRejected(RejectReason.WRONG_CATEGORY)

    subtotal = D(subtotal)
    if coupon.min_order_amount is not None and subtotal < D(coupon.min_order_amount):
        return CouponRejected(RejectReason.BELOW_MINIMUM, min_order_amount=D(coupon.min_order_amount))

    used = await ledger.count_usage(db, normalized)
    limit = coupon.usage_limit or settings.DEFAULT_USAGE_LIMIT
    if used >= limit:
        return CouponRejected(RejectReason.LIMIT_REACHED)

    return CouponApplied(
        normalized_code=normalized,
        discount_amount=compute_discount(coupon.discount_type, coupon.discount_value, subtotal),
        discount_type=coupon.discount_type,
        discount_value=D(coupon.discount_value),
    )
