# lpg_orders/models/coupon_usage.py
from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Integer, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column

from lpg_orders.core.db import Base


class CouponUsage(Base):
    """One row per order that redeemed a coupon. Rows are never updated."""

    __tablename__ = "coupon_usage"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    # UNIQUE is the concurrency control: a code can be redeemed by one order only,
    # whatever the coupon's usage_limit says.
    coupon_code: Mapped[str] = mapped_column(
        String(50),
        ForeignKey("coupons.code", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )

    order_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("orders.id"),
        nullable=False,
        index=True,
    )

    discount_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
