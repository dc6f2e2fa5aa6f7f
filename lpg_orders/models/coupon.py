# lpg_orders/models/coupon.py
from __future__ import annotations

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Integer,
    Numeric,
    String,
    func,
)

from lpg_orders.core.db import Base


class Coupon(Base):
    __tablename__ = "coupons"
    __table_args__ = (
        CheckConstraint("discount_type IN ('percentage','flat')", name="coupons_discount_type_check"),
        CheckConstraint(
            "applicable_cylinder_type IN ('Domestic','Commercial','Both')",
            name="coupons_applicable_type_check",
        ),
        CheckConstraint("discount_value > 0", name="coupons_discount_value_chk"),
        CheckConstraint(
            "discount_type <> 'percentage' OR discount_value <= 100",
            name="coupons_percentage_max_chk",
        ),
        CheckConstraint("usage_limit IS NULL OR usage_limit >= 1", name="coupons_usage_limit_chk"),
    )

    # Always stored trimmed + upper-cased
    code = Column(String(50), primary_key=True)

    discount_type = Column(String(16), nullable=False)
    discount_value = Column(Numeric(10, 2), nullable=False)
    applicable_cylinder_type = Column(String(20), nullable=False, default="Both")

    min_order_amount = Column(Numeric(10, 2), nullable=True)
    expiry_date = Column(Date, nullable=True)  # inclusive
    # NULL means the configured default limit applies
    usage_limit = Column(Integer, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True, server_default="true")

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
