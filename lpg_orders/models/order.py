# lpg_orders/models/order.py
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, Integer, Numeric, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from lpg_orders.core.db import Base

ORDER_STATUSES = ("pending", "confirmed", "in-transit", "delivered", "cancelled")


class Order(Base):
    __tablename__ = "orders"
    __table_args__ = (
        CheckConstraint("cylinder_type IN ('Domestic','Commercial')", name="orders_cylinder_type_check"),
        CheckConstraint("quantity >= 1 AND quantity <= 999", name="orders_quantity_chk"),
        CheckConstraint(
            "status IN ('pending','confirmed','in-transit','delivered','cancelled')",
            name="orders_status_check",
        ),
    )
    # created_at / updated_at come back with the INSERT, no reload after commit
    __mapper_args__ = {"eager_defaults": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    customer_name: Mapped[str] = mapped_column(String(100), nullable=False)
    phone: Mapped[str] = mapped_column(String(20), nullable=False)  # digits only
    address: Mapped[str] = mapped_column(Text, nullable=False)

    cylinder_type: Mapped[str] = mapped_column(String(20), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)

    # Price snapshot computed server side at creation; never updated afterwards
    price_per_cylinder: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    subtotal: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    discount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=0)
    total_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    coupon_code: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="pending")

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
