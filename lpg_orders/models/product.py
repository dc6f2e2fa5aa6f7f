# lpg_orders/models/product.py
from __future__ import annotations

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Integer, Numeric, String, Text, func

from lpg_orders.core.db import Base


class Product(Base):
    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("category IN ('Domestic','Commercial')", name="products_category_check"),
        CheckConstraint("price > 0", name="products_price_positive_chk"),
    )

    id = Column(Integer, primary_key=True, index=True)

    name = Column(String(100), nullable=False)

    # One row per category; this is the row the pricing engine reads
    category = Column(String(20), nullable=False, unique=True)

    description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
    image_url = Column(String(500), nullable=True)
    in_stock = Column(Boolean, nullable=False, default=True, server_default="true")

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
