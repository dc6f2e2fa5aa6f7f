from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from lpg_orders.core.db import get_db
from lpg_orders.models.order import Order
from lpg_orders.schemas.orders import OrderCreatedEnvelope, OrderCreatedOut, OrderCreateIn
from lpg_orders.services.pricing import OrderInput, place_order


router = APIRouter(prefix="/api/orders", tags=["Orders"])


def order_created(order: Order) -> OrderCreatedEnvelope:
    return OrderCreatedEnvelope(
        data=OrderCreatedOut(
            order_id=order.id,
            price_per_cylinder=order.price_per_cylinder,
            subtotal=order.subtotal,
            discount=order.discount,
            total_price=order.total_price,
            coupon_code=order.coupon_code,
            status=order.status,
            created_at=order.created_at,
        )
    )


@router.post("", response_model=OrderCreatedEnvelope, status_code=status.HTTP_201_CREATED)
async def create_order(
    payload: OrderCreateIn,
    db: AsyncSession = Depends(get_db),
) -> OrderCreatedEnvelope:
    # Prices always come from the catalog; the body carries none
    order, _ = await place_order(
        db,
        OrderInput(
            customer_name=payload.customer_name,
            phone=payload.phone,
            address=payload.address,
            category=payload.cylinder_type.value,
            quantity=payload.quantity,
            coupon_code=payload.coupon_code,
        ),
    )
    return order_created(order)
