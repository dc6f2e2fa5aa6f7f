from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from lpg_orders.core.db import get_db
from lpg_orders.routers.orders import order_created
from lpg_orders.schemas.orders import OrderCreatedEnvelope, SimpleOrderCreateIn
from lpg_orders.services.pricing import OrderInput, place_order


router = APIRouter(prefix="/api/order", tags=["Orders"])


@router.post("", response_model=OrderCreatedEnvelope, status_code=status.HTTP_201_CREATED)
async def create_simple_order(
    payload: SimpleOrderCreateIn,
    db: AsyncSession = Depends(get_db),
) -> OrderCreatedEnvelope:
    order, _ = await place_order(
        db,
        OrderInput(
            customer_name=payload.name,
            phone=payload.phone,
            address=payload.address,
            category=payload.cylinder_type.value,
            quantity=payload.quantity,
            coupon_code=payload.coupon_code,
        ),
    )
    return order_created(order)
