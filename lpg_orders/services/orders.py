from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

from fastapi import HTTPException
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from lpg_orders.core.db import bounded
from lpg_orders.models.order import ORDER_STATUSES, Order
from lpg_orders.models.order_status_history import OrderStatusHistory
from lpg_orders.services import ledger

if TYPE_CHECKING:
    from lpg_orders.services.pricing import OrderInput, PricingResult

HISTORY_STATUSES = ("delivered", "cancelled")

# Forward along the delivery chain (skipping allowed), or cancel while not finished
_FLOW = ("pending", "confirmed", "in-transit", "delivered")


class OrdersError(Exception):
    pass


def can_transition(current: str, new: str) -> bool:
    if current in HISTORY_STATUSES:
        return False
    if new == "cancelled":
        return True
    if new not in _FLOW:
        return False
    return _FLOW.index(new) > _FLOW.index(current)


async def create_order(db: AsyncSession, order_input: "OrderInput", pricing: "PricingResult") -> Order:
    """Map a quote onto a new pending order row. Flushes but does not commit."""
    if pricing.subtotal != pricing.unit_price * pricing.quantity:
        raise OrdersError("subtotal does not match unit price x quantity")
    if pricing.total != pricing.subtotal - pricing.discount:
        raise OrdersError("total does not match subtotal - discount")
    if pricing.quantity != order_input.quantity:
        raise OrdersError("quantity does not match the quote")

    order = Order(
        customer_name=order_input.customer_name,
        phone=order_input.phone,
        address=order_input.address,
        cylinder_type=order_input.category,
        quantity=pricing.quantity,
        price_per_cylinder=pricing.unit_price,
        subtotal=pricing.subtotal,
        discount=pricing.discount,
        total_price=pricing.total,
        coupon_code=pricing.applied_coupon_code,
        status="pending",
    )
    db.add(order)
    await bounded(db.flush())  # assigns order.id

    db.add(OrderStatusHistory(order_id=order.id, status="pending", notes="Order placed"))
    await bounded(db.flush())
    return order


# -------------------------
# Admin views
# -------------------------

async def list_orders(
    db: AsyncSession,
    *,
    history: bool = False,
    status: Optional[str] = None,
    limit: int = 100,
    offset: int = 0,
) -> dict:
    if history:
        base = Order.status.in_(HISTORY_STATUSES)
        if status and status != "all" and status in HISTORY_STATUSES:
            base = Order.status == status
    else:
        base = Order.status.not_in(HISTORY_STATUSES)
        if status and status != "all" and status not in HISTORY_STATUSES:
            base = Order.status == status

    total_res = await db.execute(select(func.count()).select_from(Order).where(base))
    total = int(total_res.scalar_one())

    res = await db.execute(
        select(Order)
        .where(base)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .limit(limit)
        .offset(offset)
    )
    return {
        "items": list(res.scalars().all()),
        "limit": limit,
        "offset": offset,
        "total": total,
    }


async def get_order(db: AsyncSession, order_id: int) -> Order:
    order = await db.get(Order, order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return order


async def update_status(
    db: AsyncSession,
    *,
    order_id: int,
    status: str,
    notes: str | None = None,
) -> Order:
    if status not in ORDER_STATUSES:
        raise HTTPException(
            status_code=400,
            detail=f"Status must be one of: {', '.join(ORDER_STATUSES)}",
        )

    order = await get_order(db, order_id)
    if order.status == status:
        return order
    if not can_transition(order.status, status):
        raise HTTPException(
            status_code=400,
            detail=f"Cannot change order status from {order.status} to {status}",
        )

    try:
        order.status = status
        db.add(OrderStatusHistory(order_id=order.id, status=status, notes=notes))
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    await db.refresh(order)
    return order


async def list_status_history(db: AsyncSession, order_id: int) -> List[OrderStatusHistory]:
    await get_order(db, order_id)
    res = await db.execute(
        select(OrderStatusHistory)
        .where(OrderStatusHistory.order_id == order_id)
        .order_by(OrderStatusHistory.id.asc())
    )
    return list(res.scalars().all())


async def delete_order(db: AsyncSession, order_id: int) -> None:
    order = await get_order(db, order_id)
    # A redemption row points at the order; the coupon must be deleted first
    if await ledger.has_usage_for_order(db, order.id):
        raise HTTPException(
            status_code=409,
            detail="Order has a recorded coupon redemption and cannot be deleted",
        )

    try:
        await db.execute(delete(OrderStatusHistory).where(OrderStatusHistory.order_id == order.id))
        await db.delete(order)
        await db.commit()
    except Exception:
        await db.rollback()
        raise
