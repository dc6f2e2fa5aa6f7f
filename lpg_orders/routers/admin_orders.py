from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from lpg_orders.core.db import get_db
from lpg_orders.core.deps import require_admin
from lpg_orders.schemas.orders import (
    OrderOut,
    OrdersListOut,
    OrderStatusHistoryOut,
    OrderStatusPatchIn,
)
from lpg_orders.services.orders import (
    delete_order,
    get_order,
    list_orders,
    list_status_history,
    update_status,
)


router = APIRouter(
    prefix="/api/admin/orders",
    tags=["Admin - Orders"],
    dependencies=[Depends(require_admin)],
)


@router.get("", response_model=OrdersListOut)
async def admin_list_orders(
    status: Optional[str] = None,
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    db: AsyncSession = Depends(get_db),
) -> OrdersListOut:
    # Delivered and cancelled orders only show up under /history
    data = await list_orders(db, history=False, status=status, limit=limit, offset=offset)
    return OrdersListOut.model_validate(data, from_attributes=True)


@router.get("/history", response_model=OrdersListOut)
async def admin_order_history(
    status: Optional[str] = None,
    limit: int = Query(default=1000, ge=1, le=5000),
    offset: int = Query(default=0, ge=0),
    db: AsyncSession = Depends(get_db),
) -> OrdersListOut:
    data = await list_orders(db, history=True, status=status, limit=limit, offset=offset)
    return OrdersListOut.model_validate(data, from_attributes=True)


@router.get("/{order_id}", response_model=OrderOut)
async def admin_get_order(order_id: int, db: AsyncSession = Depends(get_db)):
    return await get_order(db, order_id)


@router.patch("/{order_id}/status", response_model=OrderOut)
async def admin_update_order_status(
    order_id: int,
    body: OrderStatusPatchIn,
    db: AsyncSession = Depends(get_db),
):
    return await update_status(db, order_id=order_id, status=body.status.value, notes=body.notes)


@router.get("/{order_id}/history", response_model=list[OrderStatusHistoryOut])
async def admin_order_status_history(order_id: int, db: AsyncSession = Depends(get_db)):
    return await list_status_history(db, order_id)


@router.delete("/{order_id}")
async def admin_delete_order(order_id: int, db: AsyncSession = Depends(get_db)):
    await delete_order(db, order_id)
    return {"success": True, "message": "Order deleted successfully"}
