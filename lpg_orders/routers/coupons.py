from __future__ import annotations

import asyncio

from fastapi import APIRouter, Depends
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from lpg_orders.core.db import get_db
from lpg_orders.schemas.coupons import CouponValidateIn, CouponValidateOut
from lpg_orders.services.coupon_evaluator import CouponRejected, evaluate
from lpg_orders.services.errors import CouponRejectedError, StorageUnavailable


router = APIRouter(prefix="/api/coupons", tags=["Coupons"])


@router.post("/validate")
async def validate_coupon(
    payload: CouponValidateIn,
    db: AsyncSession = Depends(get_db),
) -> dict:
    try:
        result = await evaluate(db, payload.code, payload.cylinder_type.value, payload.subtotal)
    except asyncio.TimeoutError:
        raise StorageUnavailable() from None
    except SQLAlchemyError:
        logger.exception("Storage error while validating coupon")
        raise StorageUnavailable() from None

    if isinstance(result, CouponRejected):
        raise CouponRejectedError(result)

    is_percent = result.discount_type == "percentage"
    out = CouponValidateOut(
        code=result.normalized_code,
        kind="percent" if is_percent else "flat",
        discount_percent=result.discount_value if is_percent else None,
        discount_amount=result.discount_amount,
    )
    return {"success": True, "data": out.model_dump(mode="json", by_alias=True, exclude_none=True)}
