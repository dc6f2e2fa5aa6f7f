from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from lpg_orders.core.config import settings
from lpg_orders.core.db import bounded
from lpg_orders.models.order import Order
from lpg_orders.services import ledger
from lpg_orders.services.catalog import get_pricing
from lpg_orders.services.coupon_evaluator import CouponRejected, evaluate, normalize_code
from lpg_orders.services.errors import (
    CouponRejectedError,
    InconsistentQuote,
    InvalidQuantity,
    OutOfStock,
    RedemptionConflict,
    StorageUnavailable,
)
from lpg_orders.services.orders import OrdersError, create_order
from lpg_orders.utils.money import round_money

MAX_QUANTITY = 999


@dataclass(frozen=True)
class OrderInput:
    customer_name: str
    phone: str
    address: str
    category: str
    quantity: int
    coupon_code: Optional[str] = None


@dataclass(frozen=True)
class PricingResult:
    category: str
    quantity: int
    unit_price: Decimal
    subtotal: Decimal
    discount: Decimal
    total: Decimal
    applied_coupon_code: Optional[str] = None


async def quote(
    db: AsyncSession,
    category: str,
    quantity: int,
    coupon_code: str | None = None,
    *,
    today: date | None = None,
) -> PricingResult:
    """
    Price a prospective order from the current catalog and coupon rows.

    Stock is checked before any coupon work. A supplied coupon that fails
    evaluation fails the whole quote; there is no fallback to full price.
    """
    if isinstance(quantity, bool) or not isinstance(quantity, int) or not 1 <= quantity <= MAX_QUANTITY:
        raise InvalidQuantity()

    try:
        catalog = await get_pricing(db, category)
        if not catalog.in_stock:
            raise OutOfStock(category)

        subtotal = round_money(catalog.unit_price * quantity)
        discount = Decimal("0.00")
        applied_code: str | None = None

        code = normalize_code(coupon_code)
        if code:
            result = await evaluate(db, code, category, subtotal, today=today)
            if isinstance(result, CouponRejected):
                logger.info(f"Coupon {code} rejected for {category} x{quantity}: {result.reason.value}")
                raise CouponRejectedError(result)
            discount = result.discount_amount
            applied_code = result.normalized_code

    except asyncio.TimeoutError:
        logger.warning(f"Storage deadline exceeded while quoting {category} x{quantity}")
        raise StorageUnavailable() from None
    except SQLAlchemyError:
        logger.exception("Storage error while quoting")
        raise StorageUnavailable() from None

    return PricingResult(
        category=category,
        quantity=quantity,
        unit_price=catalog.unit_price,
        subtotal=subtotal,
        discount=discount,
        total=round_money(subtotal - discount),
        applied_coupon_code=applied_code,
    )


def _redeems(pricing: PricingResult) -> bool:
    return bool(pricing.applied_coupon_code) and pricing.discount > 0


async def _commit_atomic(db: AsyncSession, order_input: OrderInput, pricing: PricingResult) -> Order:
    try:
        order = await create_order(db, order_input, pricing)
        if _redeems(pricing):
            await ledger.record(
                db,
                code=pricing.applied_coupon_code,
                order_id=order.id,
                discount_amount=pricing.discount,
            )
        await bounded(db.commit())

    except ledger.DuplicateRedemption:
        await db.rollback()
        logger.warning(f"Coupon {pricing.applied_coupon_code} lost a redemption race; order rolled back")
        raise RedemptionConflict(pricing.applied_coupon_code) from None
    except OrdersError as e:
        await db.rollback()
        logger.error(f"Refusing to store inconsistent quote: {e}")
        raise InconsistentQuote() from None
    except asyncio.TimeoutError:
        await db.rollback()
        logger.warning("Storage deadline exceeded while committing order")
        raise StorageUnavailable() from None
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Storage error while committing order")
        raise StorageUnavailable() from None

    return order


async def _commit_legacy(db: AsyncSession, order_input: OrderInput, pricing: PricingResult) -> Order:
    try:
        order = await create_order(db, order_input, pricing)
        await bounded(db.commit())
    except OrdersError as e:
        await db.rollback()
        logger.error(f"Refusing to store inconsistent quote: {e}")
        raise InconsistentQuote() from None
    except asyncio.TimeoutError:
        await db.rollback()
        raise StorageUnavailable() from None
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Storage error while committing order")
        raise StorageUnavailable() from None

    order_id = order.id
    # Keep the committed row readable if the ledger step rolls back
    db.expunge(order)

    if _redeems(pricing):
        # Known gap: the order stays even when the usage row cannot be written
        try:
            await ledger.record(
                db,
                code=pricing.applied_coupon_code,
                order_id=order_id,
                discount_amount=pricing.discount,
            )
            await bounded(db.commit())
        except (ledger.DuplicateRedemption, SQLAlchemyError, asyncio.TimeoutError) as e:
            await db.rollback()
            logger.error(
                f"Coupon usage not recorded for order {order_id} "
                f"(coupon {pricing.applied_coupon_code}): {e!r}"
            )

    return order


async def commit(
    db: AsyncSession,
    order_input: OrderInput,
    pricing: PricingResult,
    *,
    mode: str | None = None,
) -> Order:
    """Persist the order for a quote and record the coupon redemption, if any."""
    mode = mode or settings.ORDER_COMMIT_MODE
    if mode == "legacy":
        order = await _commit_legacy(db, order_input, pricing)
    else:
        order = await _commit_atomic(db, order_input, pricing)

    logger.info(
        f"Order {order.id} created: {pricing.category} x{pricing.quantity} "
        f"total={pricing.total} coupon={pricing.applied_coupon_code or '-'}"
    )
    return order


async def place_order(
    db: AsyncSession,
    order_input: OrderInput,
    *,
    mode: str | None = None,
    today: date | None = None,
) -> tuple[Order, PricingResult]:
    pricing = await quote(
        db,
        order_input.category,
        order_input.quantity,
        order_input.coupon_code,
        today=today,
    )
    order = await commit(db, order_input, pricing, mode=mode)
    return order, pricing
