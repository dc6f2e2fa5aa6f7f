# lpg_orders/services/errors.py
from __future__ import annotations


class PricingError(Exception):
    """Base for every failure the pricing engine reports to its callers."""

    status_code = 400
    message = "Unable to price this order"

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class ProductNotFound(PricingError):
    # Missing catalog row is a setup problem, not a customer mistake
    status_code = 500

    def __init__(self, category: str):
        self.category = category
        super().__init__(f"No product configured for cylinder type {category}")


class OutOfStock(PricingError):
    message = "This product is currently out of stock. Please check back later."

    def __init__(self, category: str):
        self.category = category
        super().__init__()


class InvalidQuantity(PricingError):
    message = "Quantity must be a number between 1 and 999"


class CouponRejectedError(PricingError):
    def __init__(self, rejection):
        self.rejection = rejection
        self.reason = rejection.reason
        super().__init__(rejection.message)


class RedemptionConflict(PricingError):
    status_code = 409
    message = "Coupon has already been used"

    def __init__(self, coupon_code: str):
        self.coupon_code = coupon_code
        super().__init__()


class StorageUnavailable(PricingError):
    status_code = 503
    message = "Service temporarily unavailable. Please try again."


class InconsistentQuote(PricingError):
    status_code = 500
    message = "Order totals failed verification"
