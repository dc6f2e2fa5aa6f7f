# lpg_orders/models/__init__.py
# Import all models here so SQLAlchemy registers them into Base.metadata.

from lpg_orders.models.product import Product  # noqa: F401
from lpg_orders.models.coupon import Coupon  # noqa: F401
from lpg_orders.models.order import Order  # noqa: F401
from lpg_orders.models.coupon_usage import CouponUsage  # noqa: F401
from lpg_orders.models.order_status_history import OrderStatusHistory  # noqa: F401
