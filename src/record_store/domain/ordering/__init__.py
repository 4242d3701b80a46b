"""
Ordering Context - Placing orders against catalog stock.

This bounded context is responsible for:
- Validating requested lines against current stock
- Snapshotting prices and computing totals
- Decrementing stock atomically and recording orders
"""

from .entities import Order, OrderLine, OrderLineRequest, OrderStatus
from .repositories import OrderRepository
from .services import OrderFulfillmentService

__all__ = [
    "Order",
    "OrderLine",
    "OrderLineRequest",
    "OrderStatus",
    "OrderRepository",
    "OrderFulfillmentService",
]
