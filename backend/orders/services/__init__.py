from .calculation_service import OrderCalculationService
from .item_service import OrderItemService
from .order_service import DISCOUNT_REMOVE_SENTINEL, OrderService

__all__ = [
    "DISCOUNT_REMOVE_SENTINEL",
    "OrderCalculationService",
    "OrderItemService",
    "OrderService",
]
