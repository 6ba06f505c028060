"""
Orders serializers package - read projections and request payloads.
"""

from .order_item_serializers import (
    AddItemSerializer,
    OrderItemInputSerializer,
    OrderItemSerializer,
    UpdateOrderItemSerializer,
    UpdateQuantitySerializer,
)
from .order_serializers import (
    OrderCreateSerializer,
    OrderSerializer,
    OrderUpdateSerializer,
)

__all__ = [
    # Order items
    "AddItemSerializer",
    "OrderItemInputSerializer",
    "OrderItemSerializer",
    "UpdateOrderItemSerializer",
    "UpdateQuantitySerializer",
    # Orders
    "OrderCreateSerializer",
    "OrderSerializer",
    "OrderUpdateSerializer",
]
