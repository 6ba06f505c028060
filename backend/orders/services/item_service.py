import logging

from django.db import transaction

from core_backend.exceptions import DuplicateItem, InvalidState, NotFound, ValidationError
from inventory.services import InventoryService
from orders.models import Order, OrderItem
from products.models import Product

from .calculation_service import OrderCalculationService

logger = logging.getLogger(__name__)


class OrderItemService:
    """
    Single line-item edits on an existing order. Each edit adjusts stock by the
    difference and then recomputes the order's totals without re-evaluating
    its discount.
    """

    @staticmethod
    def _ensure_mutable(order: Order) -> Order:
        locked = Order.objects.select_for_update().get(pk=order.pk)
        if locked.is_terminal:
            raise InvalidState(
                f"Order {locked.order_number} is {locked.get_status_display().lower()} and its items cannot be changed.",
                order_id=locked.pk,
                status=locked.status,
            )
        return locked

    @staticmethod
    def _validate_quantity(quantity):
        if quantity is None or int(quantity) <= 0:
            raise ValidationError("Quantity must be greater than zero.")
        return int(quantity)

    @staticmethod
    @transaction.atomic
    def add_item(order: Order, product_id, quantity, special_instructions="") -> OrderItem:
        order = OrderItemService._ensure_mutable(order)
        quantity = OrderItemService._validate_quantity(quantity)

        try:
            product = Product.objects.prefetch_related("recipe__ingredient").get(pk=product_id)
        except (Product.DoesNotExist, ValueError, TypeError):
            raise NotFound("Product", product_id)

        if not product.is_orderable:
            raise ValidationError(
                f"Product '{product.name}' is not available for ordering.",
                product_id=product.pk,
            )

        if order.items.filter(product=product, is_bonus=False).exists():
            raise DuplicateItem(
                f"'{product.name}' is already on order {order.order_number}; update its quantity instead.",
                product_id=product.pk,
            )

        InventoryService.check_availability(product, quantity)

        item = OrderItem.objects.create(
            order=order,
            product=product,
            quantity=quantity,
            unit_price=product.price,
            special_instructions=special_instructions or "",
        )
        InventoryService.deduct(product, quantity, reference=order.order_number)
        OrderCalculationService.recalculate_after_item_change(order)

        logger.info(f"Added {quantity} x {product.name} to order {order.order_number}")
        return item

    @staticmethod
    def _change_quantity(item: OrderItem, new_quantity: int, reference: str):
        current_quantity = item.quantity
        if new_quantity > current_quantity:
            additional = new_quantity - current_quantity
            InventoryService.check_availability(item.product, additional)
            InventoryService.deduct(item.product, additional, reference=reference)
        elif new_quantity < current_quantity:
            InventoryService.restore(item.product, current_quantity - new_quantity, reference=reference)
        item.quantity = new_quantity

    @staticmethod
    @transaction.atomic
    def update_item(item: OrderItem, quantity=None, special_instructions=None) -> OrderItem:
        order = OrderItemService._ensure_mutable(item.order)

        if quantity is not None:
            quantity = OrderItemService._validate_quantity(quantity)
            if quantity != item.quantity:
                OrderItemService._change_quantity(item, quantity, order.order_number)

        if special_instructions is not None:
            item.special_instructions = special_instructions

        item.save()
        OrderCalculationService.recalculate_after_item_change(order)
        logger.info(f"Updated item {item.pk} on order {order.order_number}: quantity={item.quantity}")
        return item

    @staticmethod
    @transaction.atomic
    def update_item_quantity(item: OrderItem, quantity) -> OrderItem:
        order = OrderItemService._ensure_mutable(item.order)
        quantity = OrderItemService._validate_quantity(quantity)

        if quantity == item.quantity:
            return item

        OrderItemService._change_quantity(item, quantity, order.order_number)
        item.save()
        OrderCalculationService.recalculate_after_item_change(order)
        logger.info(f"Item {item.pk} on order {order.order_number} now x{quantity}")
        return item

    @staticmethod
    @transaction.atomic
    def remove_item(item: OrderItem):
        order = OrderItemService._ensure_mutable(item.order)

        InventoryService.restore(item.product, item.quantity, reference=order.order_number)
        item.delete()
        OrderCalculationService.recalculate_after_item_change(order)
        logger.info(f"Removed {item.product.name} from order {order.order_number}")
