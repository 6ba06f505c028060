from decimal import Decimal
import logging

from django.db import transaction
from django.utils import timezone

from core_backend.exceptions import InvalidState, NotFound, ValidationError
from customers.models import Customer
from discounts.models import Discount
from discounts.services import DiscountService
from inventory.services import InventoryService
from orders.calculators import OrderCalculator, quantize
from orders.models import Order, OrderItem
from products.models import Product
from settings.config import app_settings
from tables.models import Table, TableGroup
from tables.services import TableService
from users.models import Employee

from .calculation_service import OrderCalculationService

logger = logging.getLogger(__name__)

# Passed as discount_id on update to detach the current discount.
DISCOUNT_REMOVE_SENTINEL = -1


def _get_or_not_found(model, pk, resource):
    try:
        return model.objects.get(pk=pk)
    except (model.DoesNotExist, ValueError, TypeError):
        raise NotFound(resource, pk)


class OrderService:
    """Core service for order lifecycle management - creating, updating, cancelling orders."""

    STATUS_TIMESTAMP_FIELDS = {
        Order.Status.CONFIRMED: "confirmed_at",
        Order.Status.PREPARING: "prepared_at",
        Order.Status.DELIVERED: "delivered_at",
        Order.Status.CANCELLED: "cancelled_at",
    }

    # ------------------------------------------------------------------
    # Line helpers
    # ------------------------------------------------------------------

    @staticmethod
    def build_lines(items):
        """
        Turns `[{"product_id", "quantity", "special_instructions"}, ...]` into
        unsaved OrderItem instances priced at the current product price.
        Raises before anything is written.
        """
        if not items:
            raise ValidationError("An order needs at least one item.")

        product_ids = [item.get("product_id") for item in items]
        products = {
            product.pk: product
            for product in Product.objects.select_for_update()
            .filter(pk__in=[pk for pk in product_ids if pk is not None])
            .prefetch_related("recipe__ingredient")
        }

        lines = []
        for item in items:
            product_id = item.get("product_id")
            quantity = item.get("quantity")

            product = products.get(product_id)
            if product is None:
                raise NotFound("Product", product_id)
            if quantity is None or int(quantity) <= 0:
                raise ValidationError(
                    f"Quantity for '{product.name}' must be greater than zero.",
                    product_id=product.pk,
                )
            if not product.is_orderable:
                raise ValidationError(
                    f"Product '{product.name}' is not available for ordering.",
                    product_id=product.pk,
                )

            line = OrderItem(
                product=product,
                quantity=int(quantity),
                unit_price=product.price,
                special_instructions=item.get("special_instructions") or "",
            )
            line.recalculate_total()
            lines.append(line)

        return lines

    @staticmethod
    def build_bonus_line(resolution):
        bonus = resolution.bonus
        line = OrderItem(
            product=bonus.product,
            quantity=bonus.quantity,
            unit_price=bonus.unit_price,
            special_instructions=bonus.note,
            is_bonus=True,
            promotion=resolution.discount,
        )
        line.recalculate_total()
        return line

    @staticmethod
    def _save_lines(order, lines):
        for line in lines:
            line.order = order
            line.save()

    @staticmethod
    def _drop_bonus_lines(order):
        """Restore and delete the promotion lines currently on the order."""
        bonus_lines = list(
            order.items.filter(is_bonus=True).select_related("product").prefetch_related(
                "product__recipe__ingredient"
            )
        )
        if not bonus_lines:
            return
        InventoryService.restore_order_items(bonus_lines, reference=order.order_number)
        OrderItem.objects.filter(pk__in=[line.pk for line in bonus_lines]).delete()
        logger.info(f"Removed {len(bonus_lines)} bonus line(s) from order {order.order_number}")

    @staticmethod
    def _current_items(order):
        return list(
            order.items.select_related("product").prefetch_related("product__recipe__ingredient")
        )

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    @staticmethod
    @transaction.atomic
    def create_order(
        *,
        customer_id,
        order_type,
        items,
        employee_id=None,
        table_id=None,
        table_group_id=None,
        include_vat=True,
        discount_id=None,
        notes="",
    ) -> Order:
        """
        Validates every reference, line and the discount, then persists the
        order, takes the discount usage slot, occupies the table and deducts
        stock for every final line. Any rejection rolls the whole thing back.
        """
        if order_type not in Order.OrderType.values:
            raise ValidationError(f"'{order_type}' is not a valid order type.")

        customer = _get_or_not_found(Customer, customer_id, "Customer")
        employee = _get_or_not_found(Employee, employee_id, "Employee") if employee_id else None
        table = _get_or_not_found(Table, table_id, "Table") if table_id else None
        table_group = (
            _get_or_not_found(TableGroup, table_group_id, "TableGroup") if table_group_id else None
        )

        lines = OrderService.build_lines(items)
        InventoryService.ensure_lines_available((line.product, line.quantity) for line in lines)

        discount = None
        resolution = None
        if discount_id:
            discount = _get_or_not_found(Discount, discount_id, "Discount")
            resolution = DiscountService.resolve(
                discount, lines, customer=customer, employee=employee
            )
            if resolution.bonus is not None:
                lines.append(OrderService.build_bonus_line(resolution))
                # Paid and bonus units of the same product draw on the same stock.
                InventoryService.ensure_lines_available(
                    (line.product, line.quantity) for line in lines
                )

        order = Order(
            customer=customer,
            employee=employee,
            table=table,
            table_group=table_group,
            order_type=order_type,
            discount=discount,
            notes=notes or "",
        )
        order.subtotal = OrderCalculator.subtotal(lines)
        order.tax_amount = OrderCalculator.tax(order.subtotal, include_vat)
        order.delivery_fee = OrderCalculator.delivery_fee(order_type)
        order.discount_amount = resolution.order_discount_amount if resolution else None
        order.total_amount = order.compute_total()
        order.save()

        OrderService._save_lines(order, lines)

        if resolution is not None and resolution.consumes_usage:
            DiscountService.consume_usage(discount)

        if table is not None:
            TableService.occupy(table)

        InventoryService.deduct_order_items(lines, reference=order.order_number)

        logger.info(
            f"Created order {order.order_number} for customer {customer.pk}: "
            f"{len(lines)} line(s), total={order.total_amount}"
        )
        return order

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    @staticmethod
    def update_order_status(order: Order, new_status: str) -> Order:
        """
        Sets the status and stamps the matching timestamp. Re-entering a
        status stamps it again.
        """
        if new_status not in Order.Status.values:
            raise ValidationError(f"'{new_status}' is not a valid order status.")

        order.status = new_status
        field_name = OrderService.STATUS_TIMESTAMP_FIELDS.get(new_status)
        if field_name:
            setattr(order, field_name, timezone.now())
        return order

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------

    @staticmethod
    @transaction.atomic
    def update_order(
        order: Order,
        *,
        status,
        notes=None,
        employee_id=None,
        table_id=None,
        discount_id=None,
        items=None,
    ) -> Order:
        """
        Applies an order edit in one transaction.

        `items` replaces the whole item list (bonus lines go with it).
        `discount_id` re-resolves the discount against the current lines, or
        detaches it when it is DISCOUNT_REMOVE_SENTINEL; when omitted the total
        is re-derived from the stored discount amount.
        """
        order = Order.objects.select_for_update().get(pk=order.pk)
        if order.is_terminal:
            raise InvalidState(
                f"Order {order.order_number} is {order.get_status_display().lower()} and cannot be modified.",
                order_id=order.pk,
                status=order.status,
            )
        if status not in Order.Status.values:
            raise ValidationError(f"'{status}' is not a valid order status.")

        if notes is not None:
            order.notes = notes
        if employee_id is not None:
            order.employee = _get_or_not_found(Employee, employee_id, "Employee")

        if status == Order.Status.CANCELLED:
            order.save(update_fields=["notes", "employee", "updated_at"])
            return OrderService.cancel_order(order)

        previous_tax = order.tax_amount
        items_replaced = items is not None
        lines_changed = items_replaced

        if items_replaced:
            OrderService._replace_items(order, items)

        if discount_id is not None:
            lines_changed = OrderService._apply_discount_change(order, discount_id) or lines_changed

        if lines_changed:
            current = list(order.items.all())
            order.subtotal = OrderCalculator.subtotal(current)
            if items_replaced:
                order.tax_amount = OrderCalculationService.rederive_tax_after_replacement(
                    previous_tax, order.subtotal
                )
            elif previous_tax > 0:
                order.tax_amount = quantize(order.subtotal * app_settings.tax_rate)

        if table_id is not None and table_id != order.table_id:
            OrderService._transfer_table(order, table_id)

        OrderService.update_order_status(order, status)
        order.total_amount = order.compute_total()
        order.save()

        logger.info(
            f"Updated order {order.order_number}: status={order.status}, "
            f"subtotal={order.subtotal}, discount={order.discount_amount}, total={order.total_amount}"
        )
        return order

    @staticmethod
    def _replace_items(order, items):
        old_items = OrderService._current_items(order)
        InventoryService.restore_order_items(old_items, reference=order.order_number)
        order.items.all().delete()

        # Built and checked after the restore so the old quantities count as available.
        new_lines = OrderService.build_lines(items)
        InventoryService.ensure_lines_available(
            (line.product, line.quantity) for line in new_lines
        )
        OrderService._save_lines(order, new_lines)
        InventoryService.deduct_order_items(new_lines, reference=order.order_number)
        logger.info(
            f"Replaced {len(old_items)} item(s) with {len(new_lines)} on order {order.order_number}"
        )

    @staticmethod
    def _apply_discount_change(order, discount_id) -> bool:
        """
        Returns True when the order's lines changed (bonus lines dropped or added).
        """
        had_bonus = order.items.filter(is_bonus=True).exists()

        if int(discount_id) == DISCOUNT_REMOVE_SENTINEL:
            OrderService._drop_bonus_lines(order)
            if order.discount_id:
                logger.info(f"Discount removed from order {order.order_number}")
            order.discount = None
            order.discount_amount = None
            return had_bonus

        discount = _get_or_not_found(Discount, discount_id, "Discount")
        already_attached = order.discount_id == discount.pk

        # A previous grant is re-evaluated from scratch against the paid lines.
        OrderService._drop_bonus_lines(order)
        paid_lines = OrderService._current_items(order)

        resolution = DiscountService.resolve(
            discount,
            paid_lines,
            customer=order.customer,
            employee=order.employee,
            already_attached=already_attached,
            lenient_category=True,
        )

        added_bonus = False
        if resolution.bonus is not None:
            bonus_line = OrderService.build_bonus_line(resolution)
            OrderService._save_lines(order, [bonus_line])
            InventoryService.deduct(bonus_line.product, bonus_line.quantity, order.order_number)
            added_bonus = True

        if not already_attached and resolution.consumes_usage:
            DiscountService.consume_usage(discount)

        order.discount = discount
        order.discount_amount = resolution.order_discount_amount
        return had_bonus or added_bonus

    @staticmethod
    def _transfer_table(order, table_id):
        new_table = _get_or_not_found(Table, table_id, "Table")
        old_table = order.table

        order.table = new_table
        order.save(update_fields=["table", "updated_at"])

        if old_table is not None:
            TableService.release(old_table, exclude_order=order)
        TableService.occupy(new_table)
        logger.info(
            f"Order {order.order_number} moved from table "
            f"{old_table.table_number if old_table else '-'} to {new_table.table_number}"
        )

    # ------------------------------------------------------------------
    # Cancel / delete
    # ------------------------------------------------------------------

    @staticmethod
    @transaction.atomic
    def cancel_order(order: Order) -> Order:
        order = Order.objects.select_for_update().get(pk=order.pk)
        if order.status == Order.Status.CANCELLED:
            raise InvalidState("Order is already cancelled.", order_id=order.pk)
        if order.status == Order.Status.DELIVERED:
            raise InvalidState("Order is already delivered.", order_id=order.pk)

        items = OrderService._current_items(order)
        InventoryService.restore_order_items(items, reference=order.order_number)

        OrderService.update_order_status(order, Order.Status.CANCELLED)
        order.save(update_fields=["status", "cancelled_at", "updated_at"])

        if order.table is not None:
            TableService.release(order.table, exclude_order=order)

        if order.discount is not None and app_settings.refund_discount_usage_on_cancel:
            consumed = (order.discount_amount or Decimal("0")) > 0 or any(
                item.is_bonus for item in items
            )
            if consumed:
                DiscountService.release_usage(order.discount)

        logger.info(f"Cancelled order {order.order_number}, restored {len(items)} line(s)")
        return order

    @staticmethod
    @transaction.atomic
    def delete_order(order: Order):
        """Only cancelled orders can be deleted; their stock is already back."""
        if order.status != Order.Status.CANCELLED:
            raise InvalidState(
                "Only cancelled orders can be deleted.",
                order_id=order.pk,
                status=order.status,
            )
        logger.info(f"Deleting order {order.order_number}")
        order.delete()
