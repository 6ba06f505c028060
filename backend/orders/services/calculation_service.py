from decimal import Decimal
import logging
import time

from orders.calculators import OrderCalculator, quantize
from settings.config import app_settings

logger = logging.getLogger(__name__)


class OrderCalculationService:
    """Service for recomputing an order's monetary fields from its stored items."""

    @staticmethod
    def recalculate_after_item_change(order):
        """
        Totals after a single-item add/update/remove.

        Tax is the flat rate on the new subtotal and the discount is not
        re-evaluated; the stored discount amount is still subtracted so that
        total = max(0, subtotal + tax + fee - discount) keeps holding.
        """
        from orders.models import Order

        start_time = time.monotonic()

        # Fetch a fresh copy; the caller's instance may hold stale item caches.
        fresh = Order.objects.get(pk=order.pk)
        items = list(fresh.items.all())

        fresh.subtotal = OrderCalculator.subtotal(items)
        fresh.tax_amount = quantize(fresh.subtotal * app_settings.tax_rate)
        fresh.total_amount = fresh.compute_total()
        fresh.save(update_fields=["subtotal", "tax_amount", "total_amount", "updated_at"])

        order.subtotal = fresh.subtotal
        order.tax_amount = fresh.tax_amount
        order.total_amount = fresh.total_amount

        elapsed_ms = (time.monotonic() - start_time) * 1000
        logger.debug(
            f"Recalculated order {fresh.order_number}: subtotal={fresh.subtotal}, "
            f"tax={fresh.tax_amount}, total={fresh.total_amount} ({len(items)} items, {elapsed_ms:.1f}ms)"
        )
        return order

    @staticmethod
    def rederive_tax_after_replacement(previous_tax: Decimal, new_subtotal: Decimal) -> Decimal:
        """
        Tax after a whole-item-list replacement: re-derived at the flat rate
        when the order already carried tax or the new subtotal is non-zero,
        otherwise left at zero.
        """
        if previous_tax > 0 or new_subtotal > 0:
            return quantize(new_subtotal * app_settings.tax_rate)
        return Decimal("0.00")
