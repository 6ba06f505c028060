import logging

from .models import Table

logger = logging.getLogger(__name__)


class TableService:

    @staticmethod
    def occupy(table: Table):
        if table.status != Table.Status.OCCUPIED:
            table.status = Table.Status.OCCUPIED
            table.save(update_fields=["status"])
            logger.info(f"Table {table.table_number} marked occupied")

    @staticmethod
    def release(table: Table, exclude_order=None):
        """
        Mark the table available unless another open order still sits on it.
        """
        from orders.models import Order

        open_orders = Order.objects.filter(table=table).exclude(
            status__in=[Order.Status.DELIVERED, Order.Status.CANCELLED]
        )
        if exclude_order is not None:
            open_orders = open_orders.exclude(pk=exclude_order.pk)

        if open_orders.exists():
            logger.debug(f"Table {table.table_number} still has open orders, keeping it occupied")
            return

        if table.status == Table.Status.OCCUPIED:
            table.status = Table.Status.AVAILABLE
            table.save(update_fields=["status"])
            logger.info(f"Table {table.table_number} released")
