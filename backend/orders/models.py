from decimal import Decimal
import logging

from django.core.validators import MinValueValidator
from django.db import IntegrityError, models, transaction
from django.db.models import Max
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from customers.models import Customer
from discounts.models import Discount
from products.models import Product
from tables.models import Table, TableGroup
from users.models import Employee

logger = logging.getLogger(__name__)


class Order(models.Model):
    class Status(models.TextChoices):
        PENDING = "PENDING", _("Pending")
        CONFIRMED = "CONFIRMED", _("Confirmed")
        PREPARING = "PREPARING", _("Preparing")
        READY = "READY", _("Ready")
        DELIVERED = "DELIVERED", _("Delivered")
        CANCELLED = "CANCELLED", _("Cancelled")

    class OrderType(models.TextChoices):
        DINE_IN = "DINE_IN", _("Dine In")
        TAKEAWAY = "TAKEAWAY", _("Takeaway")
        DELIVERY = "DELIVERY", _("Delivery")

    TERMINAL_STATUSES = (Status.DELIVERED, Status.CANCELLED)

    order_number = models.CharField(max_length=20, unique=True, editable=False)
    status = models.CharField(
        max_length=10, choices=Status.choices, default=Status.PENDING, db_index=True
    )
    order_type = models.CharField(
        max_length=10, choices=OrderType.choices, default=OrderType.DINE_IN
    )

    customer = models.ForeignKey(
        Customer, on_delete=models.PROTECT, related_name="orders"
    )
    employee = models.ForeignKey(
        Employee,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="orders",
    )
    table = models.ForeignKey(
        Table, on_delete=models.SET_NULL, null=True, blank=True, related_name="orders"
    )
    table_group = models.ForeignKey(
        TableGroup,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="orders",
    )
    discount = models.ForeignKey(
        Discount,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="orders",
    )

    # --- Financial Fields ---
    subtotal = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    tax_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    delivery_fee = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    discount_amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        null=True,
        blank=True,
        help_text=_("Monetary discount subtracted from the total. Null when none applies."),
    )
    total_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    notes = models.TextField(blank=True)

    # --- Timestamps ---
    order_date = models.DateTimeField(default=timezone.now, db_index=True)
    confirmed_at = models.DateTimeField(null=True, blank=True)
    prepared_at = models.DateTimeField(null=True, blank=True)
    delivered_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-order_date"]
        indexes = [
            models.Index(fields=["customer", "status"], name="orders_orde_custome_5d2c81_idx"),
            models.Index(fields=["status", "order_date"], name="orders_orde_status_e7a913_idx"),
        ]

    def __str__(self):
        return f"Order {self.order_number} ({self.get_status_display()})"

    @property
    def is_terminal(self):
        return self.status in self.TERMINAL_STATUSES

    def compute_total(self):
        """total = max(0, subtotal + tax + delivery fee - discount)"""
        from .calculators import OrderCalculator

        return OrderCalculator.total(
            self.subtotal, self.tax_amount, self.delivery_fee, self.discount_amount
        )

    def save(self, *args, **kwargs):
        # Generate order_number only if it's not already set
        if not self.order_number:
            max_retries = 5
            for attempt in range(max_retries):
                self.order_number = self._generate_sequential_order_number(offset=attempt)
                try:
                    with transaction.atomic():
                        super().save(*args, **kwargs)
                    break
                except IntegrityError:
                    # Another order took this number; try the next one.
                    logger.warning(f"Order number {self.order_number} already taken, retrying")
                    self.pk = None
                    self._state.adding = True
                    continue
            else:
                self.order_number = ""
                raise IntegrityError(
                    "Failed to generate a unique order number after multiple retries."
                )
        else:
            super().save(*args, **kwargs)

    def _generate_sequential_order_number(self, offset=0):
        """
        PREFIX + YYYYMMDD + 4-digit daily sequence, e.g. ORD202501150007.
        The sequence continues from the highest number issued today, so
        deleted orders never hand out a number still in use; the unique
        constraint plus the retry in save() covers concurrent writers.
        """
        from settings.config import app_settings

        day = timezone.localdate(self.order_date) if self.order_date else timezone.localdate()
        prefix = f"{app_settings.order_number_prefix}{day:%Y%m%d}"
        latest = Order.objects.filter(order_number__startswith=prefix).aggregate(
            latest=Max("order_number")
        )["latest"]

        last_sequence = 0
        if latest:
            try:
                last_sequence = int(latest[len(prefix):])
            except ValueError:
                logger.warning(f"Unexpected order number {latest}, restarting today's sequence")
        return f"{prefix}{last_sequence + 1 + offset:04d}"


class OrderItem(models.Model):
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="items")
    product = models.ForeignKey(
        Product, on_delete=models.PROTECT, related_name="order_items"
    )
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    unit_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        help_text=_("Price per unit at the time the item was added."),
    )
    total_price = models.DecimalField(max_digits=14, decimal_places=2)
    special_instructions = models.CharField(max_length=255, blank=True)

    # Units granted by a Buy X Get Y promotion are kept on their own line.
    is_bonus = models.BooleanField(default=False)
    promotion = models.ForeignKey(
        Discount,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="bonus_items",
    )

    class Meta:
        ordering = ["id"]

    def __str__(self):
        label = " (bonus)" if self.is_bonus else ""
        return f"{self.quantity} x {self.product.name}{label}"

    def recalculate_total(self):
        self.total_price = self.unit_price * self.quantity
        return self.total_price

    def save(self, *args, **kwargs):
        self.recalculate_total()
        super().save(*args, **kwargs)
