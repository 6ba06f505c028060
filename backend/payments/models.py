from decimal import Decimal
import logging
import secrets

from django.core.validators import MinValueValidator
from django.db import IntegrityError, models, transaction
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from orders.models import Order

logger = logging.getLogger(__name__)


class Payment(models.Model):
    """
    One payment recorded against an order. An order may be settled by
    several payments; only COMPLETED ones count towards what has been paid.
    """

    class Method(models.TextChoices):
        CASH = "CASH", _("Cash")
        CREDIT_CARD = "CREDIT_CARD", _("Credit Card")
        DEBIT_CARD = "DEBIT_CARD", _("Debit Card")
        MOBILE_PAYMENT = "MOBILE_PAYMENT", _("Mobile Payment")
        BANK_TRANSFER = "BANK_TRANSFER", _("Bank Transfer")

    class Status(models.TextChoices):
        PENDING = "PENDING", _("Pending")
        COMPLETED = "COMPLETED", _("Completed")
        FAILED = "FAILED", _("Failed")
        REFUNDED = "REFUNDED", _("Refunded")
        CANCELLED = "CANCELLED", _("Cancelled")

    transaction_id = models.CharField(max_length=50, unique=True, editable=False)
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="payments")
    method = models.CharField(max_length=20, choices=Method.choices)
    status = models.CharField(
        max_length=10, choices=Status.choices, default=Status.PENDING, db_index=True
    )
    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    reference_number = models.CharField(
        max_length=100, blank=True, help_text=_("Card slip, transfer or wallet reference.")
    )
    notes = models.CharField(max_length=500, blank=True)

    payment_date = models.DateTimeField(default=timezone.now)
    completed_at = models.DateTimeField(null=True, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-payment_date"]
        verbose_name = _("Payment")
        verbose_name_plural = _("Payments")
        indexes = [
            models.Index(fields=["order", "status"], name="payment_order_status_idx"),
            models.Index(fields=["payment_date"], name="payment_date_idx"),
        ]

    def __str__(self):
        return f"Payment {self.transaction_id} for Order {self.order.order_number} - {self.status}"

    def save(self, *args, **kwargs):
        if not self.transaction_id:
            max_retries = 5
            for _attempt in range(max_retries):
                self.transaction_id = self._generate_transaction_id()
                try:
                    with transaction.atomic():
                        super().save(*args, **kwargs)
                    break
                except IntegrityError:
                    logger.warning(f"Transaction id {self.transaction_id} already taken, retrying")
                    self.pk = None
                    self._state.adding = True
                    continue
            else:
                self.transaction_id = ""
                raise IntegrityError(
                    "Failed to generate a unique transaction id after multiple retries."
                )
        else:
            super().save(*args, **kwargs)

    def _generate_transaction_id(self):
        """'TXN' + local timestamp to the second + 4 random digits, e.g. TXN202501151230454821."""
        stamp = timezone.localtime(self.payment_date or timezone.now())
        return f"TXN{stamp:%Y%m%d%H%M%S}{secrets.randbelow(9000) + 1000}"
