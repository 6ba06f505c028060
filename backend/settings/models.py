from decimal import Decimal

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models


class GlobalSettings(models.Model):
    """
    Store-wide business settings. A single row (pk=1) is used; access it
    through `settings.config.app_settings` rather than querying directly.
    """

    tax_rate = models.DecimalField(
        max_digits=5,
        decimal_places=4,
        default=Decimal("0.10"),
        validators=[MinValueValidator(Decimal("0")), MaxValueValidator(Decimal("1"))],
        help_text="VAT rate applied to order subtotals (0.10 = 10%).",
    )
    delivery_fee = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("20000"),
        validators=[MinValueValidator(Decimal("0"))],
        help_text="Flat fee added to delivery orders.",
    )
    currency = models.CharField(max_length=3, default="VND")
    order_number_prefix = models.CharField(max_length=10, default="ORD")
    refund_discount_usage_on_cancel = models.BooleanField(
        default=False,
        help_text=(
            "When enabled, cancelling an order gives its discount usage back "
            "(used_count is decremented)."
        ),
    )
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Global Settings"
        verbose_name_plural = "Global Settings"

    def save(self, *args, **kwargs):
        self.pk = 1
        super().save(*args, **kwargs)

    def __str__(self):
        return f"Global Settings (tax {self.tax_rate}, delivery fee {self.delivery_fee})"
