from decimal import Decimal

from django.core.validators import MinValueValidator, RegexValidator
from django.db import models


class CustomerTier(models.Model):
    """
    A loyalty level unlocked once a customer's cumulative spend reaches
    `minimum_spent`. Discounts can be restricted to specific tiers.
    """

    name = models.CharField(max_length=100, unique=True)
    minimum_spent = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal("0"),
        validators=[MinValueValidator(Decimal("0"))],
        help_text="Cumulative spend (non-cancelled orders) needed to reach this tier.",
    )
    color_hex = models.CharField(
        max_length=7,
        default="#6c757d",
        validators=[RegexValidator(r"^#[0-9A-Fa-f]{6}$", "Enter a color like #AABBCC.")],
    )
    description = models.TextField(blank=True)
    display_order = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["display_order", "minimum_spent"]

    def __str__(self):
        return f"{self.name} (from {self.minimum_spent})"


class Customer(models.Model):
    name = models.CharField(max_length=200)
    phone = models.CharField(max_length=20, unique=True, null=True, blank=True)
    email = models.EmailField(blank=True)
    address = models.CharField(max_length=255, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["phone"], name="customers_c_phone_4a7e0b_idx"),
        ]

    def __str__(self):
        return self.name
