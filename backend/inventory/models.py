from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _

from products.models import Product


class Ingredient(models.Model):
    """
    A raw material tracked by on-hand quantity. Products with a recipe draw
    their availability from these rows instead of their own stock count.
    """

    name = models.CharField(max_length=200, unique=True)
    unit = models.CharField(
        max_length=50,
        help_text=_("Unit of measure, e.g., 'g', 'ml', 'slice', 'each'."),
    )
    quantity = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        default=Decimal("0"),
        validators=[MinValueValidator(Decimal("0"))],
        help_text=_("Quantity currently on hand."),
    )
    min_quantity = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        default=Decimal("0"),
        help_text=_("Low stock warning threshold."),
    )
    price_per_unit = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0")
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Ingredient")
        verbose_name_plural = _("Ingredients")
        ordering = ["name"]

    def __str__(self):
        return f"{self.name} ({self.quantity} {self.unit})"

    @property
    def is_low_stock(self):
        return self.quantity <= self.min_quantity


class ProductIngredient(models.Model):
    """
    One line of a product's recipe: how much of an ingredient a single unit
    of the product consumes.
    """

    product = models.ForeignKey(
        Product, on_delete=models.CASCADE, related_name="recipe"
    )
    ingredient = models.ForeignKey(
        Ingredient, on_delete=models.PROTECT, related_name="used_in"
    )
    quantity_required = models.DecimalField(
        max_digits=10,
        decimal_places=3,
        help_text=_("Quantity of the ingredient needed per unit of product. Entries <= 0 are ignored."),
    )

    class Meta:
        verbose_name = _("Product Ingredient")
        verbose_name_plural = _("Product Ingredients")
        constraints = [
            models.UniqueConstraint(
                fields=["product", "ingredient"], name="unique_product_ingredient"
            ),
        ]

    def __str__(self):
        return f"{self.quantity_required} {self.ingredient.unit} of {self.ingredient.name} for {self.product.name}"


class StockMovement(models.Model):
    """
    Audit trail of every stock change made by the ledger.
    Exactly one of `ingredient` / `product` is set.
    """

    class Operation(models.TextChoices):
        ORDER_DEDUCTION = "ORDER_DEDUCTION", _("Order Deduction")
        ORDER_RESTORATION = "ORDER_RESTORATION", _("Order Restoration")
        MANUAL_ADJUSTMENT = "MANUAL_ADJUSTMENT", _("Manual Adjustment")

    ingredient = models.ForeignKey(
        Ingredient,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="movements",
    )
    product = models.ForeignKey(
        Product,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="stock_movements",
    )
    operation = models.CharField(max_length=20, choices=Operation.choices)
    quantity_change = models.DecimalField(max_digits=12, decimal_places=3)
    previous_quantity = models.DecimalField(max_digits=12, decimal_places=3)
    new_quantity = models.DecimalField(max_digits=12, decimal_places=3)
    reference = models.CharField(max_length=100, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["operation", "created_at"], name="inventory_s_operati_2b8d1e_idx"),
        ]

    def __str__(self):
        target = self.ingredient or self.product
        return f"{self.get_operation_display()} {self.quantity_change} of {target}"
