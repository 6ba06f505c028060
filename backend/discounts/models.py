from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models.functions import Lower

from customers.models import CustomerTier
from products.models import Category, Product
from users.models import Employee


class Discount(models.Model):
    class DiscountType(models.TextChoices):
        PERCENTAGE = "PERCENTAGE", "Percentage"
        FIXED_AMOUNT = "FIXED_AMOUNT", "Fixed Amount"
        BUY_X_GET_Y = "BUY_X_GET_Y", "Buy X Get Y"

    class FreeProductDiscountType(models.IntegerChoices):
        FREE = 0, "Free"
        PERCENTAGE = 1, "Percentage Off"
        FIXED_AMOUNT = 2, "Fixed Amount Off"

    code = models.CharField(
        max_length=50, help_text="Code entered at the POS. Unique, case-insensitive."
    )
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    type = models.CharField(max_length=20, choices=DiscountType.choices)
    value = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0"),
        validators=[MinValueValidator(Decimal("0"))],
        help_text="Percentage (0-100) or fixed amount. Not used for Buy X Get Y.",
    )
    min_order_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        help_text="Minimum order subtotal (whole order, not just scoped items).",
    )
    max_discount_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        help_text="Cap for percentage discounts.",
    )
    start_date = models.DateTimeField()
    end_date = models.DateTimeField()
    usage_limit = models.PositiveIntegerField(null=True, blank=True)
    used_count = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True, db_index=True)

    # Scoping: an empty set means "applies to all".
    applicable_products = models.ManyToManyField(
        Product, blank=True, related_name="discounts"
    )
    applicable_categories = models.ManyToManyField(
        Category, blank=True, related_name="discounts"
    )
    applicable_customer_tiers = models.ManyToManyField(
        CustomerTier, blank=True, related_name="discounts"
    )

    # Buy X Get Y
    buy_quantity = models.PositiveIntegerField(
        null=True,
        blank=True,
        help_text="Quantity of scoped items the customer must buy (X).",
    )
    free_product = models.ForeignKey(
        Product,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="bonus_discounts",
        help_text="Product granted once the buy quantity is reached (Y).",
    )
    free_product_quantity = models.PositiveIntegerField(
        null=True,
        blank=True,
        help_text="Units of the free product granted per multiple of the buy quantity. Defaults to 1.",
    )
    free_product_discount_type = models.PositiveSmallIntegerField(
        choices=FreeProductDiscountType.choices, default=FreeProductDiscountType.FREE
    )
    free_product_discount_value = models.DecimalField(
        max_digits=12, decimal_places=2, null=True, blank=True
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-start_date"]
        constraints = [
            models.UniqueConstraint(Lower("code"), name="unique_discount_code_ci"),
        ]
        indexes = [
            models.Index(fields=["is_active", "start_date", "end_date"], name="discounts_d_is_acti_91c5f0_idx"),
        ]

    def __str__(self):
        return f"{self.name} [{self.code}] ({self.get_type_display()})"

    @property
    def applicable_role_ids(self):
        return {scope.role for scope in self.role_scopes.all()}

    @property
    def has_usage_left(self):
        return self.usage_limit is None or self.used_count < self.usage_limit

    def clean(self):
        super().clean()

        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValidationError({"end_date": "End date must be after start date."})

        if self.type == self.DiscountType.BUY_X_GET_Y:
            errors = {}
            if not self.buy_quantity:
                errors["buy_quantity"] = "Buy quantity is required for Buy X Get Y discounts."
            if not self.free_product_id:
                errors["free_product"] = "Free product is required for Buy X Get Y discounts."
            if (
                self.free_product_discount_type == self.FreeProductDiscountType.PERCENTAGE
                and self.free_product_discount_value is not None
                and self.free_product_discount_value > 100
            ):
                errors["free_product_discount_value"] = "Percentage cannot exceed 100%."
            if errors:
                raise ValidationError(errors)
            return

        if self.value is None or self.value <= 0:
            raise ValidationError({"value": "Discount value must be greater than zero."})

        if self.type == self.DiscountType.PERCENTAGE and self.value > 100:
            raise ValidationError({"value": "Percentage discount cannot exceed 100%."})


class DiscountRoleScope(models.Model):
    """
    Restricts a discount to orders taken by employees with a given role.
    No rows for a discount means every role may apply it.
    """

    discount = models.ForeignKey(
        Discount, on_delete=models.CASCADE, related_name="role_scopes"
    )
    role = models.PositiveSmallIntegerField(choices=Employee.Role.choices)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["discount", "role"], name="unique_discount_role_scope"
            ),
        ]

    def __str__(self):
        return f"{self.discount.code}: {self.get_role_display()}"
