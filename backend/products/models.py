from django.core.validators import MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _
from mptt.models import MPTTModel, TreeForeignKey


class Category(MPTTModel):
    name = models.CharField(
        max_length=100, unique=True, help_text=_("Name of the product category.")
    )
    description = models.TextField(
        blank=True, help_text=_("Description of the category.")
    )
    parent = TreeForeignKey(
        "self",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="children",
        help_text=_("Parent category for creating a hierarchy."),
    )
    order = models.IntegerField(
        default=0,
        help_text=_("Display order for this category. Lower numbers appear first."),
    )
    is_active = models.BooleanField(default=True, db_index=True)

    class MPTTMeta:
        order_insertion_by = ["order", "name"]

    class Meta:
        verbose_name = _("Category")
        verbose_name_plural = _("Categories")
        ordering = ["order", "name"]

    def __str__(self):
        return self.name


class Product(models.Model):
    name = models.CharField(max_length=200, help_text=_("Name of the product."))
    description = models.TextField(
        blank=True, help_text=_("Detailed description of the product.")
    )
    price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(0)],
        help_text=_("The selling price of the product."),
    )
    category = models.ForeignKey(
        Category,
        related_name="products",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        help_text=_("Product category."),
    )
    is_active = models.BooleanField(
        default=True,
        db_index=True,
        help_text=_("Inactive products cannot be ordered."),
    )
    is_available = models.BooleanField(
        default=True,
        help_text=_("Temporarily unavailable products (e.g. sold out for the day) cannot be ordered."),
    )
    stock_quantity = models.PositiveIntegerField(
        default=0,
        help_text=_(
            "Direct stock count. Ignored for availability when the product has a recipe."
        ),
    )
    min_stock_level = models.PositiveIntegerField(
        default=0, help_text=_("Low stock warning threshold for the direct stock count.")
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Product")
        verbose_name_plural = _("Products")
        ordering = ["name"]
        indexes = [
            models.Index(fields=["category", "is_active"], name="products_pr_categor_6f3c2a_idx"),
        ]

    def __str__(self):
        return self.name

    @property
    def is_orderable(self):
        return self.is_active and self.is_available
