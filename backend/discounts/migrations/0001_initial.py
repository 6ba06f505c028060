from decimal import Decimal

import django.core.validators
import django.db.models.deletion
import django.db.models.functions.text
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("customers", "0001_initial"),
        ("products", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Discount",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("code", models.CharField(max_length=50)),
                ("name", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True)),
                (
                    "type",
                    models.CharField(
                        choices=[
                            ("PERCENTAGE", "Percentage"),
                            ("FIXED_AMOUNT", "Fixed Amount"),
                            ("BUY_X_GET_Y", "Buy X Get Y"),
                        ],
                        max_length=20,
                    ),
                ),
                (
                    "value",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0"),
                        max_digits=12,
                        validators=[django.core.validators.MinValueValidator(Decimal("0"))],
                    ),
                ),
                ("min_order_amount", models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ("max_discount_amount", models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ("start_date", models.DateTimeField()),
                ("end_date", models.DateTimeField()),
                ("usage_limit", models.PositiveIntegerField(blank=True, null=True)),
                ("used_count", models.PositiveIntegerField(default=0)),
                ("is_active", models.BooleanField(db_index=True, default=True)),
                ("buy_quantity", models.PositiveIntegerField(blank=True, null=True)),
                ("free_product_quantity", models.PositiveIntegerField(blank=True, null=True)),
                (
                    "free_product_discount_type",
                    models.PositiveSmallIntegerField(
                        choices=[(0, "Free"), (1, "Percentage Off"), (2, "Fixed Amount Off")], default=0
                    ),
                ),
                (
                    "free_product_discount_value",
                    models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "applicable_categories",
                    models.ManyToManyField(blank=True, related_name="discounts", to="products.category"),
                ),
                (
                    "applicable_customer_tiers",
                    models.ManyToManyField(blank=True, related_name="discounts", to="customers.customertier"),
                ),
                (
                    "applicable_products",
                    models.ManyToManyField(blank=True, related_name="discounts", to="products.product"),
                ),
                (
                    "free_product",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="bonus_discounts",
                        to="products.product",
                    ),
                ),
            ],
            options={
                "ordering": ["-start_date"],
                "indexes": [
                    models.Index(
                        fields=["is_active", "start_date", "end_date"], name="discounts_d_is_acti_91c5f0_idx"
                    )
                ],
                "constraints": [
                    models.UniqueConstraint(
                        django.db.models.functions.text.Lower("code"), name="unique_discount_code_ci"
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="DiscountRoleScope",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "role",
                    models.PositiveSmallIntegerField(
                        choices=[(1, "Admin"), (2, "Cashier"), (3, "Warehouse Staff")]
                    ),
                ),
                (
                    "discount",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="role_scopes",
                        to="discounts.discount",
                    ),
                ),
            ],
            options={
                "constraints": [
                    models.UniqueConstraint(fields=("discount", "role"), name="unique_discount_role_scope")
                ],
            },
        ),
    ]
