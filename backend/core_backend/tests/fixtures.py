"""
Shared test fixtures for all backend tests.

This module provides reusable pytest fixtures for common test objects
like products with recipes, customers, tiers, employees, tables and discounts.
"""
import pytest
from decimal import Decimal
from django.utils import timezone
from datetime import timedelta

from customers.models import Customer, CustomerTier
from discounts.models import Discount, DiscountRoleScope
from inventory.models import Ingredient, ProductIngredient
from products.models import Category, Product
from settings.models import GlobalSettings
from tables.models import Table, TableGroup
from users.models import Employee


# ============================================================================
# SETTINGS FIXTURES
# ============================================================================

@pytest.fixture
def global_settings(db):
    """The singleton settings row with the default 10% tax and 20000 delivery fee."""
    settings_obj, _ = GlobalSettings.objects.get_or_create(pk=1)
    settings_obj.tax_rate = Decimal("0.10")
    settings_obj.delivery_fee = Decimal("20000")
    settings_obj.refund_discount_usage_on_cancel = False
    settings_obj.save()
    return settings_obj


# ============================================================================
# CATALOG FIXTURES
# ============================================================================

@pytest.fixture
def category_food(db):
    return Category.objects.create(name="Food", order=1)


@pytest.fixture
def category_drinks(db):
    return Category.objects.create(name="Drinks", order=2)


@pytest.fixture
def burger(category_food):
    """Recipe-tracked product: 1 bun + 2 patties per burger."""
    return Product.objects.create(
        name="Burger",
        price=Decimal("50000"),
        category=category_food,
        stock_quantity=0,
    )


@pytest.fixture
def bun(db):
    return Ingredient.objects.create(name="Bun", unit="each", quantity=Decimal("10"))


@pytest.fixture
def patty(db):
    return Ingredient.objects.create(name="Patty", unit="each", quantity=Decimal("5"))


@pytest.fixture
def burger_recipe(burger, bun, patty):
    """With 10 buns and 5 patties, 2 burgers can be made."""
    return [
        ProductIngredient.objects.create(product=burger, ingredient=bun, quantity_required=Decimal("1")),
        ProductIngredient.objects.create(product=burger, ingredient=patty, quantity_required=Decimal("2")),
    ]


@pytest.fixture
def fries(category_food):
    """Stock-tracked product (no recipe)."""
    return Product.objects.create(
        name="Fries",
        price=Decimal("20000"),
        category=category_food,
        stock_quantity=20,
    )


@pytest.fixture
def cola(category_drinks):
    return Product.objects.create(
        name="Cola",
        price=Decimal("15000"),
        category=category_drinks,
        stock_quantity=5,
    )


# ============================================================================
# PEOPLE FIXTURES
# ============================================================================

@pytest.fixture
def customer(db):
    return Customer.objects.create(name="Nguyen Van A", phone="0900000001")


@pytest.fixture
def other_customer(db):
    return Customer.objects.create(name="Tran Thi B", phone="0900000002")


@pytest.fixture
def tier_silver(db):
    return CustomerTier.objects.create(name="Silver", minimum_spent=Decimal("100000"), display_order=1)


@pytest.fixture
def tier_gold(db):
    return CustomerTier.objects.create(name="Gold", minimum_spent=Decimal("500000"), display_order=2)


@pytest.fixture
def cashier(db):
    return Employee.objects.create(name="Cashier One", email="cashier@example.com", role=Employee.Role.CASHIER)


@pytest.fixture
def admin_employee(db):
    return Employee.objects.create(name="Admin One", email="admin@example.com", role=Employee.Role.ADMIN)


# ============================================================================
# TABLE FIXTURES
# ============================================================================

@pytest.fixture
def table_1(db):
    return Table.objects.create(table_number="T1", capacity=4)


@pytest.fixture
def table_2(db):
    return Table.objects.create(table_number="T2", capacity=2)


@pytest.fixture
def table_group(table_1, table_2):
    group = TableGroup.objects.create(name="Party of six")
    group.tables.set([table_1, table_2])
    return group


# ============================================================================
# DISCOUNT FIXTURES
# ============================================================================

def make_discount(**overrides):
    """Build an active discount valid from yesterday to next week."""
    now = timezone.now()
    values = {
        "code": "SAVE10",
        "name": "Save 10 percent",
        "type": Discount.DiscountType.PERCENTAGE,
        "value": Decimal("10"),
        "start_date": now - timedelta(days=1),
        "end_date": now + timedelta(days=7),
    }
    values.update(overrides)
    return Discount.objects.create(**values)


@pytest.fixture
def percentage_discount(db):
    return make_discount()


@pytest.fixture
def fixed_discount(db):
    return make_discount(
        code="MINUS30K",
        name="30k off",
        type=Discount.DiscountType.FIXED_AMOUNT,
        value=Decimal("30000"),
    )


@pytest.fixture
def buy_two_get_one_cola(cola):
    """Buy 2 scoped items, get 1 cola free."""
    return make_discount(
        code="B2G1COLA",
        name="Combo Cola",
        type=Discount.DiscountType.BUY_X_GET_Y,
        value=Decimal("0"),
        buy_quantity=2,
        free_product=cola,
        free_product_quantity=1,
        free_product_discount_type=Discount.FreeProductDiscountType.FREE,
    )


def scope_roles(discount, *roles):
    for role in roles:
        DiscountRoleScope.objects.create(discount=discount, role=role)
    return discount
