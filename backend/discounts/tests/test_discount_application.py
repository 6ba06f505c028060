"""
Discount Resolver Tests

Validation order, scoping, tier / role restrictions, amount strategies and
Buy X Get Y grants, plus usage counting.
"""
import pytest
from decimal import Decimal
from datetime import timedelta
from django.utils import timezone

from core_backend.exceptions import (
    DiscountRejected,
    DiscountRejectionReason,
    InsufficientStock,
)
from core_backend.tests.fixtures import make_discount, scope_roles
from discounts.models import Discount
from discounts.services import (
    DiscountScopingService,
    DiscountService,
    DiscountValidationService,
)
from orders.models import Order, OrderItem
from users.models import Employee


def line(product, quantity, is_bonus=False):
    item = OrderItem(product=product, quantity=quantity, unit_price=product.price, is_bonus=is_bonus)
    item.recalculate_total()
    return item


@pytest.mark.django_db
class TestValidationOrder:
    """Checks run inactive -> not started -> expired -> usage exhausted"""

    def test_inactive_reported_before_expiry(self):
        now = timezone.now()
        discount = make_discount(
            is_active=False,
            start_date=now - timedelta(days=10),
            end_date=now - timedelta(days=5),
        )

        with pytest.raises(DiscountRejected) as exc_info:
            DiscountValidationService.validate(discount)
        assert exc_info.value.reason == DiscountRejectionReason.INACTIVE

    def test_not_started(self):
        now = timezone.now()
        discount = make_discount(start_date=now + timedelta(days=1), end_date=now + timedelta(days=2))

        with pytest.raises(DiscountRejected) as exc_info:
            DiscountValidationService.validate(discount)
        assert exc_info.value.reason == DiscountRejectionReason.NOT_STARTED

    def test_expired(self):
        now = timezone.now()
        discount = make_discount(start_date=now - timedelta(days=3), end_date=now - timedelta(days=1))

        with pytest.raises(DiscountRejected) as exc_info:
            DiscountValidationService.validate(discount)
        assert exc_info.value.reason == DiscountRejectionReason.EXPIRED

    def test_usage_exhausted(self):
        discount = make_discount(usage_limit=2, used_count=2)

        with pytest.raises(DiscountRejected) as exc_info:
            DiscountValidationService.validate(discount)
        assert exc_info.value.reason == DiscountRejectionReason.USAGE_EXHAUSTED

    def test_usage_check_skipped_when_already_attached(self):
        discount = make_discount(usage_limit=2, used_count=2)

        DiscountValidationService.validate(discount, already_attached=True)

    def test_code_lookup_is_case_insensitive(self, percentage_discount):
        assert DiscountValidationService.validate_code("save10") == percentage_discount


@pytest.mark.django_db
class TestScoping:
    """DetermineApplicableLineItems"""

    def test_unscoped_discount_applies_to_every_line(self, percentage_discount, fries, cola):
        lines = [line(fries, 2), line(cola, 1)]

        applicable, subtotal = DiscountScopingService.determine_applicable_lines(percentage_discount, lines)

        assert applicable == lines
        assert subtotal == Decimal("55000")

    def test_product_and_category_scopes_union(self, percentage_discount, burger, fries, cola, category_drinks):
        percentage_discount.applicable_products.set([burger])
        percentage_discount.applicable_categories.set([category_drinks])
        lines = [line(burger, 1), line(fries, 1), line(cola, 2)]

        applicable, subtotal = DiscountScopingService.determine_applicable_lines(percentage_discount, lines)

        assert [item.product for item in applicable] == [burger, cola]
        assert subtotal == Decimal("80000")

    def test_product_scope_without_match_rejects(self, percentage_discount, burger, fries):
        percentage_discount.applicable_products.set([burger])

        with pytest.raises(DiscountRejected) as exc_info:
            DiscountScopingService.determine_applicable_lines(percentage_discount, [line(fries, 1)])
        assert exc_info.value.reason == DiscountRejectionReason.SCOPE_PRODUCT

    def test_category_scope_without_match_rejects(self, percentage_discount, category_drinks, fries):
        percentage_discount.applicable_categories.set([category_drinks])

        with pytest.raises(DiscountRejected) as exc_info:
            DiscountScopingService.determine_applicable_lines(percentage_discount, [line(fries, 1)])
        assert exc_info.value.reason == DiscountRejectionReason.SCOPE_CATEGORY

    def test_lenient_category_accepts_product_match(self, percentage_discount, category_drinks, fries):
        percentage_discount.applicable_products.set([fries])
        percentage_discount.applicable_categories.set([category_drinks])
        lines = [line(fries, 1)]

        with pytest.raises(DiscountRejected):
            DiscountScopingService.determine_applicable_lines(percentage_discount, lines)

        applicable, subtotal = DiscountScopingService.determine_applicable_lines(
            percentage_discount, lines, lenient_category=True
        )
        assert subtotal == Decimal("20000")

    def test_scoping_is_idempotent(self, percentage_discount, fries, cola, category_drinks):
        percentage_discount.applicable_categories.set([category_drinks])
        lines = [line(fries, 3), line(cola, 2)]

        first = DiscountScopingService.determine_applicable_lines(percentage_discount, lines)
        second = DiscountScopingService.determine_applicable_lines(percentage_discount, lines)

        assert first == second

    def test_bonus_lines_are_never_applicable(self, percentage_discount, fries, cola):
        lines = [line(fries, 1), line(cola, 1, is_bonus=True)]

        applicable, subtotal = DiscountScopingService.determine_applicable_lines(percentage_discount, lines)

        assert applicable == lines[:1]
        assert subtotal == Decimal("20000")


@pytest.mark.django_db
class TestAmounts:
    """ComputeAmount for percentage and fixed discounts"""

    def test_percentage_of_scoped_subtotal(self, category_food):
        from products.models import Product

        meal = Product.objects.create(name="Meal", price=Decimal("50000"), category=category_food, stock_quantity=10)
        discount = make_discount(code="TWENTY", value=Decimal("20"))

        resolution = DiscountService.resolve(discount, [line(meal, 2)])

        assert resolution.amount == Decimal("20000.00")
        assert resolution.order_discount_amount == Decimal("20000.00")
        assert resolution.consumes_usage

    def test_percentage_capped_by_max_amount(self, category_food):
        from products.models import Product

        meal = Product.objects.create(name="Meal", price=Decimal("50000"), category=category_food, stock_quantity=10)
        discount = make_discount(code="HALF", value=Decimal("50"), max_discount_amount=Decimal("15000"))

        resolution = DiscountService.resolve(discount, [line(meal, 2)])

        assert resolution.amount == Decimal("15000.00")

    def test_fixed_amount_limited_to_applicable_subtotal(self, fries, cola):
        discount = make_discount(
            code="BIGFIX",
            type=Discount.DiscountType.FIXED_AMOUNT,
            value=Decimal("50000"),
        )
        discount.applicable_products.set([cola])

        resolution = DiscountService.resolve(discount, [line(cola, 1), line(fries, 3)])

        assert resolution.applicable_subtotal == Decimal("15000")
        assert resolution.amount == Decimal("15000.00")

    def test_minimum_uses_full_subtotal(self, fries, cola):
        discount = make_discount(code="MIN50", min_order_amount=Decimal("50000"))
        discount.applicable_products.set([cola])

        resolution = DiscountService.resolve(discount, [line(cola, 1), line(fries, 2)])

        # 55000 full subtotal clears the minimum; 10% of the 15000 cola line applies.
        assert resolution.amount == Decimal("1500.00")

    def test_below_minimum_rejected(self, fries):
        discount = make_discount(code="MIN50", min_order_amount=Decimal("50000"))

        with pytest.raises(DiscountRejected) as exc_info:
            DiscountService.resolve(discount, [line(fries, 2)])
        assert exc_info.value.reason == DiscountRejectionReason.BELOW_MINIMUM


@pytest.mark.django_db
class TestTierAndRoleScoping:

    def test_tier_scoped_discount_requires_matching_tier(self, customer, fries, tier_silver, tier_gold):
        discount = make_discount(code="GOLDONLY")
        discount.applicable_customer_tiers.set([tier_gold])
        Order.objects.create(customer=customer, total_amount=Decimal("150000"))

        with pytest.raises(DiscountRejected) as exc_info:
            DiscountService.resolve(discount, [line(fries, 1)], customer=customer)
        assert exc_info.value.reason == DiscountRejectionReason.SCOPE_TIER

        Order.objects.create(customer=customer, total_amount=Decimal("400000"))
        resolution = DiscountService.resolve(discount, [line(fries, 1)], customer=customer)
        assert resolution.amount == Decimal("2000.00")

    def test_customer_without_tier_rejected(self, customer, fries, tier_silver):
        discount = make_discount(code="SILVER")
        discount.applicable_customer_tiers.set([tier_silver])

        with pytest.raises(DiscountRejected) as exc_info:
            DiscountService.resolve(discount, [line(fries, 1)], customer=customer)
        assert exc_info.value.reason == DiscountRejectionReason.SCOPE_TIER

    def test_cancelled_orders_do_not_count_towards_tier(self, customer, fries, tier_silver):
        discount = make_discount(code="SILVER")
        discount.applicable_customer_tiers.set([tier_silver])
        Order.objects.create(customer=customer, total_amount=Decimal("200000"), status=Order.Status.CANCELLED)

        with pytest.raises(DiscountRejected):
            DiscountService.resolve(discount, [line(fries, 1)], customer=customer)

    def test_role_scoping(self, fries, cashier, admin_employee):
        discount = scope_roles(make_discount(code="STAFF"), Employee.Role.ADMIN)

        with pytest.raises(DiscountRejected) as exc_info:
            DiscountService.resolve(discount, [line(fries, 1)], employee=cashier)
        assert exc_info.value.reason == DiscountRejectionReason.SCOPE_ROLE

        DiscountService.resolve(discount, [line(fries, 1)], employee=admin_employee)

    def test_no_employee_bypasses_role_scoping(self, fries):
        discount = scope_roles(make_discount(code="STAFF"), Employee.Role.ADMIN)

        resolution = DiscountService.resolve(discount, [line(fries, 1)])
        assert resolution.amount == Decimal("2000.00")


@pytest.mark.django_db
class TestBuyXGetY:

    def test_free_units_for_each_full_group(self, buy_two_get_one_cola, fries):
        buy_two_get_one_cola.applicable_products.set([fries])

        resolution = DiscountService.resolve(buy_two_get_one_cola, [line(fries, 5)])

        bonus = resolution.bonus
        assert bonus.product.name == "Cola"
        assert bonus.quantity == 2
        assert bonus.unit_price == Decimal("0.00")
        assert bonus.note == "Bonus from promotion: Combo Cola"
        assert resolution.amount == Decimal("30000.00")
        # The reduction lives in the bonus line price.
        assert resolution.order_discount_amount is None
        assert resolution.consumes_usage

    def test_below_threshold_grants_nothing(self, buy_two_get_one_cola, fries):
        resolution = DiscountService.resolve(buy_two_get_one_cola, [line(fries, 1)])

        assert resolution.bonus is None
        assert resolution.amount == Decimal("0.00")
        assert not resolution.consumes_usage

    def test_category_scope_counts_category_lines(self, buy_two_get_one_cola, fries, burger, category_food, cola):
        buy_two_get_one_cola.applicable_categories.set([category_food])

        resolution = DiscountService.resolve(buy_two_get_one_cola, [line(fries, 1), line(burger, 1), line(cola, 3)])

        assert resolution.bonus.quantity == 1

    def test_percentage_off_free_product(self, buy_two_get_one_cola, fries):
        buy_two_get_one_cola.free_product_discount_type = Discount.FreeProductDiscountType.PERCENTAGE
        buy_two_get_one_cola.free_product_discount_value = Decimal("50")
        buy_two_get_one_cola.save()

        resolution = DiscountService.resolve(buy_two_get_one_cola, [line(fries, 2)])

        assert resolution.bonus.unit_price == Decimal("7500.00")
        assert resolution.bonus.note == "Discounted by promotion: Combo Cola"
        assert resolution.amount == Decimal("7500.00")

    def test_fixed_off_never_exceeds_price(self, buy_two_get_one_cola, fries):
        buy_two_get_one_cola.free_product_discount_type = Discount.FreeProductDiscountType.FIXED_AMOUNT
        buy_two_get_one_cola.free_product_discount_value = Decimal("99999")
        buy_two_get_one_cola.save()

        resolution = DiscountService.resolve(buy_two_get_one_cola, [line(fries, 2)])

        assert resolution.bonus.unit_price == Decimal("0.00")

    def test_free_product_out_of_stock(self, buy_two_get_one_cola, fries, cola):
        cola.stock_quantity = 1
        cola.save()

        with pytest.raises(InsufficientStock):
            DiscountService.resolve(buy_two_get_one_cola, [line(fries, 4)])

    def test_bonus_lines_not_counted_towards_threshold(self, buy_two_get_one_cola, fries, cola):
        resolution = DiscountService.resolve(buy_two_get_one_cola, [line(fries, 1), line(cola, 3, is_bonus=True)])

        assert resolution.bonus is None


@pytest.mark.django_db
class TestUsageCounting:

    def test_consume_until_exhausted(self):
        discount = make_discount(code="ONCE", usage_limit=1)

        DiscountService.consume_usage(discount)
        discount.refresh_from_db()
        assert discount.used_count == 1

        with pytest.raises(DiscountRejected) as exc_info:
            DiscountService.consume_usage(discount)
        assert exc_info.value.reason == DiscountRejectionReason.USAGE_EXHAUSTED

    def test_release_never_goes_negative(self, percentage_discount):
        DiscountService.release_usage(percentage_discount)

        percentage_discount.refresh_from_db()
        assert percentage_discount.used_count == 0
