from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional
import logging

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from core_backend.exceptions import (
    DiscountRejected,
    DiscountRejectionReason,
    NotFound,
    ReferencedResource,
)
from customers.services import CustomerTierService
from .factories import DiscountStrategyFactory
from .models import Discount
from .strategies import BonusGrant

logger = logging.getLogger(__name__)


@dataclass
class DiscountResolution:
    """Outcome of resolving a discount against a set of order lines."""

    discount: Discount
    amount: Decimal
    applicable_subtotal: Decimal
    applicable_lines: List = field(default_factory=list)
    bonus: Optional[BonusGrant] = None

    @property
    def is_bonus_grant(self) -> bool:
        return self.bonus is not None

    @property
    def consumes_usage(self) -> bool:
        return self.amount > 0 or self.is_bonus_grant

    @property
    def order_discount_amount(self) -> Optional[Decimal]:
        """
        Amount to store on the order. Buy X Get Y reductions are already in
        the bonus line's price, so nothing is subtracted again from the total.
        """
        if self.discount.type == Discount.DiscountType.BUY_X_GET_Y:
            return None
        return self.amount if self.amount > 0 else None


class DiscountValidationService:
    """Eligibility checks. Each one raises DiscountRejected on failure."""

    @staticmethod
    def validate(discount: Discount, now=None, *, already_attached=False):
        """
        Active flag, date window and usage limit, in that order. The usage
        check is skipped for a discount already attached to the order being
        edited, since it does not take a new slot.
        """
        now = now or timezone.now()

        if not discount.is_active:
            raise DiscountRejected(DiscountRejectionReason.INACTIVE)
        if now < discount.start_date:
            raise DiscountRejected(DiscountRejectionReason.NOT_STARTED)
        if now > discount.end_date:
            raise DiscountRejected(DiscountRejectionReason.EXPIRED)
        if not already_attached and not discount.has_usage_left:
            raise DiscountRejected(DiscountRejectionReason.USAGE_EXHAUSTED)

    @staticmethod
    def check_minimum_order(discount: Discount, subtotal: Decimal):
        # Compared against the full subtotal, not the scoped one.
        if discount.min_order_amount is not None and subtotal < discount.min_order_amount:
            raise DiscountRejected(
                DiscountRejectionReason.BELOW_MINIMUM,
                f"Order subtotal must be at least {discount.min_order_amount} to use this discount.",
                min_order_amount=str(discount.min_order_amount),
            )

    @staticmethod
    def check_customer_tier(discount: Discount, customer):
        allowed_tier_ids = {tier.pk for tier in discount.applicable_customer_tiers.all()}
        if not allowed_tier_ids or customer is None:
            return

        tier = CustomerTierService.get_current_tier(customer)
        if tier is None or tier.pk not in allowed_tier_ids:
            raise DiscountRejected(DiscountRejectionReason.SCOPE_TIER)

    @staticmethod
    def check_employee_role(discount: Discount, employee):
        allowed_roles = discount.applicable_role_ids
        # Orders without an employee are not role-restricted.
        if not allowed_roles or employee is None:
            return

        if employee.role not in allowed_roles:
            raise DiscountRejected(DiscountRejectionReason.SCOPE_ROLE)

    @staticmethod
    def get_by_code(code: str) -> Discount:
        discount = Discount.objects.filter(code__iexact=(code or "").strip()).first()
        if discount is None:
            raise NotFound("Discount", code)
        return discount

    @staticmethod
    def validate_code(code: str, now=None) -> Discount:
        """Case-insensitive lookup followed by the standard validation chain."""
        discount = DiscountValidationService.get_by_code(code)
        DiscountValidationService.validate(discount, now)
        return discount


class DiscountScopingService:

    @staticmethod
    def determine_applicable_lines(discount: Discount, lines, *, lenient_category=False):
        """
        Returns (applicable_lines, applicable_subtotal).

        Product scope intersects, category scope adds lines in those
        categories, no scope selects every line. A scope that matches nothing
        rejects the discount. With `lenient_category`, an empty category match
        is tolerated as long as the product scope matched something.
        """
        paid_lines = [line for line in lines if not getattr(line, "is_bonus", False)]
        product_ids = {p.pk for p in discount.applicable_products.all()}
        category_ids = {c.pk for c in discount.applicable_categories.all()}

        if not product_ids and not category_ids:
            applicable = paid_lines
        else:
            selected_ids = set()

            if product_ids:
                selected_ids = {line.product_id for line in paid_lines if line.product_id in product_ids}
                if not selected_ids:
                    raise DiscountRejected(DiscountRejectionReason.SCOPE_PRODUCT)

            if category_ids:
                in_categories = {
                    line.product_id
                    for line in paid_lines
                    if line.product.category_id in category_ids
                }
                if not in_categories and not (lenient_category and selected_ids):
                    raise DiscountRejected(DiscountRejectionReason.SCOPE_CATEGORY)
                selected_ids |= in_categories

            applicable = [line for line in paid_lines if line.product_id in selected_ids]

        applicable_subtotal = sum((line.total_price for line in applicable), Decimal("0"))
        return applicable, applicable_subtotal


class DiscountService:
    """
    A service for resolving discounts against orders and tracking their usage.
    This is the central point of control for all discount logic.
    """

    @staticmethod
    def resolve(discount: Discount, lines, *, customer=None, employee=None, now=None,
                already_attached=False, lenient_category=False) -> DiscountResolution:
        """
        Validate `discount` for the given lines and compute its effect.
        Raises DiscountRejected or InsufficientStock; never mutates anything.
        """
        DiscountValidationService.validate(discount, now, already_attached=already_attached)

        applicable_lines, applicable_subtotal = DiscountScopingService.determine_applicable_lines(
            discount, lines, lenient_category=lenient_category
        )

        subtotal = sum(
            (line.total_price for line in lines if not getattr(line, "is_bonus", False)),
            Decimal("0"),
        )
        DiscountValidationService.check_minimum_order(discount, subtotal)
        DiscountValidationService.check_customer_tier(discount, customer)
        DiscountValidationService.check_employee_role(discount, employee)

        strategy = DiscountStrategyFactory.get_strategy(discount)
        result = strategy.apply(discount, lines, applicable_lines, applicable_subtotal)

        logger.info(
            f"Resolved discount {discount.code}: amount={result.amount}, "
            f"applicable_subtotal={applicable_subtotal}, "
            f"bonus={result.bonus.quantity if result.bonus else 0}"
        )
        return DiscountResolution(
            discount=discount,
            amount=result.amount,
            applicable_subtotal=applicable_subtotal,
            applicable_lines=applicable_lines,
            bonus=result.bonus,
        )

    @staticmethod
    @transaction.atomic
    def consume_usage(discount: Discount):
        """
        Take one usage slot. The row is locked so two orders cannot both take
        the last slot.
        """
        locked = Discount.objects.select_for_update().get(pk=discount.pk)
        if not locked.has_usage_left:
            raise DiscountRejected(DiscountRejectionReason.USAGE_EXHAUSTED)

        Discount.objects.filter(pk=locked.pk).update(used_count=F("used_count") + 1)
        discount.used_count = locked.used_count + 1
        logger.info(f"Discount {discount.code} used {discount.used_count} time(s)")

    @staticmethod
    @transaction.atomic
    def release_usage(discount: Discount):
        Discount.objects.filter(pk=discount.pk, used_count__gt=0).update(
            used_count=F("used_count") - 1
        )
        discount.refresh_from_db(fields=["used_count"])
        logger.info(f"Discount {discount.code} usage released, now {discount.used_count}")

    @staticmethod
    def toggle_status(discount: Discount) -> Discount:
        discount.is_active = not discount.is_active
        discount.save(update_fields=["is_active", "updated_at"])
        logger.info(f"Discount {discount.code} active={discount.is_active}")
        return discount

    @staticmethod
    @transaction.atomic
    def delete_discount(discount: Discount):
        """Discounts referenced by any order are kept."""
        if discount.orders.exists():
            raise ReferencedResource(
                f"Discount '{discount.code}' is used by existing orders and cannot be deleted.",
                discount_id=discount.pk,
            )
        logger.info(f"Deleting discount {discount.code}")
        discount.delete()
