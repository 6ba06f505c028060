from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional
import logging

from inventory.services import InventoryService
from products.models import Product
from .models import Discount

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


@dataclass
class BonusGrant:
    """Units of a product granted by a Buy X Get Y promotion."""

    product: Product
    quantity: int
    unit_price: Decimal
    original_price: Decimal
    note: str

    @property
    def total_price(self) -> Decimal:
        return self.unit_price * self.quantity

    @property
    def discount_per_item(self) -> Decimal:
        return self.original_price - self.unit_price

    @property
    def discount_value(self) -> Decimal:
        return self.discount_per_item * self.quantity


@dataclass
class StrategyResult:
    amount: Decimal
    bonus: Optional[BonusGrant] = None


class DiscountStrategy(ABC):
    """The interface for a discount strategy."""

    @abstractmethod
    def apply(self, discount: Discount, lines, applicable_lines, applicable_subtotal: Decimal) -> StrategyResult:
        pass


class PercentageDiscountStrategy(DiscountStrategy):
    """A percentage of the applicable subtotal, capped by max_discount_amount."""

    def apply(self, discount, lines, applicable_lines, applicable_subtotal):
        amount = applicable_subtotal * Decimal(discount.value) / Decimal("100")
        if discount.max_discount_amount is not None and amount > discount.max_discount_amount:
            amount = discount.max_discount_amount
        amount = max(Decimal("0"), amount)
        return StrategyResult(amount=amount.quantize(CENT))


class FixedAmountDiscountStrategy(DiscountStrategy):
    """A fixed amount, never more than the applicable subtotal."""

    def apply(self, discount, lines, applicable_lines, applicable_subtotal):
        amount = min(Decimal(discount.value), applicable_subtotal)
        amount = max(Decimal("0"), amount)
        return StrategyResult(amount=amount.quantize(CENT))


class BuyXGetYDiscountStrategy(DiscountStrategy):
    """
    Grants `free_product_quantity` units of the free product for every
    `buy_quantity` scoped units in the order. The reduction lives in the
    bonus line's unit price, not in a separate monetary amount.
    """

    def _count_scoped_quantity(self, discount, lines) -> int:
        product_ids = {p.pk for p in discount.applicable_products.all()}
        category_ids = {c.pk for c in discount.applicable_categories.all()}

        if product_ids:
            scoped = [line for line in lines if line.product_id in product_ids]
        elif category_ids:
            scoped = [line for line in lines if line.product.category_id in category_ids]
        else:
            scoped = list(lines)

        return sum(line.quantity for line in scoped)

    def _bonus_unit_price(self, discount, price: Decimal) -> Decimal:
        discount_type = discount.free_product_discount_type
        value = discount.free_product_discount_value or Decimal("0")

        if discount_type == Discount.FreeProductDiscountType.PERCENTAGE:
            percent = min(max(Decimal(value), Decimal("0")), Decimal("100"))
            per_item = price * percent / Decimal("100")
        elif discount_type == Discount.FreeProductDiscountType.FIXED_AMOUNT:
            per_item = min(max(Decimal(value), Decimal("0")), price)
        else:
            per_item = price

        return (price - per_item).quantize(CENT)

    def apply(self, discount, lines, applicable_lines, applicable_subtotal):
        if not discount.buy_quantity or discount.free_product is None:
            logger.warning(f"Buy X Get Y discount {discount.code} is missing its buy quantity or free product")
            return StrategyResult(amount=Decimal("0.00"))

        paid_lines = [line for line in lines if not getattr(line, "is_bonus", False)]
        scoped_quantity = self._count_scoped_quantity(discount, paid_lines)
        if scoped_quantity < discount.buy_quantity:
            logger.debug(
                f"Buy X Get Y {discount.code}: {scoped_quantity} scoped units, "
                f"{discount.buy_quantity} needed, no grant"
            )
            return StrategyResult(amount=Decimal("0.00"))

        free_quantity = (scoped_quantity // discount.buy_quantity) * (
            discount.free_product_quantity or 1
        )
        free_product = discount.free_product
        InventoryService.check_availability(free_product, free_quantity)

        unit_price = self._bonus_unit_price(discount, free_product.price)
        if discount.free_product_discount_type == Discount.FreeProductDiscountType.FREE:
            note = f"Bonus from promotion: {discount.name}"
        else:
            note = f"Discounted by promotion: {discount.name}"

        bonus = BonusGrant(
            product=free_product,
            quantity=free_quantity,
            unit_price=unit_price,
            original_price=free_product.price,
            note=note,
        )
        return StrategyResult(amount=bonus.discount_value.quantize(CENT), bonus=bonus)
