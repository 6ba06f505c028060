"""
Order financial calculators.

Shared by order creation, whole-order updates and single-item edits so all
three paths compute subtotal, tax, delivery fee and total the same way.

Usage:
    from orders.calculators import OrderCalculator
    subtotal = OrderCalculator.subtotal(lines)
    tax = OrderCalculator.tax(subtotal, include_vat=True)
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional

from settings.config import app_settings

CENT = Decimal("0.01")


def quantize(amount: Decimal) -> Decimal:
    return Decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)


class OrderCalculator:

    @staticmethod
    def subtotal(lines: Iterable) -> Decimal:
        """Sum of line totals, bonus lines included."""
        return quantize(sum((line.total_price for line in lines), Decimal("0.00")))

    @staticmethod
    def tax(subtotal: Decimal, include_vat: bool = True) -> Decimal:
        if not include_vat:
            return Decimal("0.00")
        return quantize(subtotal * app_settings.tax_rate)

    @staticmethod
    def delivery_fee(order_type: str) -> Decimal:
        from .models import Order

        if order_type == Order.OrderType.DELIVERY:
            return quantize(app_settings.delivery_fee)
        return Decimal("0.00")

    @staticmethod
    def total(subtotal: Decimal, tax: Decimal, delivery_fee: Decimal,
              discount_amount: Optional[Decimal] = None) -> Decimal:
        total = subtotal + tax + delivery_fee - (discount_amount or Decimal("0"))
        return quantize(max(Decimal("0"), total))
