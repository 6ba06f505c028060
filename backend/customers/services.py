"""
Customer services.

`CustomerTierService` is the single place that knows how a customer's tier
is derived. Other apps (discount scoping in particular) ask it for the
current tier and never aggregate order history themselves.
"""
from decimal import Decimal
import logging

from django.db.models import Sum

from .models import Customer, CustomerTier

logger = logging.getLogger(__name__)


class CustomerTierService:

    @staticmethod
    def get_total_spent(customer: Customer) -> Decimal:
        """Sum of total_amount over the customer's non-cancelled orders."""
        from orders.models import Order

        total = (
            Order.objects.filter(customer=customer)
            .exclude(status=Order.Status.CANCELLED)
            .aggregate(total=Sum("total_amount"))["total"]
        )
        return total or Decimal("0")

    @staticmethod
    def resolve_tier_for_amount(total_spent: Decimal):
        """
        Highest active tier whose minimum the amount clears. Equal minimums
        are broken by the lower display_order.
        """
        return (
            CustomerTier.objects.filter(is_active=True, minimum_spent__lte=total_spent)
            .order_by("-minimum_spent", "display_order", "id")
            .first()
        )

    @staticmethod
    def get_current_tier(customer: Customer):
        """
        The customer's current tier, or None when no tier threshold is met.
        """
        total_spent = CustomerTierService.get_total_spent(customer)
        tier = CustomerTierService.resolve_tier_for_amount(total_spent)
        logger.debug(
            f"Customer {customer.pk} spent {total_spent}, tier={tier.name if tier else None}"
        )
        return tier

    @staticmethod
    def get_tier_summary(customer: Customer) -> dict:
        total_spent = CustomerTierService.get_total_spent(customer)
        tier = CustomerTierService.resolve_tier_for_amount(total_spent)
        next_tier = (
            CustomerTier.objects.filter(is_active=True, minimum_spent__gt=total_spent)
            .order_by("minimum_spent", "display_order")
            .first()
        )
        return {
            "customer_id": customer.pk,
            "total_spent": total_spent,
            "tier": tier,
            "next_tier": next_tier,
            "amount_to_next_tier": (next_tier.minimum_spent - total_spent) if next_tier else None,
        }
