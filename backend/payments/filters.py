import django_filters
from core_backend.base import BaseFilterSet
from .models import Payment


class PaymentFilter(BaseFilterSet):
    """
    Payment list filters. `payment_date__gte=2025-01-15&payment_date__lte=2025-01-15`
    selects the whole day.
    """

    transaction_id = django_filters.CharFilter(field_name="transaction_id", lookup_expr="icontains")

    class Meta:
        model = Payment
        fields = {
            "status": ["exact"],
            "method": ["exact"],
            "order": ["exact"],
            "payment_date": ["gte", "lte"],
        }
