import django_filters
from core_backend.base.filters import BaseFilterSet
from .models import Order


class OrderFilter(BaseFilterSet):
    """
    Order list filters. `order_date__gte=2025-01-15&order_date__lte=2025-01-15`
    selects the whole day.
    """

    order_number = django_filters.CharFilter(field_name="order_number", lookup_expr="icontains")

    class Meta:
        model = Order
        fields = {
            "status": ["exact"],
            "order_type": ["exact"],
            "customer": ["exact"],
            "employee": ["exact"],
            "table": ["exact"],
            "discount": ["exact"],
            "order_date": ["gte", "lte"],
        }
