import django_filters
from core_backend.base import BaseFilterSet
from .models import Discount


class DiscountFilter(BaseFilterSet):
    code = django_filters.CharFilter(field_name="code", lookup_expr="iexact")

    class Meta:
        model = Discount
        fields = {
            "type": ["exact"],
            "is_active": ["exact"],
            "start_date": ["gte", "lte"],
            "end_date": ["gte", "lte"],
        }
