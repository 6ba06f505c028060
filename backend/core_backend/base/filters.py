import django_filters
from django.db import models
from django.utils import timezone
from datetime import datetime, time
import logging

logger = logging.getLogger(__name__)


class FlexibleDateTimeFilter(django_filters.DateTimeFilter):
    """
    A DateTimeFilter that treats date-only input as a whole day.

    "2025-11-11" with a 'gte'/'gt' lookup means start of day, with 'lte'/'lt'
    it means end of day. A full datetime is used exactly as given.
    """

    def filter(self, qs, value):
        if isinstance(value, datetime) and value.time() == time(0, 0, 0):
            if self.lookup_expr in ["lte", "lt"]:
                value = datetime.combine(value.date(), time.max)
                if timezone.is_naive(value):
                    value = timezone.make_aware(value)
                logger.debug(
                    f"FlexibleDateTimeFilter: adjusted {self.field_name}__{self.lookup_expr} to end of day: {value}"
                )

        return super().filter(qs, value)


class BaseFilterSet(django_filters.FilterSet):
    """
    Base filter set. Every auto-generated DateTimeField filter becomes a
    FlexibleDateTimeFilter so date-only query params behave as full-day ranges.
    """

    @classmethod
    def filter_for_field(cls, field, field_name, lookup_expr="exact"):
        if isinstance(field, models.DateTimeField):
            return FlexibleDateTimeFilter(field_name=field_name, lookup_expr=lookup_expr)

        return super().filter_for_field(field, field_name, lookup_expr)
