"""
Core backend base components.

This package provides foundational classes that are used throughout the
Django application for consistency and maintainability.
"""

from .viewsets import BaseViewSet, ReadOnlyBaseViewSet
from .serializers import BaseModelSerializer, TimestampedSerializer
from .mixins import OptimizedQuerysetMixin
from .filters import BaseFilterSet, FlexibleDateTimeFilter

__all__ = [
    # ViewSets
    "BaseViewSet",
    "ReadOnlyBaseViewSet",
    # Serializers
    "BaseModelSerializer",
    "TimestampedSerializer",
    # Mixins
    "OptimizedQuerysetMixin",
    # Filters
    "BaseFilterSet",
    "FlexibleDateTimeFilter",
]
