from rest_framework import viewsets, filters
from django_filters.rest_framework import DjangoFilterBackend
from .mixins import OptimizedQuerysetMixin
from ..pagination import StandardPagination

STANDARD_FILTER_BACKENDS = [
    DjangoFilterBackend,
    filters.SearchFilter,
    filters.OrderingFilter,
]


class BaseViewSet(OptimizedQuerysetMixin, viewsets.ModelViewSet):
    """
    CRUD endpoint for catalog, customer, staff, table and order resources.

    Querysets are shaped from the serializer Meta, lists are paginated, and
    ``filterset_fields``/``search_fields``/``ordering`` declared on the
    subclass are honoured:

        class TableViewSet(BaseViewSet):
            queryset = Table.objects.all()
            serializer_class = TableSerializer
            filterset_fields = ["status"]
    """

    pagination_class = StandardPagination
    filter_backends = STANDARD_FILTER_BACKENDS
    ordering = ["-id"]


class ReadOnlyBaseViewSet(OptimizedQuerysetMixin, viewsets.ReadOnlyModelViewSet):
    """Same as BaseViewSet for append-only records such as stock movements."""

    pagination_class = StandardPagination
    filter_backends = STANDARD_FILTER_BACKENDS
    ordering = ["-id"]
