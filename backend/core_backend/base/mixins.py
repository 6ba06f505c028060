from rest_framework.viewsets import ViewSetMixin
from django.db.models import Prefetch


class OptimizedQuerysetMixin(ViewSetMixin):
    """
    Applies the serializer's declared joins to the viewset queryset.

    A serializer opts in through its Meta:

        select_related_fields = ["customer", "discount"]
        prefetch_related_fields = ["items__product"]

    so nested order items, recipe entries and scope lists are loaded in a
    fixed number of queries instead of one per row.
    """

    @staticmethod
    def _joins_for(serializer_class):
        meta = getattr(serializer_class, "Meta", None)
        select_related = list(dict.fromkeys(getattr(meta, "select_related_fields", [])))

        prefetch_related = []
        for lookup in getattr(meta, "prefetch_related_fields", []):
            if isinstance(lookup, Prefetch) or lookup not in prefetch_related:
                prefetch_related.append(lookup)

        return select_related, prefetch_related

    def get_queryset(self):
        queryset = super().get_queryset()

        try:
            serializer_class = self.get_serializer_class()
        except (AttributeError, AssertionError):
            return queryset

        select_related, prefetch_related = self._joins_for(serializer_class)
        if select_related:
            queryset = queryset.select_related(*select_related)
        if prefetch_related:
            queryset = queryset.prefetch_related(*prefetch_related)
        return queryset
