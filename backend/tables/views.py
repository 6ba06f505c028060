from core_backend.base import BaseViewSet
from .models import Table, TableGroup
from .serializers import TableSerializer, TableGroupSerializer


class TableViewSet(BaseViewSet):
    queryset = Table.objects.all()
    serializer_class = TableSerializer
    filterset_fields = ["status", "is_active"]
    ordering = ["table_number"]


class TableGroupViewSet(BaseViewSet):
    queryset = TableGroup.objects.all()
    serializer_class = TableGroupSerializer
