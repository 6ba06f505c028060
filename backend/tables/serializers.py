from rest_framework import serializers
from core_backend.base import BaseModelSerializer
from .models import Table, TableGroup


class TableSerializer(BaseModelSerializer):
    class Meta:
        model = Table
        fields = ["id", "table_number", "capacity", "status", "location", "is_active"]


class TableGroupSerializer(BaseModelSerializer):
    tables = serializers.PrimaryKeyRelatedField(queryset=Table.objects.all(), many=True)

    class Meta:
        model = TableGroup
        fields = ["id", "name", "tables", "is_active", "created_at"]
        read_only_fields = ["created_at"]
        prefetch_related_fields = ["tables"]
