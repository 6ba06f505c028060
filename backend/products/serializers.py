from rest_framework import serializers
from core_backend.base import BaseModelSerializer
from inventory.services import InventoryService
from .models import Category, Product


class CategorySerializer(BaseModelSerializer):
    class Meta:
        model = Category
        fields = ["id", "name", "description", "parent", "order", "is_active"]


class ProductSerializer(BaseModelSerializer):
    category_name = serializers.CharField(source="category.name", read_only=True, default=None)
    available_quantity = serializers.SerializerMethodField()

    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "description",
            "price",
            "category",
            "category_name",
            "is_active",
            "is_available",
            "stock_quantity",
            "min_stock_level",
            "available_quantity",
        ]
        select_related_fields = ["category"]
        prefetch_related_fields = ["recipe__ingredient"]

    def get_available_quantity(self, obj):
        return InventoryService.compute_available_quantity(obj)
