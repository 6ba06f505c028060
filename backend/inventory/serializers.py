from rest_framework import serializers
from core_backend.base import BaseModelSerializer
from .models import Ingredient, ProductIngredient, StockMovement


class IngredientSerializer(BaseModelSerializer):
    is_low_stock = serializers.BooleanField(read_only=True)

    class Meta:
        model = Ingredient
        fields = [
            "id",
            "name",
            "unit",
            "quantity",
            "min_quantity",
            "price_per_unit",
            "is_active",
            "is_low_stock",
        ]
        # Stock only moves through the ledger or the adjust-quantity action.
        read_only_fields = ["quantity"]


class ProductIngredientSerializer(BaseModelSerializer):
    ingredient_name = serializers.CharField(source="ingredient.name", read_only=True)
    unit = serializers.CharField(source="ingredient.unit", read_only=True)

    class Meta:
        model = ProductIngredient
        fields = ["id", "product", "ingredient", "ingredient_name", "unit", "quantity_required"]
        select_related_fields = ["ingredient", "product"]

    def validate_quantity_required(self, value):
        if value <= 0:
            raise serializers.ValidationError("Quantity required must be greater than zero.")
        return value


class IngredientQuantitySerializer(serializers.Serializer):
    quantity = serializers.DecimalField(max_digits=12, decimal_places=3)
    reason = serializers.CharField(max_length=100, required=False, allow_blank=True, default="manual")


class StockMovementSerializer(BaseModelSerializer):
    class Meta:
        model = StockMovement
        fields = [
            "id",
            "ingredient",
            "product",
            "operation",
            "quantity_change",
            "previous_quantity",
            "new_quantity",
            "reference",
            "created_at",
        ]
