from rest_framework import serializers

from core_backend.base import BaseModelSerializer
from orders.models import OrderItem


class OrderItemSerializer(BaseModelSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True)
    product_price = serializers.DecimalField(
        source="product.price", max_digits=12, decimal_places=2, read_only=True
    )
    promotion_name = serializers.CharField(source="promotion.name", read_only=True, default=None)

    class Meta:
        model = OrderItem
        fields = [
            "id",
            "order",
            "product",
            "product_name",
            "product_price",
            "quantity",
            "unit_price",
            "total_price",
            "special_instructions",
            "is_bonus",
            "promotion",
            "promotion_name",
        ]
        read_only_fields = fields
        select_related_fields = ["product", "order", "promotion"]


class OrderItemInputSerializer(serializers.Serializer):
    """One requested line of an order create/replace payload."""

    product_id = serializers.IntegerField()
    quantity = serializers.IntegerField(min_value=1)
    special_instructions = serializers.CharField(
        max_length=255, required=False, allow_blank=True, default=""
    )


class AddItemSerializer(OrderItemInputSerializer):
    pass


class UpdateOrderItemSerializer(serializers.Serializer):
    quantity = serializers.IntegerField(min_value=1, required=False)
    special_instructions = serializers.CharField(max_length=255, required=False, allow_blank=True)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError("Provide quantity or special_instructions.")
        return attrs


class UpdateQuantitySerializer(serializers.Serializer):
    quantity = serializers.IntegerField(min_value=1)
