from rest_framework import serializers
from core_backend.base import BaseModelSerializer, TimestampedSerializer
from .models import Customer, CustomerTier


class CustomerTierSerializer(BaseModelSerializer):
    class Meta:
        model = CustomerTier
        fields = [
            "id",
            "name",
            "minimum_spent",
            "color_hex",
            "description",
            "display_order",
            "is_active",
        ]


class CustomerSerializer(TimestampedSerializer):
    class Meta:
        model = Customer
        fields = [
            "id",
            "name",
            "phone",
            "email",
            "address",
            "is_active",
            "created_at",
            "updated_at",
        ]


class CustomerTierSummarySerializer(serializers.Serializer):
    customer_id = serializers.IntegerField()
    total_spent = serializers.DecimalField(max_digits=14, decimal_places=2)
    tier = CustomerTierSerializer(allow_null=True)
    next_tier = CustomerTierSerializer(allow_null=True)
    amount_to_next_tier = serializers.DecimalField(
        max_digits=14, decimal_places=2, allow_null=True
    )
