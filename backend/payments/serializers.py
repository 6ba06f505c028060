from decimal import Decimal

from rest_framework import serializers

from core_backend.base import BaseModelSerializer
from .models import Payment


class PaymentSerializer(BaseModelSerializer):
    """
    Read projection of a payment. Only the reference number and notes can be
    edited; status changes go through the complete/fail/cancel/refund actions.
    """

    order_number = serializers.CharField(source="order.order_number", read_only=True)
    order_total = serializers.DecimalField(
        source="order.total_amount", max_digits=12, decimal_places=2, read_only=True
    )
    method_display = serializers.CharField(source="get_method_display", read_only=True)
    status_display = serializers.CharField(source="get_status_display", read_only=True)

    class Meta:
        model = Payment
        fields = [
            "id",
            "transaction_id",
            "order",
            "order_number",
            "order_total",
            "method",
            "method_display",
            "status",
            "status_display",
            "amount",
            "reference_number",
            "notes",
            "payment_date",
            "completed_at",
            "updated_at",
        ]
        read_only_fields = [
            "id",
            "transaction_id",
            "order",
            "method",
            "status",
            "amount",
            "payment_date",
            "completed_at",
            "updated_at",
        ]
        select_related_fields = ["order"]


class PaymentCreateSerializer(serializers.Serializer):
    order_id = serializers.IntegerField()
    method = serializers.ChoiceField(choices=Payment.Method.choices)
    amount = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=Decimal("0.01")
    )
    reference_number = serializers.CharField(
        max_length=100, required=False, allow_blank=True, default=""
    )
    notes = serializers.CharField(max_length=500, required=False, allow_blank=True, default="")


class OrderPaymentSummarySerializer(serializers.Serializer):
    order_id = serializers.IntegerField()
    order_number = serializers.CharField()
    order_total = serializers.DecimalField(max_digits=12, decimal_places=2)
    paid_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    refunded_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    remaining_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    is_fully_paid = serializers.BooleanField()
    payment_count = serializers.IntegerField()
    payments = PaymentSerializer(many=True)
