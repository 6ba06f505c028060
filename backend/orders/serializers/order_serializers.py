from rest_framework import serializers

from core_backend.base import BaseModelSerializer
from orders.models import Order
from orders.services import DISCOUNT_REMOVE_SENTINEL

from .order_item_serializers import OrderItemInputSerializer, OrderItemSerializer


class OrderSerializer(BaseModelSerializer):
    """Read projection of an order with its resolved line items."""

    items = OrderItemSerializer(many=True, read_only=True)
    customer_name = serializers.CharField(source="customer.name", read_only=True)
    employee_name = serializers.CharField(source="employee.name", read_only=True, default=None)
    table_number = serializers.CharField(source="table.table_number", read_only=True, default=None)
    discount_code = serializers.CharField(source="discount.code", read_only=True, default=None)
    status_display = serializers.CharField(source="get_status_display", read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "status",
            "status_display",
            "order_type",
            "customer",
            "customer_name",
            "employee",
            "employee_name",
            "table",
            "table_number",
            "table_group",
            "discount",
            "discount_code",
            "subtotal",
            "tax_amount",
            "delivery_fee",
            "discount_amount",
            "total_amount",
            "notes",
            "order_date",
            "confirmed_at",
            "prepared_at",
            "delivered_at",
            "cancelled_at",
            "updated_at",
            "items",
        ]
        read_only_fields = fields
        select_related_fields = ["customer", "employee", "table", "discount"]
        prefetch_related_fields = ["items__product", "items__promotion"]


class OrderCreateSerializer(serializers.Serializer):
    customer_id = serializers.IntegerField()
    order_type = serializers.ChoiceField(choices=Order.OrderType.choices)
    items = OrderItemInputSerializer(many=True, allow_empty=False)
    employee_id = serializers.IntegerField(required=False, allow_null=True)
    table_id = serializers.IntegerField(required=False, allow_null=True)
    table_group_id = serializers.IntegerField(required=False, allow_null=True)
    include_vat = serializers.BooleanField(required=False, default=True)
    discount_id = serializers.IntegerField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class OrderUpdateSerializer(serializers.Serializer):
    """
    `status` is required on PUT; a PATCH without it keeps the current status.
    `discount_id` of -1 detaches the current discount; leaving it out keeps it.
    `items`, when present, replaces every line of the order.
    """

    status = serializers.ChoiceField(choices=Order.Status.choices)
    notes = serializers.CharField(required=False, allow_blank=True)
    employee_id = serializers.IntegerField(required=False)
    table_id = serializers.IntegerField(required=False)
    discount_id = serializers.IntegerField(required=False)
    items = OrderItemInputSerializer(many=True, required=False, allow_empty=False)

    def validate_items(self, value):
        # Nested required fields are relaxed on PATCH; a replacement line still needs both.
        for item in value:
            if item.get("product_id") is None or item.get("quantity") is None:
                raise serializers.ValidationError(
                    "Each item needs a product_id and a quantity."
                )
        return value

    def validate_discount_id(self, value):
        if value <= 0 and value != DISCOUNT_REMOVE_SENTINEL:
            raise serializers.ValidationError(
                f"Use a discount id or {DISCOUNT_REMOVE_SENTINEL} to remove the discount."
            )
        return value
