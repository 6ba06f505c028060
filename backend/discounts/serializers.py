from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from rest_framework import serializers

from core_backend.base import BaseModelSerializer
from customers.models import CustomerTier
from products.models import Category, Product
from users.models import Employee
from .models import Discount, DiscountRoleScope


class DiscountSerializer(BaseModelSerializer):
    applicable_products = serializers.PrimaryKeyRelatedField(
        queryset=Product.objects.all(), many=True, required=False
    )
    applicable_categories = serializers.PrimaryKeyRelatedField(
        queryset=Category.objects.all(), many=True, required=False
    )
    applicable_customer_tiers = serializers.PrimaryKeyRelatedField(
        queryset=CustomerTier.objects.all(), many=True, required=False
    )
    applicable_roles = serializers.ListField(
        child=serializers.ChoiceField(choices=Employee.Role.choices),
        required=False,
    )
    free_product_name = serializers.CharField(source="free_product.name", read_only=True, default=None)

    # Many-to-many and derived inputs, saved after the row itself.
    RELATION_FIELDS = (
        "applicable_products",
        "applicable_categories",
        "applicable_customer_tiers",
        "applicable_roles",
    )

    class Meta:
        model = Discount
        fields = [
            "id",
            "code",
            "name",
            "description",
            "type",
            "value",
            "min_order_amount",
            "max_discount_amount",
            "start_date",
            "end_date",
            "usage_limit",
            "used_count",
            "is_active",
            "applicable_products",
            "applicable_categories",
            "applicable_customer_tiers",
            "applicable_roles",
            "buy_quantity",
            "free_product",
            "free_product_name",
            "free_product_quantity",
            "free_product_discount_type",
            "free_product_discount_value",
        ]
        read_only_fields = ["used_count"]
        select_related_fields = ["free_product"]
        prefetch_related_fields = [
            "applicable_products",
            "applicable_categories",
            "applicable_customer_tiers",
            "role_scopes",
        ]

    def to_representation(self, instance):
        data = super().to_representation(instance)
        data["applicable_roles"] = sorted(instance.applicable_role_ids)
        return data

    def validate_code(self, value):
        value = value.strip()
        queryset = Discount.objects.filter(code__iexact=value)
        if self.instance is not None:
            queryset = queryset.exclude(pk=self.instance.pk)
        if queryset.exists():
            raise serializers.ValidationError("A discount with this code already exists.")
        return value

    def validate(self, data):
        data = super().validate(data)

        # Field rules live on Discount.clean; run them against the merged values.
        candidate = Discount()
        if self.instance is not None:
            for model_field in Discount._meta.concrete_fields:
                setattr(candidate, model_field.attname, getattr(self.instance, model_field.attname))
        for key, value in data.items():
            if key not in self.RELATION_FIELDS:
                setattr(candidate, key, value)

        try:
            candidate.clean()
        except DjangoValidationError as exc:
            raise serializers.ValidationError(exc.message_dict)

        return data

    def _set_roles(self, discount, roles):
        discount.role_scopes.all().delete()
        DiscountRoleScope.objects.bulk_create(
            [DiscountRoleScope(discount=discount, role=role) for role in set(roles)]
        )

    @transaction.atomic
    def create(self, validated_data):
        roles = validated_data.pop("applicable_roles", [])
        discount = super().create(validated_data)
        self._set_roles(discount, roles)
        return discount

    @transaction.atomic
    def update(self, instance, validated_data):
        roles = validated_data.pop("applicable_roles", None)
        discount = super().update(instance, validated_data)
        if roles is not None:
            self._set_roles(discount, roles)
        return discount
