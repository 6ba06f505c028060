from core_backend.base import BaseModelSerializer
from .models import GlobalSettings


class GlobalSettingsSerializer(BaseModelSerializer):
    class Meta:
        model = GlobalSettings
        fields = [
            "tax_rate",
            "delivery_fee",
            "currency",
            "order_number_prefix",
            "refund_discount_usage_on_cancel",
            "updated_at",
        ]
        read_only_fields = ["updated_at"]
