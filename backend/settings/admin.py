from django.contrib import admin
from .models import GlobalSettings


@admin.register(GlobalSettings)
class GlobalSettingsAdmin(admin.ModelAdmin):
    list_display = ("currency", "tax_rate", "delivery_fee", "refund_discount_usage_on_cancel")

    def has_add_permission(self, request):
        return not GlobalSettings.objects.exists()
