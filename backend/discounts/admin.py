from django.contrib import admin
from .models import Discount, DiscountRoleScope


class DiscountRoleScopeInline(admin.TabularInline):
    model = DiscountRoleScope
    extra = 0


@admin.register(Discount)
class DiscountAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "type", "value", "used_count", "usage_limit", "is_active", "start_date", "end_date")
    list_filter = ("type", "is_active")
    search_fields = ("code", "name")
    filter_horizontal = ("applicable_products", "applicable_categories", "applicable_customer_tiers")
    readonly_fields = ("used_count",)
    inlines = [DiscountRoleScopeInline]
