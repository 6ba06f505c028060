from django.contrib import admin
from .models import Order, OrderItem


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    readonly_fields = ("unit_price", "total_price", "is_bonus", "promotion")
    fields = ("product", "quantity", "unit_price", "total_price", "is_bonus", "promotion", "special_instructions")
    autocomplete_fields = ("product",)

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    """
    Read-mostly admin for orders. Stock and discount usage only move through
    the order services, so monetary fields are not editable here.
    """

    list_display = (
        "order_number",
        "customer",
        "employee",
        "status",
        "order_type",
        "get_total_formatted",
        "order_date",
    )
    list_display_links = ("order_number",)
    search_fields = ("order_number", "customer__name", "customer__phone")
    list_filter = ("status", "order_type", "order_date")
    inlines = [OrderItemInline]

    fieldsets = (
        (
            "Order Overview",
            {"fields": ("order_number", "customer", "employee", "table", "table_group", "status", "order_type", "notes")},
        ),
        (
            "Financial Summary",
            {"fields": ("subtotal", "tax_amount", "delivery_fee", "discount", "discount_amount", "total_amount")},
        ),
        (
            "Timestamps",
            {
                "classes": ("collapse",),
                "fields": ("order_date", "confirmed_at", "prepared_at", "delivered_at", "cancelled_at", "updated_at"),
            },
        ),
    )
    readonly_fields = (
        "order_number",
        "subtotal",
        "tax_amount",
        "delivery_fee",
        "discount",
        "discount_amount",
        "total_amount",
        "confirmed_at",
        "prepared_at",
        "delivered_at",
        "cancelled_at",
        "updated_at",
    )

    def get_queryset(self, request):
        return super().get_queryset(request).select_related("customer", "employee", "table", "discount")

    @admin.display(ordering="total_amount", description="Total")
    def get_total_formatted(self, obj):
        return f"{obj.total_amount:,.2f}"
