from django.contrib import admin
from .models import Customer, CustomerTier


@admin.register(CustomerTier)
class CustomerTierAdmin(admin.ModelAdmin):
    list_display = ("name", "minimum_spent", "display_order", "is_active")
    ordering = ("display_order",)


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ("name", "phone", "email", "is_active", "created_at")
    search_fields = ("name", "phone", "email")
