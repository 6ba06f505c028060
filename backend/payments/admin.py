from django.contrib import admin
from .models import Payment


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ("transaction_id", "order", "method", "status", "amount", "payment_date", "completed_at")
    list_filter = ("status", "method")
    search_fields = ("transaction_id", "order__order_number", "reference_number")
    readonly_fields = ("transaction_id", "completed_at")
