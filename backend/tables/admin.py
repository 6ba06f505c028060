from django.contrib import admin
from .models import Table, TableGroup


@admin.register(Table)
class TableAdmin(admin.ModelAdmin):
    list_display = ("table_number", "capacity", "status", "location", "is_active")
    list_filter = ("status",)


@admin.register(TableGroup)
class TableGroupAdmin(admin.ModelAdmin):
    list_display = ("name", "is_active", "created_at")
    filter_horizontal = ("tables",)
