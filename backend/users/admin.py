from django.contrib import admin
from .models import Employee


@admin.register(Employee)
class EmployeeAdmin(admin.ModelAdmin):
    list_display = ("name", "role", "status", "email")
    list_filter = ("role", "status")
    search_fields = ("name", "email")
