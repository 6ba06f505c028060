from rest_framework import serializers
from core_backend.base import BaseModelSerializer
from .models import Employee


class EmployeeSerializer(BaseModelSerializer):
    role_display = serializers.CharField(source="get_role_display", read_only=True)

    class Meta:
        model = Employee
        fields = ["id", "name", "email", "phone", "role", "role_display", "status", "hire_date"]
