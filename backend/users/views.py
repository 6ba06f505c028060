from core_backend.base import BaseViewSet
from .models import Employee
from .serializers import EmployeeSerializer


class EmployeeViewSet(BaseViewSet):
    queryset = Employee.objects.all()
    serializer_class = EmployeeSerializer
    filterset_fields = ["role", "status"]
    search_fields = ["name", "email"]
    ordering = ["name"]
