from rest_framework.decorators import action
from rest_framework.response import Response

from core_backend.base import BaseViewSet
from .models import Customer, CustomerTier
from .serializers import (
    CustomerSerializer,
    CustomerTierSerializer,
    CustomerTierSummarySerializer,
)
from .services import CustomerTierService


class CustomerViewSet(BaseViewSet):
    queryset = Customer.objects.all()
    serializer_class = CustomerSerializer
    search_fields = ["name", "phone", "email"]
    ordering = ["name"]

    @action(detail=True, methods=["get"])
    def tier(self, request, pk=None):
        """Current tier and progress towards the next one."""
        customer = self.get_object()
        summary = CustomerTierService.get_tier_summary(customer)
        return Response(CustomerTierSummarySerializer(summary).data)


class CustomerTierViewSet(BaseViewSet):
    queryset = CustomerTier.objects.all()
    serializer_class = CustomerTierSerializer
    ordering = ["display_order", "minimum_spent"]
