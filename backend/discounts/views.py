from rest_framework import status
from rest_framework.decorators import action, api_view
from rest_framework.response import Response

from core_backend.base import BaseViewSet
from .filters import DiscountFilter
from .models import Discount
from .serializers import DiscountSerializer
from .services import DiscountService, DiscountValidationService


class DiscountViewSet(BaseViewSet):
    """
    A ViewSet for viewing and editing discounts.
    Deleting a discount that orders reference is rejected with 409.
    """

    queryset = Discount.objects.all()
    serializer_class = DiscountSerializer
    filterset_class = DiscountFilter
    search_fields = ["code", "name"]
    ordering = ["-start_date"]

    def perform_destroy(self, instance):
        DiscountService.delete_discount(instance)

    @action(detail=True, methods=["post"], url_path="toggle-status")
    def toggle_status(self, request, pk=None):
        discount = DiscountService.toggle_status(self.get_object())
        return Response(self.get_serializer(discount).data)


@api_view(["GET"])
def validate_discount_code(request, code):
    """
    Look a discount up by code (case-insensitive) and run the standard
    active / date window / usage checks against it.
    """
    discount = DiscountValidationService.validate_code(code)
    return Response(
        {"valid": True, "discount": DiscountSerializer(discount).data},
        status=status.HTTP_200_OK,
    )
