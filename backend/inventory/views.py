from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.views import APIView

from core_backend.base import BaseViewSet, ReadOnlyBaseViewSet
from core_backend.exceptions import ValidationError
from products.models import Product
from .models import Ingredient, ProductIngredient, StockMovement
from .serializers import (
    IngredientSerializer,
    IngredientQuantitySerializer,
    ProductIngredientSerializer,
    StockMovementSerializer,
)
from .services import InventoryService


class IngredientViewSet(BaseViewSet):
    queryset = Ingredient.objects.all()
    serializer_class = IngredientSerializer
    search_fields = ["name"]
    ordering = ["name"]

    @action(detail=True, methods=["post"], url_path="adjust-quantity")
    def adjust_quantity(self, request, pk=None):
        ingredient = self.get_object()
        serializer = IngredientQuantitySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        ingredient = InventoryService.adjust_ingredient_quantity(
            ingredient,
            serializer.validated_data["quantity"],
            reference=serializer.validated_data["reason"],
        )
        return Response(IngredientSerializer(ingredient).data)

    @action(detail=False, methods=["get"], url_path="low-stock")
    def low_stock(self, request):
        queryset = InventoryService.get_low_stock_ingredients()
        return Response(IngredientSerializer(queryset, many=True).data)


class ProductIngredientViewSet(BaseViewSet):
    """
    Recipe entries. Filter by ?product=<id> to get one product's recipe.
    """

    queryset = ProductIngredient.objects.all()
    serializer_class = ProductIngredientSerializer
    filterset_fields = ["product", "ingredient"]
    ordering = ["id"]


class StockMovementViewSet(ReadOnlyBaseViewSet):
    queryset = StockMovement.objects.all()
    serializer_class = StockMovementSerializer
    filterset_fields = ["operation", "ingredient", "product"]
    ordering = ["-created_at", "-id"]


class ProductAvailabilityView(APIView):
    """
    Check how many units of a product can be sold right now.
    Used by the POS before adding items to an order.
    """

    def get(self, request, product_id):
        product = get_object_or_404(Product, pk=product_id)
        try:
            requested = int(request.query_params.get("quantity", 1))
        except ValueError:
            raise ValidationError("quantity must be an integer.")

        result = InventoryService.get_product_availability(product, requested)
        return Response(result, status=status.HTTP_200_OK)
