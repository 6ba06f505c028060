import logging

from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.response import Response

from core_backend.base import BaseViewSet
from orders.models import Order, OrderItem
from orders.serializers import (
    AddItemSerializer,
    OrderItemSerializer,
    UpdateOrderItemSerializer,
    UpdateQuantitySerializer,
)
from orders.services import OrderItemService

logger = logging.getLogger(__name__)


class OrderItemViewSet(BaseViewSet):
    """
    A ViewSet for managing a specific item within an order.
    """

    queryset = OrderItem.objects.all()
    serializer_class = OrderItemSerializer
    http_method_names = ["get", "post", "patch", "delete", "head", "options"]
    ordering = ["id"]

    def get_serializer_class(self):
        if self.action == "create":
            return AddItemSerializer
        if self.action == "partial_update":
            return UpdateOrderItemSerializer
        if self.action == "quantity":
            return UpdateQuantitySerializer
        return OrderItemSerializer

    def get_queryset(self):
        """
        Filter items based on the order_pk provided in the URL.
        """
        queryset = super().get_queryset()
        return queryset.filter(order__pk=self.kwargs["order_pk"])

    def _get_order(self):
        return get_object_or_404(Order, pk=self.kwargs["order_pk"])

    def _respond(self, item, status_code=status.HTTP_200_OK):
        item = OrderItem.objects.select_related("product", "order", "promotion").get(pk=item.pk)
        return Response(OrderItemSerializer(item).data, status=status_code)

    def create(self, request, *args, **kwargs):
        order = self._get_order()
        serializer = AddItemSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        item = OrderItemService.add_item(order, **serializer.validated_data)
        return self._respond(item, status.HTTP_201_CREATED)

    def partial_update(self, request, *args, **kwargs):
        item = self.get_object()
        serializer = UpdateOrderItemSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        item = OrderItemService.update_item(item, **serializer.validated_data)
        return self._respond(item)

    def destroy(self, request, *args, **kwargs):
        OrderItemService.remove_item(self.get_object())
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["post"])
    def quantity(self, request, *args, **kwargs):
        item = self.get_object()
        serializer = UpdateQuantitySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        item = OrderItemService.update_item_quantity(item, serializer.validated_data["quantity"])
        return self._respond(item)
