import logging

from rest_framework import status
from rest_framework.decorators import action
from rest_framework.response import Response

from core_backend.base import BaseViewSet
from orders.filters import OrderFilter
from orders.models import Order
from orders.serializers import (
    OrderCreateSerializer,
    OrderSerializer,
    OrderUpdateSerializer,
)
from orders.services import OrderService

logger = logging.getLogger(__name__)


class OrderViewSet(BaseViewSet):
    """
    Orders: create, list, retrieve, update (status, notes, employee, table,
    discount, item replacement), cancel and delete.

    Every write goes through OrderService; rejections surface through the
    project exception handler.
    """

    queryset = Order.objects.all()
    serializer_class = OrderSerializer
    filterset_class = OrderFilter
    search_fields = ["order_number", "customer__name", "customer__phone"]
    ordering_fields = ["order_date", "total_amount", "status"]
    ordering = ["-order_date"]

    def get_serializer_class(self):
        if self.action == "create":
            return OrderCreateSerializer
        if self.action in ("update", "partial_update"):
            return OrderUpdateSerializer
        return OrderSerializer

    def _read(self, order):
        # Re-read so the response carries the items and totals just written.
        instance = Order.objects.select_related(
            "customer", "employee", "table", "discount"
        ).prefetch_related("items__product", "items__promotion").get(pk=order.pk)
        return OrderSerializer(instance, context=self.get_serializer_context()).data

    def create(self, request, *args, **kwargs):
        serializer = OrderCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        order = OrderService.create_order(**serializer.validated_data)
        return Response(self._read(order), status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop("partial", False)
        order = self.get_object()
        serializer = OrderUpdateSerializer(data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)

        data = dict(serializer.validated_data)
        # A partial update without a status keeps the current one.
        status_value = data.pop("status", order.status)
        order = OrderService.update_order(order, status=status_value, **data)
        return Response(self._read(order))

    def partial_update(self, request, *args, **kwargs):
        kwargs["partial"] = True
        return self.update(request, *args, **kwargs)

    def destroy(self, request, *args, **kwargs):
        OrderService.delete_order(self.get_object())
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):
        order = OrderService.cancel_order(self.get_object())
        return Response(self._read(order))
