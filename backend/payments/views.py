import logging

from rest_framework import status
from rest_framework.decorators import action
from rest_framework.response import Response

from core_backend.base import BaseViewSet
from .filters import PaymentFilter
from .models import Payment
from .serializers import (
    OrderPaymentSummarySerializer,
    PaymentCreateSerializer,
    PaymentSerializer,
)
from .services import PaymentService

logger = logging.getLogger(__name__)


class PaymentViewSet(BaseViewSet):
    """
    Payments recorded against orders.

    POST creates a PENDING payment; complete, fail, cancel and refund move it
    through its statuses. Only cancelled payments can be deleted.
    """

    queryset = Payment.objects.all()
    serializer_class = PaymentSerializer
    filterset_class = PaymentFilter
    search_fields = ["transaction_id", "order__order_number", "reference_number"]
    ordering_fields = ["payment_date", "amount", "status"]
    ordering = ["-payment_date"]

    def create(self, request, *args, **kwargs):
        serializer = PaymentCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        payment = PaymentService.create_payment(**serializer.validated_data)
        return Response(self.get_serializer(payment).data, status=status.HTTP_201_CREATED)

    def perform_destroy(self, instance):
        PaymentService.delete_payment(instance)

    def _respond(self, payment):
        payment.refresh_from_db()
        return Response(self.get_serializer(payment).data)

    @action(detail=True, methods=["post"])
    def complete(self, request, pk=None):
        return self._respond(PaymentService.complete_payment(self.get_object()))

    @action(detail=True, methods=["post"])
    def fail(self, request, pk=None):
        return self._respond(PaymentService.fail_payment(self.get_object()))

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):
        return self._respond(PaymentService.cancel_payment(self.get_object()))

    @action(detail=True, methods=["post"])
    def refund(self, request, pk=None):
        return self._respond(PaymentService.refund_payment(self.get_object()))

    @action(detail=False, methods=["get"], url_path=r"order-summary/(?P<order_id>\d+)")
    def order_summary(self, request, order_id=None):
        summary = PaymentService.get_order_summary(int(order_id))
        return Response(
            OrderPaymentSummarySerializer(summary, context=self.get_serializer_context()).data
        )
