from decimal import Decimal
import logging

from django.db import transaction
from django.db.models import Sum
from django.utils import timezone

from core_backend.exceptions import InvalidState, NotFound, ValidationError
from orders.calculators import quantize
from orders.models import Order
from .models import Payment

logger = logging.getLogger(__name__)


class PaymentService:
    """
    Records payments against orders and moves them through their statuses.

    PENDING -> COMPLETED | FAILED | CANCELLED, FAILED -> COMPLETED | CANCELLED,
    COMPLETED -> REFUNDED. REFUNDED and CANCELLED are final.
    """

    VALID_TRANSITIONS = {
        Payment.Status.PENDING: [
            Payment.Status.COMPLETED,
            Payment.Status.FAILED,
            Payment.Status.CANCELLED,
        ],
        Payment.Status.FAILED: [
            Payment.Status.COMPLETED,
            Payment.Status.CANCELLED,
        ],
        Payment.Status.COMPLETED: [
            Payment.Status.REFUNDED,
        ],
        Payment.Status.REFUNDED: [],
        Payment.Status.CANCELLED: [],
    }

    @staticmethod
    def paid_amount(order: Order) -> Decimal:
        """Sum of the order's COMPLETED payments."""
        total = order.payments.filter(status=Payment.Status.COMPLETED).aggregate(
            total=Sum("amount")
        )["total"]
        return quantize(total or Decimal("0"))

    @staticmethod
    def remaining_amount(order: Order) -> Decimal:
        return quantize(order.total_amount - PaymentService.paid_amount(order))

    @staticmethod
    def _lock_order(order_id) -> Order:
        try:
            return Order.objects.select_for_update().get(pk=order_id)
        except Order.DoesNotExist:
            raise NotFound("Order", order_id)

    @staticmethod
    def _check_fits_balance(order: Order, amount: Decimal):
        remaining = PaymentService.remaining_amount(order)
        if amount > remaining:
            raise ValidationError(
                f"Payment amount {amount} exceeds the remaining balance {remaining} "
                f"of order {order.order_number}.",
                order_id=order.pk,
                remaining_amount=remaining,
            )

    @staticmethod
    def _transition(payment: Payment, target_status: str, message: str) -> Payment:
        allowed = PaymentService.VALID_TRANSITIONS.get(payment.status, [])
        if target_status not in allowed:
            raise InvalidState(message, payment_id=payment.pk, status=payment.status)

        old_status = payment.status
        payment.status = target_status
        update_fields = ["status", "updated_at"]
        if target_status == Payment.Status.COMPLETED:
            payment.completed_at = timezone.now()
            update_fields.append("completed_at")
        payment.save(update_fields=update_fields)

        logger.info(
            f"Payment {payment.transaction_id}: status transition {old_status} -> {target_status}"
        )
        return payment

    @staticmethod
    @transaction.atomic
    def create_payment(
        *, order_id, method, amount, reference_number="", notes=""
    ) -> Payment:
        """
        Records a PENDING payment. The order must exist and not be cancelled,
        and the amount may not exceed what is left after its completed
        payments.
        """
        if method not in Payment.Method.values:
            raise ValidationError(f"'{method}' is not a valid payment method.")
        amount = Decimal(amount)
        if amount <= 0:
            raise ValidationError("Payment amount must be greater than zero.")

        order = PaymentService._lock_order(order_id)
        if order.status == Order.Status.CANCELLED:
            raise InvalidState(
                f"Order {order.order_number} is cancelled and cannot be paid.",
                order_id=order.pk,
                status=order.status,
            )
        PaymentService._check_fits_balance(order, amount)

        payment = Payment.objects.create(
            order=order,
            method=method,
            amount=quantize(amount),
            reference_number=reference_number or "",
            notes=notes or "",
        )
        logger.info(
            f"Recorded payment {payment.transaction_id} of {payment.amount} "
            f"({payment.method}) for order {order.order_number}"
        )
        return payment

    @staticmethod
    @transaction.atomic
    def complete_payment(payment: Payment) -> Payment:
        """
        Confirms a pending or failed payment. The balance is checked again so
        that two pending payments cannot together overpay the order.
        """
        order = PaymentService._lock_order(payment.order_id)
        payment = Payment.objects.select_for_update().get(pk=payment.pk)
        if payment.status == Payment.Status.COMPLETED:
            raise InvalidState("Payment is already completed.", payment_id=payment.pk)
        if payment.status in (Payment.Status.PENDING, Payment.Status.FAILED):
            if order.status == Order.Status.CANCELLED:
                raise InvalidState(
                    f"Order {order.order_number} is cancelled and cannot be paid.",
                    order_id=order.pk,
                    status=order.status,
                )
            PaymentService._check_fits_balance(order, payment.amount)

        return PaymentService._transition(
            payment,
            Payment.Status.COMPLETED,
            f"A {payment.get_status_display().lower()} payment cannot be completed.",
        )

    @staticmethod
    @transaction.atomic
    def fail_payment(payment: Payment) -> Payment:
        payment = Payment.objects.select_for_update().get(pk=payment.pk)
        return PaymentService._transition(
            payment,
            Payment.Status.FAILED,
            "Only pending payments can be marked as failed.",
        )

    @staticmethod
    @transaction.atomic
    def cancel_payment(payment: Payment) -> Payment:
        payment = Payment.objects.select_for_update().get(pk=payment.pk)
        if payment.status == Payment.Status.COMPLETED:
            message = "Completed payments cannot be cancelled; refund them instead."
        else:
            message = f"A {payment.get_status_display().lower()} payment cannot be cancelled."
        return PaymentService._transition(payment, Payment.Status.CANCELLED, message)

    @staticmethod
    @transaction.atomic
    def refund_payment(payment: Payment) -> Payment:
        payment = Payment.objects.select_for_update().get(pk=payment.pk)
        return PaymentService._transition(
            payment,
            Payment.Status.REFUNDED,
            "Only completed payments can be refunded.",
        )

    @staticmethod
    def delete_payment(payment: Payment):
        """Only cancelled payments can be deleted."""
        if payment.status != Payment.Status.CANCELLED:
            raise InvalidState(
                "Only cancelled payments can be deleted.",
                payment_id=payment.pk,
                status=payment.status,
            )
        logger.info(f"Deleting payment {payment.transaction_id}")
        payment.delete()

    @staticmethod
    def get_order_summary(order_id) -> dict:
        """
        Paid, refunded and remaining amounts of an order, with every payment
        recorded against it.
        """
        order = Order.objects.filter(pk=order_id).first()
        if order is None:
            raise NotFound("Order", order_id)

        payments = list(order.payments.order_by("payment_date", "pk"))
        paid = sum(
            (p.amount for p in payments if p.status == Payment.Status.COMPLETED), Decimal("0")
        )
        refunded = sum(
            (p.amount for p in payments if p.status == Payment.Status.REFUNDED), Decimal("0")
        )
        return {
            "order_id": order.pk,
            "order_number": order.order_number,
            "order_total": order.total_amount,
            "paid_amount": quantize(paid),
            "refunded_amount": quantize(refunded),
            "remaining_amount": quantize(order.total_amount - paid),
            "is_fully_paid": paid >= order.total_amount,
            "payment_count": len(payments),
            "payments": payments,
        }
