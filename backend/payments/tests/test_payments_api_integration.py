"""
Payments API Integration Tests

Request/response cycle for recording payments, the status actions, the
delete guard, list filters and the order payment summary endpoint.
"""
import pytest
from decimal import Decimal
from rest_framework import status

from orders.models import Order
from payments.models import Payment


@pytest.fixture
def order(api_client, global_settings, customer, fries):
    response = api_client.post(
        "/api/orders/",
        {
            "customer_id": customer.id,
            "order_type": Order.OrderType.TAKEAWAY,
            "items": [{"product_id": fries.id, "quantity": 2}],
        },
        format="json",
    )
    assert response.status_code == status.HTTP_201_CREATED
    return Order.objects.get(pk=response.data["id"])


def post_payment(api_client, order, amount, method=Payment.Method.CASH, **extra):
    payload = {"order_id": order.id, "method": method, "amount": amount}
    payload.update(extra)
    return api_client.post("/api/payments/", payload, format="json")


@pytest.mark.django_db
class TestPaymentCreateAPI:

    def test_create(self, api_client, order):
        response = post_payment(api_client, order, "20000", reference_number="POS-77")

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["status"] == Payment.Status.PENDING
        assert response.data["order_number"] == order.order_number
        assert Decimal(response.data["order_total"]) == Decimal("44000")
        assert Decimal(response.data["amount"]) == Decimal("20000")
        assert response.data["method_display"] == "Cash"
        assert response.data["transaction_id"].startswith("TXN")

    def test_amount_over_remaining_balance(self, api_client, order):
        response = post_payment(api_client, order, "50000")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["code"] == "validation_error"
        assert response.data["remaining_amount"] == "44000.00"

    def test_cancelled_order_conflict(self, api_client, order):
        api_client.post(f"/api/orders/{order.id}/cancel/")

        response = post_payment(api_client, order, "1000")

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data["code"] == "invalid_state"

    def test_unknown_order_not_found(self, api_client, global_settings):
        response = api_client.post(
            "/api/payments/",
            {"order_id": 999999, "method": Payment.Method.CASH, "amount": "1000"},
            format="json",
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_malformed_payload(self, api_client, order):
        response = post_payment(api_client, order, "0", method="CHEQUE")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "amount" in response.data
        assert "method" in response.data


@pytest.mark.django_db
class TestPaymentActionsAPI:

    def test_complete_then_refund(self, api_client, order):
        payment_id = post_payment(api_client, order, "44000").data["id"]

        response = api_client.post(f"/api/payments/{payment_id}/complete/")
        assert response.status_code == status.HTTP_200_OK
        assert response.data["status"] == Payment.Status.COMPLETED
        assert response.data["completed_at"] is not None

        response = api_client.post(f"/api/payments/{payment_id}/refund/")
        assert response.status_code == status.HTTP_200_OK
        assert response.data["status"] == Payment.Status.REFUNDED

    def test_cancel_completed_conflict(self, api_client, order):
        payment_id = post_payment(api_client, order, "1000").data["id"]
        api_client.post(f"/api/payments/{payment_id}/complete/")

        response = api_client.post(f"/api/payments/{payment_id}/cancel/")

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data["status"] == Payment.Status.COMPLETED

    def test_fail_then_cancel(self, api_client, order):
        payment_id = post_payment(api_client, order, "1000").data["id"]

        response = api_client.post(f"/api/payments/{payment_id}/fail/")
        assert response.data["status"] == Payment.Status.FAILED

        response = api_client.post(f"/api/payments/{payment_id}/cancel/")
        assert response.data["status"] == Payment.Status.CANCELLED

    def test_delete_requires_cancelled(self, api_client, order):
        payment_id = post_payment(api_client, order, "1000").data["id"]

        response = api_client.delete(f"/api/payments/{payment_id}/")
        assert response.status_code == status.HTTP_409_CONFLICT

        api_client.post(f"/api/payments/{payment_id}/cancel/")
        response = api_client.delete(f"/api/payments/{payment_id}/")
        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not Payment.objects.filter(pk=payment_id).exists()

    def test_patch_only_edits_notes_and_reference(self, api_client, order):
        payment_id = post_payment(api_client, order, "1000").data["id"]

        response = api_client.patch(
            f"/api/payments/{payment_id}/",
            {"notes": "paid at the counter", "status": Payment.Status.COMPLETED, "amount": "5"},
            format="json",
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data["notes"] == "paid at the counter"
        assert response.data["status"] == Payment.Status.PENDING
        assert Decimal(response.data["amount"]) == Decimal("1000")


@pytest.mark.django_db
class TestPaymentListAPI:

    def test_filter_by_order_and_status(self, api_client, order, customer, cola):
        other = api_client.post(
            "/api/orders/",
            {
                "customer_id": customer.id,
                "order_type": Order.OrderType.TAKEAWAY,
                "items": [{"product_id": cola.id, "quantity": 1}],
            },
            format="json",
        ).data["id"]
        completed_id = post_payment(api_client, order, "1000").data["id"]
        api_client.post(f"/api/payments/{completed_id}/complete/")
        post_payment(api_client, order, "2000")
        api_client.post(
            "/api/payments/", {"order_id": other, "method": Payment.Method.CASH, "amount": "500"}, format="json"
        )

        response = api_client.get(f"/api/payments/?order={order.id}")
        assert response.data["count"] == 2

        response = api_client.get(f"/api/payments/?order={order.id}&status=COMPLETED")
        assert response.data["count"] == 1
        assert response.data["results"][0]["id"] == completed_id

    def test_order_summary(self, api_client, order):
        first = post_payment(api_client, order, "30000").data["id"]
        api_client.post(f"/api/payments/{first}/complete/")
        post_payment(api_client, order, "14000", method=Payment.Method.MOBILE_PAYMENT)

        response = api_client.get(f"/api/payments/order-summary/{order.id}/")

        assert response.status_code == status.HTTP_200_OK
        assert response.data["order_number"] == order.order_number
        assert Decimal(response.data["paid_amount"]) == Decimal("30000")
        assert Decimal(response.data["remaining_amount"]) == Decimal("14000")
        assert response.data["is_fully_paid"] is False
        assert response.data["payment_count"] == 2
        assert [p["id"] for p in response.data["payments"]][0] == first

    def test_order_summary_unknown_order(self, api_client, global_settings):
        response = api_client.get("/api/payments/order-summary/999999/")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data["code"] == "not_found"
