"""
Discounts API Integration Tests

CRUD with role scope rows, code validation endpoint, status toggle and the
delete guard for discounts that orders reference.
"""
import pytest
from decimal import Decimal
from datetime import timedelta
from django.core.exceptions import ValidationError as DjangoValidationError
from django.utils import timezone
from rest_framework import status

from core_backend.tests.fixtures import make_discount
from discounts.models import Discount, DiscountRoleScope
from orders.models import Order
from users.models import Employee


def discount_payload(**overrides):
    now = timezone.now()
    payload = {
        "code": "LUNCH15",
        "name": "Lunch deal",
        "type": Discount.DiscountType.PERCENTAGE,
        "value": "15",
        "start_date": (now - timedelta(days=1)).isoformat(),
        "end_date": (now + timedelta(days=30)).isoformat(),
    }
    payload.update(overrides)
    return payload


@pytest.mark.django_db
class TestDiscountCRUD:

    def test_create_with_role_scope(self, api_client, fries):
        response = api_client.post(
            "/api/discounts/",
            discount_payload(applicable_roles=[Employee.Role.CASHIER], applicable_products=[fries.id]),
            format="json",
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["applicable_roles"] == [Employee.Role.CASHIER]
        discount = Discount.objects.get(code="LUNCH15")
        assert list(discount.role_scopes.values_list("role", flat=True)) == [Employee.Role.CASHIER]
        assert list(discount.applicable_products.all()) == [fries]

    def test_code_unique_case_insensitive(self, api_client, percentage_discount):
        response = api_client.post("/api/discounts/", discount_payload(code="save10"), format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "code" in response.data

    def test_percentage_over_100_rejected(self, api_client):
        response = api_client.post("/api/discounts/", discount_payload(value="150"), format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_end_before_start_rejected(self, api_client):
        now = timezone.now()
        response = api_client.post(
            "/api/discounts/",
            discount_payload(start_date=now.isoformat(), end_date=(now - timedelta(days=1)).isoformat()),
            format="json",
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_buy_x_get_y_requires_free_product(self, api_client):
        response = api_client.post(
            "/api/discounts/",
            discount_payload(code="BXGY", type=Discount.DiscountType.BUY_X_GET_Y, value="0", buy_quantity=2),
            format="json",
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "free_product" in response.data

    def test_patch_checked_against_stored_values(self, api_client, percentage_discount):
        # Only `value` is sent; the stored PERCENTAGE type still caps it at 100.
        response = api_client.patch(
            f"/api/discounts/{percentage_discount.id}/", {"value": "150"}, format="json"
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "value" in response.data
        percentage_discount.refresh_from_db()
        assert percentage_discount.value == Decimal("10")

    def test_model_clean_matches_api_rules(self, fries):
        now = timezone.now()
        discount = Discount(
            code="BXGY2",
            name="Buy 2",
            type=Discount.DiscountType.BUY_X_GET_Y,
            start_date=now,
            end_date=now + timedelta(days=1),
            buy_quantity=2,
        )

        with pytest.raises(DjangoValidationError) as exc_info:
            discount.clean()
        assert "free_product" in exc_info.value.message_dict

        discount.free_product = fries
        discount.clean()

    def test_update_replaces_roles(self, api_client, percentage_discount):
        DiscountRoleScope.objects.create(discount=percentage_discount, role=Employee.Role.ADMIN)

        response = api_client.patch(
            f"/api/discounts/{percentage_discount.id}/",
            {"applicable_roles": [Employee.Role.CASHIER, Employee.Role.WAREHOUSE_STAFF]},
            format="json",
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data["applicable_roles"] == [Employee.Role.CASHIER, Employee.Role.WAREHOUSE_STAFF]

    def test_used_count_is_read_only(self, api_client, percentage_discount):
        api_client.patch(f"/api/discounts/{percentage_discount.id}/", {"used_count": 50}, format="json")

        percentage_discount.refresh_from_db()
        assert percentage_discount.used_count == 0

    def test_toggle_status(self, api_client, percentage_discount):
        response = api_client.post(f"/api/discounts/{percentage_discount.id}/toggle-status/")

        assert response.status_code == status.HTTP_200_OK
        assert response.data["is_active"] is False

    def test_delete_unused_discount(self, api_client, percentage_discount):
        response = api_client.delete(f"/api/discounts/{percentage_discount.id}/")

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not Discount.objects.filter(pk=percentage_discount.pk).exists()

    def test_delete_referenced_discount_rejected(self, api_client, percentage_discount, customer):
        Order.objects.create(customer=customer, discount=percentage_discount)

        response = api_client.delete(f"/api/discounts/{percentage_discount.id}/")

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data["code"] == "referenced"
        assert Discount.objects.filter(pk=percentage_discount.pk).exists()


@pytest.mark.django_db
class TestValidateCodeAPI:

    def test_valid_code_any_case(self, api_client, percentage_discount):
        response = api_client.get("/api/discounts/validate/Save10/")

        assert response.status_code == status.HTTP_200_OK
        assert response.data["valid"] is True
        assert response.data["discount"]["id"] == percentage_discount.id

    def test_unknown_code(self, api_client, db):
        response = api_client.get("/api/discounts/validate/NOPE/")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data["code"] == "not_found"

    def test_expired_code_reports_reason(self, api_client):
        now = timezone.now()
        make_discount(code="OLD", start_date=now - timedelta(days=9), end_date=now - timedelta(days=2))

        response = api_client.get("/api/discounts/validate/old/")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["code"] == "discount_rejected"
        assert response.data["reason"] == "expired"

    def test_exhausted_code(self, api_client):
        make_discount(code="GONE", usage_limit=3, used_count=3)

        response = api_client.get("/api/discounts/validate/GONE/")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["reason"] == "usage_exhausted"
