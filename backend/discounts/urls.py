from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import DiscountViewSet, validate_discount_code

app_name = "discounts"

router = DefaultRouter()
router.register(r"discounts", DiscountViewSet, basename="discount")

urlpatterns = [
    path("discounts/validate/<str:code>/", validate_discount_code, name="validate-discount-code"),
    path("", include(router.urls)),
]
