from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import CustomerViewSet, CustomerTierViewSet

app_name = "customers"

router = DefaultRouter()
router.register(r"customer-tiers", CustomerTierViewSet, basename="customer-tier")
router.register(r"customers", CustomerViewSet, basename="customer")

urlpatterns = [
    path("", include(router.urls)),
]
