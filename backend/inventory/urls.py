from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import (
    IngredientViewSet,
    ProductIngredientViewSet,
    StockMovementViewSet,
    ProductAvailabilityView,
)

router = DefaultRouter()
router.register(r"ingredients", IngredientViewSet, basename="ingredient")
router.register(r"product-ingredients", ProductIngredientViewSet, basename="product-ingredient")
router.register(r"stock-movements", StockMovementViewSet, basename="stock-movement")

app_name = "inventory"

urlpatterns = [
    path("", include(router.urls)),
    path(
        "products/<int:product_id>/availability/",
        ProductAvailabilityView.as_view(),
        name="product-availability",
    ),
]
