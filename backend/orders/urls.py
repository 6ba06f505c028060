from django.urls import path, include
from rest_framework import routers
from rest_framework_nested import routers as nested_routers
from .views import OrderViewSet, OrderItemViewSet

app_name = "orders"

router = routers.DefaultRouter()
router.register(r"orders", OrderViewSet, basename="order")

# /orders/<order_pk>/items/ and /orders/<order_pk>/items/<pk>/quantity/
items_router = nested_routers.NestedSimpleRouter(router, r"orders", lookup="order")
items_router.register(r"items", OrderItemViewSet, basename="order-item")

urlpatterns = [
    path("", include(items_router.urls)),
    path("", include(router.urls)),
]
