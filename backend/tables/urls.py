from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import TableViewSet, TableGroupViewSet

app_name = "tables"

router = DefaultRouter()
router.register(r"tables", TableViewSet, basename="table")
router.register(r"table-groups", TableGroupViewSet, basename="table-group")

urlpatterns = [
    path("", include(router.urls)),
]
