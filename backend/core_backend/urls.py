"""
URL configuration for core_backend project.

Every app mounts its router under /api/; inventory and settings keep their
own prefix.
"""

from django.contrib import admin
from django.urls import path, include
from django.http import JsonResponse


def health_check(request):
    """Simple health check endpoint that doesn't require authentication"""
    return JsonResponse({"status": "ok", "message": "Backend is running"})


urlpatterns = [
    path("api/health/", health_check, name="health_check"),
    path("admin/", admin.site.urls),
    path("api/inventory/", include("inventory.urls")),
    path("api/settings/", include("settings.urls")),
    # These apps register their own top-level resource names (orders, discounts, ...).
    path("api/", include("orders.urls")),
    path("api/", include("payments.urls")),
    path("api/", include("discounts.urls")),
    path("api/", include("products.urls")),
    path("api/", include("customers.urls")),
    path("api/", include("users.urls")),
    path("api/", include("tables.urls")),
]
