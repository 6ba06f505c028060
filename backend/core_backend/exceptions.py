"""
Domain exceptions shared by the POS services, and the DRF exception handler
that turns them into API responses.

Services raise these; views let them propagate and ``pos_exception_handler``
maps each kind to its HTTP status with a ``{"error", "code", ...}`` body.
"""
import logging

from django.db import models
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class POSError(Exception):
    """Base class for every business rejection raised by the service layer."""

    code = "error"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message, **context):
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self):
        payload = {"error": self.message, "code": self.code}
        for key, value in self.context.items():
            payload[key] = value if isinstance(value, (int, str, bool, type(None))) else str(value)
        return payload


class NotFound(POSError):
    """A referenced customer, employee, table, product, discount or order does not exist."""

    code = "not_found"
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, resource, identifier):
        super().__init__(
            f"{resource} with id {identifier} not found.",
            resource=resource,
            identifier=identifier,
        )


class InvalidState(POSError):
    code = "invalid_state"
    status_code = status.HTTP_409_CONFLICT


class InsufficientStock(POSError):
    code = "insufficient_stock"

    def __init__(self, product, requested, available, message=None):
        if message is None:
            message = (
                f"Not enough stock for '{product.name}': requested {requested}, "
                f"available {available}."
            )
        super().__init__(
            message,
            product_id=product.pk,
            requested=requested,
            available=available,
        )
        self.product = product
        self.requested = requested
        self.available = available


class DiscountRejectionReason(models.TextChoices):
    INACTIVE = "inactive", "Discount is disabled"
    NOT_STARTED = "not_started", "Discount has not started yet"
    EXPIRED = "expired", "Discount has expired"
    USAGE_EXHAUSTED = "usage_exhausted", "Discount usage limit reached"
    SCOPE_PRODUCT = "scope_product", "Discount does not apply to the ordered products"
    SCOPE_CATEGORY = "scope_category", "Discount does not apply to the ordered categories"
    SCOPE_TIER = "scope_tier", "Discount does not apply to this customer tier"
    SCOPE_ROLE = "scope_role", "Discount does not apply to this employee role"
    BELOW_MINIMUM = "below_minimum", "Order is below the discount minimum amount"


class DiscountRejected(POSError):
    code = "discount_rejected"

    def __init__(self, reason, message=None, **context):
        reason = DiscountRejectionReason(reason)
        super().__init__(message or reason.label, reason=reason.value, **context)
        self.reason = reason


class ValidationError(POSError):
    """Malformed input: non-positive quantity, empty line list and the like."""

    code = "validation_error"


class DuplicateItem(POSError):
    code = "duplicate_item"
    status_code = status.HTTP_409_CONFLICT


class ReferencedResource(POSError):
    """Deleting a record that other records still point at."""

    code = "referenced"
    status_code = status.HTTP_409_CONFLICT


def pos_exception_handler(exc, context):
    """
    DRF exception handler. Falls back to the framework's default handling for
    anything that is not a POSError.
    """
    if isinstance(exc, POSError):
        request = context.get("request")
        path = request.path if request is not None else ""
        logger.warning(f"{exc.__class__.__name__} on {path}: {exc.message}")
        return Response(exc.to_dict(), status=exc.status_code)

    return exception_handler(exc, context)
