"""
Custom Exception Handler for API
"""
from django.conf import settings
from rest_framework import exceptions as drf_exceptions
from rest_framework.views import exception_handler
from rest_framework.response import Response
from rest_framework import status
import logging

from apps.core.exceptions import CommerceException

logger = logging.getLogger(__name__)

DRF_KINDS = {
    drf_exceptions.ValidationError: "ValidationError",
    drf_exceptions.ParseError: "ValidationError",
    drf_exceptions.NotAuthenticated: "Unauthorized",
    drf_exceptions.AuthenticationFailed: "Unauthorized",
    drf_exceptions.PermissionDenied: "Forbidden",
    drf_exceptions.NotFound: "NotFound",
    drf_exceptions.MethodNotAllowed: "MethodNotAllowed",
    drf_exceptions.Throttled: "Throttled",
}


def _drf_kind(exc) -> str:
    for exc_class, kind in DRF_KINDS.items():
        if isinstance(exc, exc_class):
            return kind
    return "Error"


def commerce_error_response(exc: CommerceException) -> Response:
    """Render a business-rule failure with its stable kind."""
    body = {
        "error": True,
        "kind": exc.kind,
        "message": exc.message,
        "status_code": exc.http_status,
    }
    field = getattr(exc, "field", None)
    if field:
        body["field"] = field
    return Response(body, status=exc.http_status)


def custom_exception_handler(exc, context):
    """
    Custom exception handler that provides consistent error responses.
    """
    if isinstance(exc, CommerceException):
        return commerce_error_response(exc)

    # Call REST framework's default exception handler first
    response = exception_handler(exc, context)

    if response is not None:
        # Customize the response format
        details = response.data if isinstance(response.data, dict) else {"detail": response.data}
        message = details.get("detail", "Invalid request") if isinstance(details, dict) else str(exc)
        response.data = {
            "error": True,
            "kind": _drf_kind(exc),
            "message": str(message),
            "details": details,
            "status_code": response.status_code
        }
    else:
        # Handle unexpected exceptions
        logger.exception(f"Unhandled exception: {exc}")
        body = {
            "error": True,
            "kind": "Internal",
            "message": "An unexpected error occurred",
            "status_code": 500
        }
        if settings.DEBUG:
            body["details"] = {"exception": str(exc)}
        response = Response(body, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    return response
