"""
API exception handlers.

This module provides custom exception handling for REST API responses.
Every domain error kind maps to one HTTP status; the body is always
``{"error": {"code": ..., "message": ...}}``.
"""

import logging
from typing import Any, Dict, Optional

from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import APIException, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

from core.domain.exceptions import (
    AuthorizationDeniedError,
    ConflictError,
    DomainException,
    InvalidInputError,
    LimitExceededError,
    NotFoundError,
    RateLimitedError,
    ValidationFailedError,
)
from core.metrics import errors_total

logger = logging.getLogger(__name__)

# Checked in order; the first matching kind wins
DOMAIN_STATUS_CODES = (
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ValidationFailedError, status.HTTP_403_FORBIDDEN),
    (AuthorizationDeniedError, status.HTTP_403_FORBIDDEN),
    (LimitExceededError, status.HTTP_403_FORBIDDEN),
    (ConflictError, status.HTTP_409_CONFLICT),
    (RateLimitedError, status.HTTP_429_TOO_MANY_REQUESTS),
    (InvalidInputError, status.HTTP_400_BAD_REQUEST),
)


def error_body(code: str, message: str, details: Any = None) -> dict:
    """Build the standard error envelope."""
    error = {"code": code, "message": message}
    if details:
        error["details"] = details
    return {"error": error}


def invalid_input_response(errors: Any) -> Response:
    """400 response for serializer validation errors."""
    return Response(
        error_body("INVALID_INPUT", "Request validation failed", errors),
        status=status.HTTP_400_BAD_REQUEST,
    )


def status_code_for(exc: DomainException) -> int:
    """HTTP status for a domain exception."""
    for kind, status_code in DOMAIN_STATUS_CODES:
        if isinstance(exc, kind):
            return status_code
    return status.HTTP_400_BAD_REQUEST


def custom_exception_handler(exc: Exception, context: Dict[str, Any]) -> Response:
    """Custom exception handler for REST API."""
    trace_id = _get_trace_id(context)
    endpoint = _get_endpoint(context)

    if isinstance(exc, DomainException):
        response = _handle_domain_exception(exc, trace_id)
    elif isinstance(exc, ValidationError):
        response = invalid_input_response(exc.detail)
    elif isinstance(exc, APIException):
        response = exception_handler(exc, context)
        code = exc.default_code.upper().replace("-", "_")
        detail = exc.detail if isinstance(exc.detail, str) else exc.default_detail
        response.data = error_body(code, str(detail))
    elif isinstance(exc, Http404):
        response = Response(
            error_body("NOT_FOUND", "Resource not found"),
            status=status.HTTP_404_NOT_FOUND,
        )
    else:
        return _handle_unexpected_exception(exc, context, trace_id, endpoint)

    errors_total.labels(error_type=response.data["error"]["code"], endpoint=endpoint).inc()
    if trace_id:
        response["X-Trace-ID"] = trace_id
    return response


def _get_trace_id(context: Dict[str, Any]) -> Optional[str]:
    """Extract trace ID from request context."""
    request = context.get("request")
    if not request:
        return None
    return getattr(request, "trace_id", None) or getattr(request, "correlation_id", None)


def _get_endpoint(context: Dict[str, Any]) -> str:
    view = context.get("view")
    return view.__class__.__name__ if view else "unknown"


def _handle_domain_exception(exc: DomainException, trace_id: Optional[str]) -> Response:
    """Handle domain-specific exceptions."""
    status_code = status_code_for(exc)
    details = exc.details if isinstance(exc, ValidationFailedError) else None

    logger.warning(
        "Domain exception: %s - %s",
        exc.code,
        exc.message,
        extra={"trace_id": trace_id, "status_code": status_code},
    )
    response = Response(error_body(exc.code, exc.message, details), status=status_code)
    if isinstance(exc, RateLimitedError) and exc.retry_after:
        response["Retry-After"] = str(exc.retry_after)
    return response


def _handle_unexpected_exception(
    exc: Exception, context: Dict[str, Any], trace_id: Optional[str], endpoint: str
) -> Response:
    """Handle unexpected or untracked exceptions."""
    logger.error("Unexpected error: %s", exc, extra={"trace_id": trace_id}, exc_info=True)
    errors_total.labels(error_type="INTERNAL_ERROR", endpoint=endpoint).inc()
    response = Response(
        error_body("INTERNAL_ERROR", "An internal error occurred"),
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
    if trace_id:
        response["X-Trace-ID"] = trace_id
    return response
