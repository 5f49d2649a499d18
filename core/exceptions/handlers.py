"""Global exception handlers for the notification service."""

import logging
import traceback
from datetime import UTC, datetime
from typing import Any

from django.conf import settings
from django.core.exceptions import PermissionDenied
from django.http import Http404

from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler

from core.exceptions.downstream_exceptions import (
    DownstreamServiceError,
    DownstreamServiceUnavailableError,
)
from core.exceptions.errors import (
    NotificationServiceError,
    PushProviderError,
    TransientDBError,
)
from core.logging.context import get_request_id

logger = logging.getLogger(__name__)


def custom_exception_handler(
    exc: Exception, context: dict[str, Any]
) -> Response | None:
    """Custom exception handler for Django REST Framework.

    Every error leaves the service as ``{status, message, request_id,
    timestamp}``. Internal errors never carry partial bodies or details.

    Args:
        exc: The exception that was raised.
        context: Context dictionary containing request and view information.

    Returns:
        A Response object with the error details.
    """
    view = context.get("view")
    request = view.request if view else None
    request_id = get_request_id()

    response = exception_handler(exc, context)

    if response is not None:
        response.data = _create_error_response(
            status_code=response.status_code,
            message=_drf_message(exc, response),
            request_id=request_id,
        )
    elif isinstance(exc, NotificationServiceError):
        status_code = exc.status_code
        message = (
            str(exc)
            if status_code < 500 or isinstance(exc, TransientDBError)
            else NotificationServiceError.default_message
        )
        response = Response(
            _create_error_response(status_code, message, request_id),
            status=status_code,
        )
    elif isinstance(exc, PushProviderError):
        response = Response(
            _create_error_response(
                status.HTTP_502_BAD_GATEWAY,
                "Push provider request failed.",
                request_id,
            ),
            status=status.HTTP_502_BAD_GATEWAY,
        )
    elif isinstance(exc, DownstreamServiceUnavailableError):
        response = Response(
            _create_error_response(
                status.HTTP_503_SERVICE_UNAVAILABLE,
                f"{exc.service_name} is unavailable.",
                request_id,
            ),
            status=status.HTTP_503_SERVICE_UNAVAILABLE,
        )
    elif isinstance(exc, DownstreamServiceError):
        response = Response(
            _create_error_response(
                status.HTTP_502_BAD_GATEWAY,
                f"{exc.service_name} request failed.",
                request_id,
            ),
            status=status.HTTP_502_BAD_GATEWAY,
        )
    elif isinstance(exc, Http404):
        response = Response(
            _create_error_response(
                status.HTTP_404_NOT_FOUND,
                "The requested resource was not found.",
                request_id,
            ),
            status=status.HTTP_404_NOT_FOUND,
        )
    elif isinstance(exc, PermissionDenied):
        response = Response(
            _create_error_response(
                status.HTTP_403_FORBIDDEN,
                "You do not have permission to perform this action.",
                request_id,
            ),
            status=status.HTTP_403_FORBIDDEN,
        )
    else:
        response = Response(
            _create_error_response(
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                "An internal server error occurred.",
                request_id,
            ),
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    if request_id:
        response["X-Request-ID"] = request_id

    _log_exception(exc, request, response)

    return response


def _drf_message(exc: Exception, response: Response) -> str:
    """Flatten a DRF error detail into a single message."""
    detail = getattr(exc, "detail", None)
    if isinstance(detail, str):
        return detail
    if isinstance(detail, list) and detail:
        return str(detail[0])
    if isinstance(detail, dict) and detail:
        field, errors = next(iter(detail.items()))
        first = errors[0] if isinstance(errors, list) and errors else errors
        return f"{field}: {first}"
    return str(response.status_text)


def _create_error_response(
    status_code: int, message: str, request_id: str | None
) -> dict[str, Any]:
    """Create a standardized error response.

    Args:
        status_code: The HTTP status code.
        message: The error message to return to the client.
        request_id: The request ID for tracing.

    Returns:
        Dictionary with standard error response format.
    """
    return {
        "status": status_code,
        "message": message,
        "request_id": request_id,
        "timestamp": datetime.now(UTC).isoformat(),
    }


def _log_exception(
    exc: Exception,
    request: Any,
    response: Response,
) -> None:
    """Log exception details, 4xx as warnings and everything else as errors."""
    if isinstance(exc, (Http404, PermissionDenied)):
        log_level = logging.WARNING
    elif isinstance(exc, (APIException, NotificationServiceError)):
        log_level = logging.WARNING if response.status_code < 500 else logging.ERROR
    else:
        log_level = logging.ERROR

    request_path = request.path if request else "unknown"
    request_method = request.method if request else "unknown"

    log_message = (
        f"Exception occurred: {type(exc).__name__}: {exc} | "
        f"Path: {request_method} {request_path} | "
        f"Status: {response.status_code}"
    )

    if settings.DEBUG or log_level == logging.ERROR:
        stack_trace = "".join(
            traceback.format_exception(type(exc), exc, exc.__traceback__)
        )
        log_message += f"\nStack trace:\n{stack_trace}"

    logger.log(log_level, log_message)
