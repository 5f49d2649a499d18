"""Request ID middleware for log correlation."""

import time
import uuid
from collections.abc import Callable

from django.http import HttpRequest, HttpResponse

import structlog

from core.constants import REQUEST_ID_HEADER
from core.logging.context import clear_request_id, set_request_id

logger = structlog.get_logger(__name__)


class RequestIDMiddleware:
    """Tags every request with an ID and logs its completion.

    An incoming ``X-Request-ID`` is reused, otherwise a UUID is generated.
    The ID is bound to the thread for the request duration, so every log
    line and every error body of the request carries it, and is echoed in
    the response headers.
    """

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        set_request_id(request_id)
        request.request_id = request_id  # type: ignore[attr-defined]
        started = time.monotonic()

        try:
            response = self.get_response(request)
            response[REQUEST_ID_HEADER] = request_id
            logger.info(
                "request_completed",
                method=request.method,
                path=request.path,
                status=response.status_code,
                duration_ms=round((time.monotonic() - started) * 1000, 2),
            )
            return response
        finally:
            clear_request_id()
