"""Security context middleware."""

from collections.abc import Callable

from django.http import HttpRequest, HttpResponse

from core.auth.context import clear_current_claims


class SecurityContextMiddleware:
    """Scopes the caller's claims to the request.

    Authentication classes store the validated claims in thread-local
    storage so services can read them through ``get_current_claims()``.
    This middleware drops them when the request completes, so a thread
    serving the next request never sees the previous caller.
    """

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        clear_current_claims()
        try:
            return self.get_response(request)
        finally:
            clear_current_claims()
