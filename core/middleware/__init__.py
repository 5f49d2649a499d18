"""Middleware components for the notification service."""

from core.middleware.request_id import RequestIDMiddleware
from core.middleware.security_context import SecurityContextMiddleware

__all__ = [
    "RequestIDMiddleware",
    "SecurityContextMiddleware",
]
