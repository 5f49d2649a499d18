"""Exception handling utilities for the notification service."""

from core.exceptions.downstream_exceptions import (
    DownstreamServiceError,
    DownstreamServiceUnavailableError,
    ServiceTokenError,
)
from core.exceptions.errors import (
    ConflictError,
    ForbiddenError,
    InternalError,
    NotFoundError,
    NotificationServiceError,
    PermanentProviderError,
    PushProviderError,
    TransactionAbortedError,
    TransientDBError,
    TransientProviderError,
    UnauthorizedError,
    ValidationFailedError,
)

__all__ = [
    "ConflictError",
    "DownstreamServiceError",
    "DownstreamServiceUnavailableError",
    "ForbiddenError",
    "InternalError",
    "NotFoundError",
    "NotificationServiceError",
    "PermanentProviderError",
    "PushProviderError",
    "ServiceTokenError",
    "TransactionAbortedError",
    "TransientDBError",
    "TransientProviderError",
    "UnauthorizedError",
    "ValidationFailedError",
]
