"""Error taxonomy of the notification dispatch service.

Each error carries the HTTP status it maps to when it reaches the API layer.
"""

from core.enums import PushFailureReason


class NotificationServiceError(Exception):
    """Base class for service errors."""

    status_code = 500
    default_message = "An internal server error occurred."

    def __init__(self, message: str | None = None, detail: str | None = None):
        """Initialize service error.

        Args:
            message: Error message shown to the client
            detail: Additional details about the error
        """
        self.detail = detail
        super().__init__(message or self.default_message)


class NotFoundError(NotificationServiceError):
    """Requested entity does not exist in the tenant (404)."""

    status_code = 404
    default_message = "The requested resource was not found."


class ValidationFailedError(NotificationServiceError):
    """Input failed validation (400)."""

    status_code = 400
    default_message = "Invalid request."


class UnauthorizedError(NotificationServiceError):
    """Caller is not authenticated (401)."""

    status_code = 401
    default_message = "Authentication required."


class ForbiddenError(NotificationServiceError):
    """Caller may not perform the operation (403)."""

    status_code = 403
    default_message = "You do not have permission to perform this action."


class ConflictError(NotificationServiceError):
    """Unique key violation or conflicting state (409)."""

    status_code = 409
    default_message = "The request conflicts with the current state."


class TransientDBError(NotificationServiceError):
    """Driver or network failure talking to the database (503)."""

    status_code = 503
    default_message = "The database is temporarily unavailable."


class TransactionAbortedError(TransientDBError):
    """A transaction gave up after exhausting its retries (503)."""

    default_message = "The transaction was aborted, retry the request."


class InternalError(NotificationServiceError):
    """Unexpected failure (500)."""


class PushProviderError(Exception):
    """Base class for push provider failures."""

    def __init__(self, message: str, tenant: tuple[str, str] | None = None):
        """Initialize push provider error.

        Args:
            message: Provider error message
            tenant: (org_id, app_id) the call was made for
        """
        self.tenant = tenant
        super().__init__(message)


class TransientProviderError(PushProviderError):
    """Provider call may succeed later: quota, unavailability, timeouts."""


class PermanentProviderError(PushProviderError):
    """Provider call will never succeed as issued."""

    def __init__(
        self,
        reason: PushFailureReason,
        message: str,
        tenant: tuple[str, str] | None = None,
    ):
        """Initialize permanent provider error.

        Args:
            reason: Classified failure reason
            message: Provider error message
            tenant: (org_id, app_id) the call was made for
        """
        self.reason = reason
        super().__init__(message, tenant=tenant)

    @property
    def is_token_error(self) -> bool:
        """Whether the token used must be unregistered."""
        return self.reason.is_token_error
