"""Unit tests for exception handlers."""

import unittest
from unittest.mock import Mock, patch

from django.core.exceptions import PermissionDenied
from django.http import Http404

from rest_framework import status
from rest_framework.exceptions import NotAuthenticated, NotFound, ValidationError
from rest_framework.views import APIView

from core.enums import PushFailureReason
from core.exceptions import (
    ConflictError,
    DownstreamServiceError,
    DownstreamServiceUnavailableError,
    ForbiddenError,
    InternalError,
    NotFoundError,
    PermanentProviderError,
    TransactionAbortedError,
    ValidationFailedError,
)
from core.exceptions.handlers import custom_exception_handler


class TestCustomExceptionHandler(unittest.TestCase):
    """Test cases for custom exception handler."""

    def setUp(self):
        """Set up test fixtures."""
        self.mock_request = Mock()
        self.mock_request.path = "/test/"
        self.mock_request.method = "GET"
        self.mock_request.META = {"REMOTE_ADDR": "127.0.0.1"}

        self.mock_view = Mock(spec=APIView)
        self.mock_view.request = self.mock_request

        self.context = {"view": self.mock_view, "request": self.mock_request}

        patcher = patch("core.exceptions.handlers.get_request_id")
        self.mock_get_request_id = patcher.start()
        self.mock_get_request_id.return_value = "test-request-id"
        self.addCleanup(patcher.stop)

    def assert_error_body(self, response, status_code, message=None):
        """Check the standard error body."""
        self.assertEqual(response.status_code, status_code)
        self.assertEqual(response.data["status"], status_code)
        self.assertEqual(response.data["request_id"], "test-request-id")
        self.assertIn("timestamp", response.data)
        if message is not None:
            self.assertEqual(response.data["message"], message)

    def test_handles_drf_not_found_exception(self):
        """Test that DRF NotFound exception is handled correctly."""
        response = custom_exception_handler(NotFound("Resource not found"), self.context)

        self.assert_error_body(response, status.HTTP_404_NOT_FOUND, "Resource not found")
        self.assertEqual(response["X-Request-ID"], "test-request-id")

    def test_handles_drf_validation_error(self):
        """Test that field errors are flattened into one message."""
        exc = ValidationError({"subject": ["This field is required."]})

        response = custom_exception_handler(exc, self.context)

        self.assert_error_body(
            response, status.HTTP_400_BAD_REQUEST, "subject: This field is required."
        )

    def test_handles_not_authenticated(self):
        """Test that missing credentials map to 401."""
        response = custom_exception_handler(NotAuthenticated(), self.context)

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_handles_django_http404(self):
        """Test that Django Http404 exception is handled correctly."""
        response = custom_exception_handler(Http404("Page not found"), self.context)

        self.assert_error_body(response, status.HTTP_404_NOT_FOUND)

    def test_handles_django_permission_denied(self):
        """Test that Django PermissionDenied exception is handled correctly."""
        response = custom_exception_handler(PermissionDenied("Access denied"), self.context)

        self.assert_error_body(response, status.HTTP_403_FORBIDDEN)

    def test_service_errors_keep_their_status_and_message(self):
        """Test the error taxonomy maps to HTTP statuses."""
        cases = [
            (NotFoundError("Message not found"), 404),
            (ValidationFailedError("Missing subject"), 400),
            (ForbiddenError("Wrong tenant"), 403),
            (ConflictError("Duplicate"), 409),
        ]
        for exc, status_code in cases:
            with self.subTest(exc=type(exc).__name__):
                response = custom_exception_handler(exc, self.context)
                self.assert_error_body(response, status_code, str(exc))

    def test_transaction_aborted_is_service_unavailable(self):
        """Test exhausted retries map to 503 with a retry hint."""
        response = custom_exception_handler(TransactionAbortedError(), self.context)

        self.assert_error_body(
            response,
            status.HTTP_503_SERVICE_UNAVAILABLE,
            TransactionAbortedError.default_message,
        )

    def test_internal_error_hides_details(self):
        """Test internal error messages never reach the client."""
        exc = InternalError("connection string postgres://secret")

        response = custom_exception_handler(exc, self.context)

        self.assert_error_body(
            response,
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "An internal server error occurred.",
        )

    def test_push_provider_error_is_bad_gateway(self):
        """Test provider failures map to 502."""
        exc = PermanentProviderError(PushFailureReason.AUTHENTICATION, "bad credentials")

        response = custom_exception_handler(exc, self.context)

        self.assert_error_body(response, status.HTTP_502_BAD_GATEWAY)

    def test_downstream_unavailable_is_service_unavailable(self):
        """Test 5xx from a downstream service maps to 503."""
        exc = DownstreamServiceUnavailableError("core", 503)

        response = custom_exception_handler(exc, self.context)

        self.assert_error_body(
            response, status.HTTP_503_SERVICE_UNAVAILABLE, "core is unavailable."
        )

    def test_downstream_error_is_bad_gateway(self):
        """Test other downstream failures map to 502."""
        exc = DownstreamServiceError("boom", service_name="core", status_code=400)

        response = custom_exception_handler(exc, self.context)

        self.assert_error_body(response, status.HTTP_502_BAD_GATEWAY, "core request failed.")

    def test_handles_unexpected_exception(self):
        """Test unexpected exceptions become a generic 500."""
        response = custom_exception_handler(ValueError("Unexpected"), self.context)

        self.assert_error_body(
            response,
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "An internal server error occurred.",
        )

    def test_handles_missing_view_in_context(self):
        """Test handler works without a view in context."""
        response = custom_exception_handler(ValueError("Unexpected"), {})

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)

    def test_no_request_id_header_without_request_id(self):
        """Test the header is omitted outside a tagged request."""
        self.mock_get_request_id.return_value = None

        response = custom_exception_handler(NotFoundError(), self.context)

        self.assertNotIn("X-Request-ID", response)
        self.assertIsNone(response.data["request_id"])


if __name__ == "__main__":
    unittest.main()
