"""Unit tests for RequestIDMiddleware."""

import unittest
import uuid

from django.http import HttpRequest, HttpResponse

from core.constants import REQUEST_ID_HEADER
from core.logging.context import get_request_id
from core.middleware.request_id import RequestIDMiddleware


class TestRequestIDMiddleware(unittest.TestCase):
    """Test cases for RequestIDMiddleware."""

    def setUp(self):
        """Set up test fixtures."""
        self.seen_request_ids = []

        def mock_get_response(request):
            self.seen_request_ids.append(get_request_id())
            return HttpResponse("OK")

        self.middleware = RequestIDMiddleware(mock_get_response)

    def _create_request(self, headers=None):
        """Helper to create a test request."""
        request = HttpRequest()
        request.method = "GET"
        request.path = "/test/"
        if headers:
            for key, value in headers.items():
                request.META[f"HTTP_{key.upper().replace('-', '_')}"] = value
        return request

    def test_generates_request_id_when_not_present(self):
        """Test that middleware generates a UUID when no request ID is provided."""
        request = self._create_request()
        response = self.middleware(request)

        try:
            uuid.UUID(request.request_id)
        except ValueError:
            self.fail("Generated request ID is not a valid UUID")

        self.assertEqual(response[REQUEST_ID_HEADER], request.request_id)

    def test_uses_existing_request_id(self):
        """Test that middleware uses existing X-Request-ID header."""
        existing_id = str(uuid.uuid4())
        request = self._create_request(headers={REQUEST_ID_HEADER: existing_id})

        response = self.middleware(request)

        self.assertEqual(request.request_id, existing_id)
        self.assertEqual(response[REQUEST_ID_HEADER], existing_id)

    def test_request_id_bound_during_request(self):
        """Test that the ID is visible to code running inside the request."""
        request = self._create_request(headers={REQUEST_ID_HEADER: "abc"})

        self.middleware(request)

        self.assertEqual(self.seen_request_ids, ["abc"])

    def test_request_id_cleared_after_request(self):
        """Test that thread-local storage is cleaned up."""
        self.middleware(self._create_request())

        self.assertIsNone(get_request_id())

    def test_request_id_cleared_when_view_raises(self):
        """Test cleanup also happens on exceptions."""

        def failing_get_response(request):
            raise RuntimeError("view failed")

        middleware = RequestIDMiddleware(failing_get_response)

        with self.assertRaises(RuntimeError):
            middleware(self._create_request())

        self.assertIsNone(get_request_id())


if __name__ == "__main__":
    unittest.main()
