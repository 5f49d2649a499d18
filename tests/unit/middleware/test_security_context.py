"""Unit tests for SecurityContextMiddleware."""

import unittest

from django.http import HttpRequest, HttpResponse

from core.auth.claims import CoreClaims
from core.auth.context import get_current_claims, set_current_claims
from core.middleware.security_context import SecurityContextMiddleware


class TestSecurityContextMiddleware(unittest.TestCase):
    """Test cases for SecurityContextMiddleware."""

    def setUp(self):
        """Set up test fixtures."""
        self.claims = CoreClaims(org_id="org", app_id="app", subject="u1")

    def test_stale_claims_are_dropped_before_request(self):
        """Test a previous caller's claims never reach the next request."""
        seen = []

        def get_response(request):
            seen.append(get_current_claims())
            return HttpResponse("OK")

        set_current_claims(self.claims)
        SecurityContextMiddleware(get_response)(HttpRequest())

        self.assertEqual(seen, [None])

    def test_claims_cleared_after_request(self):
        """Test claims set during the request are removed afterwards."""

        def get_response(request):
            set_current_claims(self.claims)
            return HttpResponse("OK")

        SecurityContextMiddleware(get_response)(HttpRequest())

        self.assertIsNone(get_current_claims())

    def test_claims_cleared_when_view_raises(self):
        """Test cleanup also happens on exceptions."""

        def get_response(request):
            set_current_claims(self.claims)
            raise RuntimeError("view failed")

        with self.assertRaises(RuntimeError):
            SecurityContextMiddleware(get_response)(HttpRequest())

        self.assertIsNone(get_current_claims())


if __name__ == "__main__":
    unittest.main()
