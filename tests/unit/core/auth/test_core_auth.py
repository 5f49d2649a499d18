"""Tests for bearer token and internal key authentication."""

from django.test import RequestFactory, SimpleTestCase, override_settings

from rest_framework.exceptions import AuthenticationFailed

from core.auth import (
    CoreUserAuthentication,
    InternalAPIKeyAuthentication,
    clear_current_claims,
    get_current_claims,
)
from tests.factories import auth_headers, internal_headers, make_jwt


class TestCoreUserAuthentication(SimpleTestCase):
    """Test suite for CoreUserAuthentication."""

    def setUp(self):
        """Set up request factory and clear any leftover claims."""
        self.factory = RequestFactory()
        self.auth = CoreUserAuthentication()
        self.addCleanup(clear_current_claims)

    def test_no_header_is_anonymous(self):
        """Test requests without a token are left to other authenticators."""
        self.assertIsNone(self.auth.authenticate(self.factory.get("/")))

    def test_valid_token(self):
        """Test a valid token yields claims and binds them to the thread."""
        request = self.factory.get("/", **auth_headers("u1", name="Ada", admin=True))

        claims, token = self.auth.authenticate(request)

        self.assertEqual(claims.user_id, "u1")
        self.assertEqual(claims.tenant, ("test-org", "test-app"))
        self.assertEqual(claims.name, "Ada")
        self.assertTrue(claims.admin)
        self.assertTrue(token)
        self.assertIs(get_current_claims(), claims)

    def test_malformed_header(self):
        """Test a non-bearer header is rejected."""
        request = self.factory.get("/", HTTP_AUTHORIZATION="Basic abc")

        with self.assertRaises(AuthenticationFailed):
            self.auth.authenticate(request)

    def test_expired_token(self):
        """Test expired tokens are rejected."""
        token = make_jwt("u1", expires_in=-60)
        request = self.factory.get("/", HTTP_AUTHORIZATION=f"Bearer {token}")

        with self.assertRaisesMessage(AuthenticationFailed, "Token has expired"):
            self.auth.authenticate(request)

    def test_wrong_audience(self):
        """Test tokens for another audience are rejected."""
        token = make_jwt("u1", aud="someone-else")
        request = self.factory.get("/", HTTP_AUTHORIZATION=f"Bearer {token}")

        with self.assertRaisesMessage(AuthenticationFailed, "Invalid token"):
            self.auth.authenticate(request)

    def test_bad_signature(self):
        """Test tokens signed with another key are rejected."""
        token = make_jwt("u1") + "x"
        request = self.factory.get("/", HTTP_AUTHORIZATION=f"Bearer {token}")

        with self.assertRaises(AuthenticationFailed):
            self.auth.authenticate(request)

    def test_missing_tenant(self):
        """Test tokens without a tenant are rejected."""
        request = self.factory.get("/", **auth_headers("u1", org_id=""))

        with self.assertRaisesMessage(AuthenticationFailed, "missing tenant"):
            self.auth.authenticate(request)

    @override_settings(JWT_SECRET="", CORE_AUTH_PUBLIC_KEY="")
    def test_unconfigured_validation(self):
        """Test tokens cannot be accepted without a key."""
        request = self.factory.get("/", HTTP_AUTHORIZATION="Bearer abc.def.ghi")

        with self.assertRaisesMessage(AuthenticationFailed, "not configured"):
            self.auth.authenticate(request)

    def test_authenticate_header(self):
        """Test the 401 challenge."""
        self.assertEqual(self.auth.authenticate_header(None), "Bearer")


class TestInternalAPIKeyAuthentication(SimpleTestCase):
    """Test suite for InternalAPIKeyAuthentication."""

    def setUp(self):
        """Set up request factory."""
        self.factory = RequestFactory()
        self.auth = InternalAPIKeyAuthentication()
        self.addCleanup(clear_current_claims)

    def test_no_header(self):
        """Test requests without the key are not authenticated here."""
        self.assertIsNone(self.auth.authenticate(self.factory.get("/")))

    def test_valid_key(self):
        """Test the key yields internal claims in the configured tenant."""
        claims, _ = self.auth.authenticate(self.factory.get("/", **internal_headers()))

        self.assertTrue(claims.internal)
        self.assertEqual(claims.tenant, ("test-org", "test-app"))
        self.assertEqual(claims.roles(), {"internal"})

    def test_wrong_key(self):
        """Test a wrong key is rejected."""
        request = self.factory.get("/", **internal_headers("wrong"))

        with self.assertRaises(AuthenticationFailed):
            self.auth.authenticate(request)

    @override_settings(INTERNAL_API_KEY="")
    def test_unconfigured_key_rejects_everything(self):
        """Test no key matches when none is configured."""
        request = self.factory.get("/", HTTP_INTERNAL_API_KEY="anything")

        with self.assertRaises(AuthenticationFailed):
            self.auth.authenticate(request)
