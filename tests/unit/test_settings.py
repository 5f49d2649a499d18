"""Unit tests for Django settings configuration."""

from django.conf import settings
from django.test import SimpleTestCase

from core.models import QueueItem, User


class TestTestSettingsConfiguration(SimpleTestCase):
    """Tests for test-specific settings configuration."""

    def test_test_mode_flag_is_set(self):
        """Test that TEST_MODE flag is set to True in test settings."""
        self.assertTrue(settings.TEST_MODE)

    def test_debug_is_disabled_in_tests(self):
        """Test that DEBUG is False in test environment."""
        self.assertFalse(settings.DEBUG)

    def test_database_uses_in_memory_sqlite(self):
        """Test that test database is configured for in-memory SQLite."""
        db_config = settings.DATABASES["default"]

        self.assertEqual(db_config["ENGINE"], "django.db.backends.sqlite3")
        self.assertIn("memory", db_config["NAME"].lower())

    def test_cache_uses_local_memory(self):
        """Test that test settings use local memory cache."""
        self.assertEqual(
            settings.CACHES["default"]["BACKEND"],
            "django.core.cache.backends.locmem.LocMemCache",
        )

    def test_unmanaged_models_are_managed_in_tests(self):
        """Test that tables are created for the externally owned schema."""
        self.assertTrue(User._meta.managed)
        self.assertTrue(QueueItem._meta.managed)


class TestServiceSettings(SimpleTestCase):
    """Tests for service settings shared by every environment."""

    def test_middleware_order(self):
        """Test request tagging wraps the security context."""
        middleware = settings.MIDDLEWARE

        self.assertLess(
            middleware.index("core.middleware.request_id.RequestIDMiddleware"),
            middleware.index("core.middleware.security_context.SecurityContextMiddleware"),
        )

    def test_exception_handler_is_configured(self):
        """Test DRF uses the service exception handler."""
        self.assertEqual(
            settings.REST_FRAMEWORK["EXCEPTION_HANDLER"],
            "core.exceptions.handlers.custom_exception_handler",
        )

    def test_queue_settings_are_positive(self):
        """Test queue sizing is usable."""
        self.assertGreater(settings.QUEUE_WORKER_POOL_SIZE, 0)
        self.assertGreater(settings.QUEUE_CHANNEL_CAPACITY, 0)
        self.assertGreater(settings.QUEUE_LEASE_SECONDS, 0)
        self.assertGreaterEqual(settings.QUEUE_MAX_ATTEMPTS, 1)

    def test_rq_default_queue_is_configured(self):
        """Test the mail and repair jobs have a queue."""
        self.assertIn("default", settings.RQ_QUEUES)
