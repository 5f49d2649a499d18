"""Tests for HealthService."""

from unittest.mock import Mock, patch

from django.db.utils import OperationalError
from django.test import SimpleTestCase

from redis.exceptions import RedisError

from core.enums import HealthStatus
from core.services.health_service import HealthService


class TestHealthService(SimpleTestCase):
    """Test suite for HealthService."""

    def setUp(self):
        """Set up a service with one configured tenant."""
        self.dispatcher = Mock()
        self.dispatcher.configured_tenants.return_value = [("org", "app")]
        self.service = HealthService(cache_ttl_seconds=0)
        self.service.set_push_dispatcher(self.dispatcher)

    def test_liveness(self):
        """Test liveness never checks dependencies."""
        self.assertEqual(self.service.get_liveness_status().status, "alive")

    @patch("core.services.health_service.connection")
    def test_ready_when_everything_is_healthy(self, _mock_connection):
        """Test all dependencies healthy means ready."""
        readiness = self.service.get_readiness_status()

        self.assertTrue(readiness.ready)
        self.assertFalse(readiness.degraded)
        self.assertEqual(readiness.status, "ready")
        self.assertEqual(
            set(readiness.dependencies), {"database", "cache", "push_provider"}
        )

    @patch("core.services.health_service.connection")
    def test_database_failure_degrades(self, mock_connection):
        """Test an unreachable database degrades readiness."""
        mock_connection.ensure_connection.side_effect = OperationalError("refused")

        readiness = self.service.get_readiness_status()

        self.assertTrue(readiness.ready)
        self.assertTrue(readiness.degraded)
        self.assertEqual(
            readiness.dependencies["database"].status, HealthStatus.UNHEALTHY
        )

    @patch("core.services.health_service.connection")
    def test_database_result_is_cached(self, mock_connection):
        """Test database checks are reused within the TTL."""
        service = HealthService(cache_ttl_seconds=60)

        service.check_database_health()
        service.check_database_health()

        mock_connection.ensure_connection.assert_called_once()

    @patch("core.services.health_service.cache")
    def test_cache_failure(self, mock_cache):
        """Test cache errors are reported, not raised."""
        mock_cache.set.side_effect = ConnectionError("redis down")

        health = self.service.check_cache_health()

        self.assertFalse(health.healthy)
        self.assertEqual(health.status, HealthStatus.ERROR)

    def test_no_provider_configured(self):
        """Test a service without tenants reports the provider disconnected."""
        self.dispatcher.configured_tenants.return_value = []

        health = self.service.check_push_provider_health()

        self.assertEqual(health.status, HealthStatus.DISCONNECTED)

    def test_desync_counter(self):
        """Test desyncs are counted up and down and degrade the provider."""
        self.service.record_provider_desync()
        self.service.record_provider_desync()
        self.service.resolve_provider_desync()

        self.assertEqual(self.service.provider_desync_count(), 1)
        health = self.service.check_push_provider_health()
        self.assertEqual(health.status, HealthStatus.DEGRADED)
        self.assertIn("1 provider subscription desync", health.message)

    def test_resolve_never_goes_negative(self):
        """Test resolving without desyncs keeps the counter at zero."""
        self.service.resolve_provider_desync()

        self.assertEqual(self.service.provider_desync_count(), 0)

    def test_abandoned_desync_stops_degrading(self):
        """Test a desync given up on moves to the unresolved gauge."""
        self.service.record_provider_desync()

        self.service.abandon_provider_desync()

        self.assertEqual(self.service.provider_desync_count(), 0)
        self.assertEqual(self.service.unresolved_desync_count(), 1)
        health = self.service.check_push_provider_health()
        self.assertEqual(health.status, HealthStatus.HEALTHY)
        self.assertIn("1 unresolved provider desync", health.message)

    @patch("core.services.health_service.cache")
    def test_counter_errors_are_swallowed(self, mock_cache):
        """Test an unreachable cache never breaks the caller."""
        mock_cache.add.side_effect = RedisError("connection refused")
        mock_cache.get.side_effect = RedisError("connection refused")

        self.service.record_provider_desync()
        self.service.abandon_provider_desync()

        self.assertEqual(self.service.provider_desync_count(), 0)
