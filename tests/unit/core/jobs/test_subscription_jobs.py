"""Tests for compensating provider subscription jobs."""

from datetime import timedelta
from unittest.mock import patch

from django.test import SimpleTestCase

from redis.exceptions import ConnectionError as RedisConnectionError

from core.enums import PushFailureReason
from core.exceptions import PermanentProviderError, TransientProviderError
from core.jobs.subscription_jobs import retry_subscription_job, schedule_subscription_retry
from core.services.health_service import health_service


class TestScheduleSubscriptionRetry(SimpleTestCase):
    """Test suite for schedule_subscription_retry."""

    @patch("core.jobs.subscription_jobs.django_rq.get_scheduler")
    def test_backoff_doubles_per_attempt(self, mock_get_scheduler):
        """Test the delay grows with the attempt number."""
        schedule_subscription_retry("subscribe", "org", "app", "t1", "news", attempt=3)

        mock_get_scheduler.return_value.enqueue_in.assert_called_once_with(
            timedelta(seconds=240),
            retry_subscription_job,
            "subscribe",
            "org",
            "app",
            "t1",
            "news",
            3,
        )

    @patch("core.jobs.subscription_jobs.django_rq.get_scheduler")
    def test_redis_failure_is_logged(self, mock_get_scheduler):
        """Test an unreachable scheduler does not fail the request."""
        mock_get_scheduler.side_effect = RedisConnectionError("redis down")
        health_service.record_provider_desync()

        schedule_subscription_retry("subscribe", "org", "app", "t1", "news", attempt=1)

        self.assertEqual(health_service.provider_desync_count(), 0)
        self.assertEqual(health_service.unresolved_desync_count(), 1)


class TestRetrySubscriptionJob(SimpleTestCase):
    """Test suite for retry_subscription_job."""

    @patch("core.jobs.subscription_jobs.push_dispatcher")
    def test_success_resolves_desync(self, mock_dispatcher):
        """Test a successful replay counts the desync down."""
        health_service.record_provider_desync()

        retry_subscription_job("subscribe", "org", "app", "t1", "news", 1)

        mock_dispatcher.subscribe.assert_called_once_with("org", "app", "t1", "news")
        self.assertEqual(health_service.provider_desync_count(), 0)

    @patch("core.jobs.subscription_jobs.schedule_subscription_retry")
    @patch("core.jobs.subscription_jobs.push_dispatcher")
    def test_transient_failure_reschedules(self, mock_dispatcher, mock_schedule):
        """Test a transient failure schedules the next attempt."""
        mock_dispatcher.unsubscribe.side_effect = TransientProviderError("unavailable")

        retry_subscription_job("unsubscribe", "org", "app", "t1", "news", 1)

        mock_schedule.assert_called_once_with("unsubscribe", "org", "app", "t1", "news", 2)

    @patch("core.jobs.subscription_jobs.schedule_subscription_retry")
    @patch("core.jobs.subscription_jobs.push_dispatcher")
    def test_transient_failure_gives_up_after_max_retries(
        self, mock_dispatcher, mock_schedule
    ):
        """Test retries stop at the configured maximum."""
        mock_dispatcher.subscribe.side_effect = TransientProviderError("unavailable")
        health_service.record_provider_desync()

        retry_subscription_job("subscribe", "org", "app", "t1", "news", 3)

        mock_schedule.assert_not_called()
        self.assertEqual(health_service.provider_desync_count(), 0)
        self.assertEqual(health_service.unresolved_desync_count(), 1)

    @patch("core.jobs.subscription_jobs.schedule_subscription_retry")
    @patch("core.jobs.subscription_jobs.push_dispatcher")
    def test_permanent_failure_is_not_retried(self, mock_dispatcher, mock_schedule):
        """Test a permanent rejection stops the repair."""
        mock_dispatcher.subscribe.side_effect = PermanentProviderError(
            PushFailureReason.UNREGISTERED, "gone"
        )
        health_service.record_provider_desync()

        retry_subscription_job("subscribe", "org", "app", "t1", "news", 1)

        mock_schedule.assert_not_called()
        self.assertEqual(health_service.provider_desync_count(), 0)
        self.assertEqual(health_service.unresolved_desync_count(), 1)
