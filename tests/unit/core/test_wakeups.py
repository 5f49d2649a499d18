"""Tests for forwarding queue wakes between processes."""

from unittest.mock import patch

from django.test import SimpleTestCase, override_settings

from redis.exceptions import ConnectionError as RedisConnectionError

from core.store.events import queue_items_added
from core.store.wakeups import broadcast_queue_items_added, subscribe_queue_wakes


@override_settings(QUEUE_WAKE_CHANNEL="notifications:queue-wake")
class TestQueueWakeups(SimpleTestCase):
    """Test suite for the Redis wake channel."""

    @patch("core.store.wakeups.django_rq.get_connection")
    def test_inserted_items_are_published(self, mock_get_connection):
        """Test an insert in a web process reaches the wake channel."""
        broadcast_queue_items_added(sender=None, count=3)

        mock_get_connection.return_value.publish.assert_called_once_with(
            "notifications:queue-wake", 3
        )

    @patch("core.store.wakeups.django_rq.get_connection")
    def test_store_event_is_forwarded(self, mock_get_connection):
        """Test the app connects the broadcaster to the store event."""
        queue_items_added.send(sender=None, count=1)

        mock_get_connection.return_value.publish.assert_called_once_with(
            "notifications:queue-wake", 1
        )

    @patch("core.store.wakeups.django_rq.get_connection")
    def test_redis_failure_is_logged(self, mock_get_connection):
        """Test an unreachable Redis only costs the early wake."""
        mock_get_connection.return_value.publish.side_effect = RedisConnectionError("down")

        broadcast_queue_items_added(sender=None, count=1)

    @override_settings(QUEUE_WAKE_CHANNEL="")
    @patch("core.store.wakeups.django_rq.get_connection")
    def test_disabled_channel_publishes_nothing(self, mock_get_connection):
        """Test polling alone is used without a channel."""
        broadcast_queue_items_added(sender=None, count=1)

        mock_get_connection.assert_not_called()

    @patch("core.store.wakeups.django_rq.get_connection")
    def test_subscribe_queue_wakes(self, mock_get_connection):
        """Test the queue process subscribes to the configured channel."""
        pubsub = subscribe_queue_wakes()

        mock_get_connection.return_value.pubsub.assert_called_once_with(
            ignore_subscribe_messages=True
        )
        pubsub.subscribe.assert_called_once_with("notifications:queue-wake")
