"""Cross-process delivery of ``queue_items_added``.

Queue items are inserted by the web processes while the delivery queue runs
in ``manage.py run_queue``. Inserts are forwarded to a Redis pub/sub channel
that the queue process listens to. A lost wake only delays delivery until
the next poll.
"""

from django.conf import settings

import django_rq
import structlog
from redis.exceptions import RedisError

logger = structlog.get_logger(__name__)


def broadcast_queue_items_added(sender=None, count=0, **_kwargs) -> None:
    """Receiver for ``queue_items_added`` that forwards it to Redis."""
    channel = settings.QUEUE_WAKE_CHANNEL
    if not channel:
        return
    try:
        django_rq.get_connection("default").publish(channel, count)
    except RedisError as e:
        logger.warning("queue_wake_publish_failed", channel=channel, error=str(e))


def subscribe_queue_wakes():
    """Open a pub/sub subscription to the queue wake channel.

    Returns:
        A ``redis.client.PubSub`` subscribed to the channel. Callers close it.
    """
    pubsub = django_rq.get_connection("default").pubsub(ignore_subscribe_messages=True)
    pubsub.subscribe(settings.QUEUE_WAKE_CHANNEL)
    return pubsub
