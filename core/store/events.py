"""Change events published by the store.

Receivers must be idempotent: an event can be delivered more than once and
several writes may collapse into one delivery.
"""

from django.db import transaction
from django.dispatch import Signal

import structlog

logger = structlog.get_logger(__name__)

# Sent with ``configs``: list of every ProviderConfig row
provider_configs_changed = Signal()

# Sent with ``count``: number of queue items inserted
queue_items_added = Signal()


def publish_on_commit(signal: Signal, sender, **kwargs) -> None:
    """Send ``signal`` once the current transaction commits.

    Outside a transaction the signal is sent immediately.
    """

    def _send() -> None:
        for receiver, result in signal.send_robust(sender=sender, **kwargs):
            if isinstance(result, Exception):
                logger.error(
                    "event_receiver_failed",
                    receiver=getattr(receiver, "__qualname__", repr(receiver)),
                    error=str(result),
                )

    transaction.on_commit(_send)
