"""Delivery queue item state enumeration."""

from enum import Enum


class QueueItemState(str, Enum):
    """Lifecycle of a queue item.

    A retry-scheduled item is ``pending`` with ``next_attempt_at`` in the
    future and ``attempts`` > 0.
    """

    PENDING = "pending"
    IN_FLIGHT = "in_flight"
    DONE = "done"
    FAILED = "failed"

    @classmethod
    def terminal(cls) -> tuple["QueueItemState", ...]:
        return (cls.DONE, cls.FAILED)
