"""Enumerations for the core app."""

from core.enums.health_status import HealthStatus
from core.enums.push_failure_reason import PushFailureReason
from core.enums.queue_item_state import QueueItemState
from core.enums.sender_type import SenderType

__all__ = ["HealthStatus", "PushFailureReason", "QueueItemState", "SenderType"]
