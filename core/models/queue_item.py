"""QueueItem model for push delivery tracking."""

import uuid
from typing import ClassVar

from django.db import models
from django.utils import timezone

from core.enums import QueueItemState


class QueueItem(models.Model):
    """One pending push delivery for a (message, recipient) pair.

    State transitions are written by the delivery queue with conditional
    updates so that two workers can never both own an item.

    Attributes:
        state: pending, in_flight, done or failed.
        attempts: Delivery attempts that ended in a retryable error.
        next_attempt_at: Earliest time the item may be claimed.
        lease_owner: Worker process that claimed the item.
        lease_expires_at: After this instant the claim may be taken over.
        note: Why a done item sent nothing (``muted``, ``no-tokens``).
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    org_id = models.CharField(max_length=64)
    app_id = models.CharField(max_length=64)
    message = models.ForeignKey(
        "core.Message",
        on_delete=models.CASCADE,
        related_name="queue_items",
        db_column="message_id",
    )
    message_recipient = models.OneToOneField(
        "core.MessageRecipient",
        on_delete=models.CASCADE,
        related_name="queue_item",
        db_column="message_recipient_id",
    )
    user_id = models.CharField(max_length=255)
    subject = models.TextField(blank=True, default="")
    body = models.TextField(blank=True, default="")
    data = models.JSONField(default=dict, blank=True)
    time = models.DateTimeField(default=timezone.now)
    priority = models.IntegerField(default=0)
    state = models.CharField(max_length=20, default=QueueItemState.PENDING.value)
    attempts = models.IntegerField(default=0)
    next_attempt_at = models.DateTimeField(default=timezone.now)
    last_error = models.TextField(null=True, blank=True)
    note = models.CharField(max_length=64, null=True, blank=True)
    lease_owner = models.CharField(max_length=128, null=True, blank=True)
    lease_expires_at = models.DateTimeField(null=True, blank=True)
    date_created = models.DateTimeField(default=timezone.now)
    date_updated = models.DateTimeField(null=True, blank=True)

    class Meta:
        """Django model metadata."""

        db_table = "queue_data"
        managed = False
        ordering: ClassVar[list[str]] = ["-priority", "time", "date_created"]
        indexes: ClassVar[list] = [
            models.Index(fields=["priority", "time", "date_created"]),
            models.Index(fields=["state", "next_attempt_at"]),
            models.Index(fields=["org_id", "app_id"]),
        ]

    def __str__(self) -> str:
        """Return string representation of queue item."""
        return f"{self.message_id}/{self.user_id} - {self.state}"

    def __repr__(self) -> str:
        """Return detailed representation of queue item."""
        return (
            f"<QueueItem(id={self.id}, message={self.message_id}, "
            f"user_id={self.user_id}, state={self.state}, attempts={self.attempts})>"
        )

    @property
    def is_terminal(self) -> bool:
        """Whether the item reached done or failed."""
        return self.state in QueueItemState.terminal()

    def payload(self) -> dict:
        """Push payload for this delivery."""
        return {"subject": self.subject, "body": self.body, "data": self.data or {}}
