"""Message model.

A message is stored once per send request. Its per-user projection lives in
``MessageRecipient`` and its pending push deliveries in ``QueueItem``.
"""

from typing import ClassVar

from django.db import models
from django.utils import timezone

from core.enums import SenderType


class Message(models.Model):
    """A notification message.

    Content is immutable after creation except for the metadata an
    administrator or the sender may edit (priority, topic, subject, body).

    Attributes:
        id: Message identifier, a UUID string unless the caller supplied one.
        sender_type: One of ``user``, ``administrative``, ``system``.
        sender_account_id: Account of ``user`` / ``administrative`` senders.
        data: String to string mapping, always carries ``message_id``.
        time: Intended send time.
        calculated_recipients_count: Recipients resolved at creation.
    """

    id = models.CharField(primary_key=True, max_length=64)
    org_id = models.CharField(max_length=64)
    app_id = models.CharField(max_length=64)
    priority = models.IntegerField(default=0)
    time = models.DateTimeField(default=timezone.now)
    subject = models.TextField(blank=True, default="")
    body = models.TextField(blank=True, default="")
    data = models.JSONField(default=dict, blank=True)
    sender_type = models.CharField(max_length=20, default=SenderType.SYSTEM.value)
    sender_account_id = models.CharField(max_length=255, null=True, blank=True)
    sender_name = models.CharField(max_length=255, null=True, blank=True)
    topic = models.CharField(max_length=255, null=True, blank=True)
    topics = models.JSONField(default=list, blank=True)
    recipients_criteria_list = models.JSONField(default=list, blank=True)
    recipient_account_criteria = models.JSONField(default=dict, blank=True)
    calculated_recipients_count = models.IntegerField(null=True, blank=True)
    date_created = models.DateTimeField(default=timezone.now)
    date_updated = models.DateTimeField(null=True, blank=True)

    class Meta:
        """Django model metadata."""

        db_table = "messages"
        managed = False
        ordering: ClassVar[list[str]] = ["-date_created"]
        indexes: ClassVar[list] = [
            models.Index(fields=["org_id", "app_id"]),
            models.Index(fields=["org_id", "app_id", "sender_account_id"]),
        ]

    def __str__(self) -> str:
        """Return string representation of message."""
        return f"{self.id}: {self.subject}"

    def __repr__(self) -> str:
        """Return detailed representation of message."""
        return (
            f"<Message(id={self.id}, org_id={self.org_id}, app_id={self.app_id}, "
            f"sender_type={self.sender_type})>"
        )

    @property
    def sender(self) -> dict:
        """Sender as a tagged variant."""
        sender = {"type": self.sender_type}
        if self.sender_account_id:
            sender["user"] = {
                "user_id": self.sender_account_id,
                "name": self.sender_name,
            }
        return sender

    def is_sent_by(self, account_id: str | None) -> bool:
        """Check whether an account created this message."""
        return bool(account_id) and self.sender_account_id == account_id
