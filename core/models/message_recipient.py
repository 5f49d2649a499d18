"""Per-user projection of a message."""

import uuid
from typing import ClassVar

from django.db import models
from django.utils import timezone


class MessageRecipient(models.Model):
    """Inbox entry of one user for one message.

    ``mute`` keeps the inbox entry while suppressing the push. The pair
    ``(message, user_id)`` is unique.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    org_id = models.CharField(max_length=64)
    app_id = models.CharField(max_length=64)
    message = models.ForeignKey(
        "core.Message",
        on_delete=models.CASCADE,
        related_name="recipients",
        db_column="message_id",
    )
    user_id = models.CharField(max_length=255)
    mute = models.BooleanField(default=False)
    read = models.BooleanField(default=False)
    date_created = models.DateTimeField(default=timezone.now)
    date_updated = models.DateTimeField(null=True, blank=True)

    class Meta:
        """Django model metadata."""

        db_table = "messages_recipients"
        managed = False
        ordering: ClassVar[list[str]] = ["-date_created"]
        unique_together: ClassVar[list[list[str]]] = [["message", "user_id"]]
        indexes: ClassVar[list] = [
            models.Index(fields=["org_id", "app_id", "user_id"]),
        ]

    def __str__(self) -> str:
        """Return string representation of recipient."""
        return f"{self.message_id} -> {self.user_id}"

    def __repr__(self) -> str:
        """Return detailed representation of recipient."""
        return (
            f"<MessageRecipient(message={self.message_id}, user_id={self.user_id}, "
            f"mute={self.mute}, read={self.read})>"
        )

    def mark_read(self, read: bool = True) -> None:
        """Set the read flag."""
        self.read = read
        self.date_updated = timezone.now()
        self.save(update_fields=["read", "date_updated"])

    def set_mute(self, mute: bool) -> None:
        """Set the mute flag."""
        self.mute = mute
        self.date_updated = timezone.now()
        self.save(update_fields=["mute", "date_updated"])
