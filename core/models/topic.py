"""Topic model."""

import uuid
from typing import ClassVar

from django.db import models
from django.utils import timezone


class Topic(models.Model):
    """Named broadcast channel, unique per tenant.

    Created on first subscription when missing. Membership is read from the
    user side (``UserTopic``); this row is a lookup record.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    org_id = models.CharField(max_length=64)
    app_id = models.CharField(max_length=64)
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    date_created = models.DateTimeField(default=timezone.now)
    date_updated = models.DateTimeField(null=True, blank=True)

    class Meta:
        """Django model metadata."""

        db_table = "topics"
        managed = False
        ordering: ClassVar[list[str]] = ["name"]
        unique_together: ClassVar[list[list[str]]] = [["org_id", "app_id", "name"]]
        indexes: ClassVar[list] = [
            models.Index(fields=["org_id", "app_id"]),
        ]

    def __str__(self) -> str:
        """Return string representation of topic."""
        return self.name
