"""Push provider credentials per tenant."""

import uuid
from typing import ClassVar

from django.db import models
from django.utils import timezone


class ProviderConfig(models.Model):
    """Firebase project and service account used to push for a tenant.

    Rows are edited out of band; every change reloads the push dispatcher.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    org_id = models.CharField(max_length=64)
    app_id = models.CharField(max_length=64)
    project_id = models.CharField(max_length=255)
    auth = models.JSONField(default=dict)
    date_created = models.DateTimeField(default=timezone.now)
    date_updated = models.DateTimeField(null=True, blank=True)

    class Meta:
        """Django model metadata."""

        db_table = "firebase_configurations"
        managed = False
        unique_together: ClassVar[list[list[str]]] = [["org_id", "app_id"]]

    def __str__(self) -> str:
        """Return string representation of provider config."""
        return f"{self.org_id}/{self.app_id}: {self.project_id}"
