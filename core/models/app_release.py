"""App versions and platforms seen on registered tokens."""

import uuid
from typing import ClassVar

from django.db import models
from django.utils import timezone


class AppVersion(models.Model):
    """An app version reported by a token registration."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    org_id = models.CharField(max_length=64)
    app_id = models.CharField(max_length=64)
    name = models.CharField(max_length=64)
    date_created = models.DateTimeField(default=timezone.now)

    class Meta:
        """Django model metadata."""

        db_table = "app_versions"
        managed = False
        ordering: ClassVar[list[str]] = ["name"]
        unique_together: ClassVar[list[list[str]]] = [["org_id", "app_id", "name"]]

    def __str__(self) -> str:
        """Return string representation of app version."""
        return self.name


class AppPlatform(models.Model):
    """An app platform reported by a token registration."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    org_id = models.CharField(max_length=64)
    app_id = models.CharField(max_length=64)
    name = models.CharField(max_length=64)
    date_created = models.DateTimeField(default=timezone.now)

    class Meta:
        """Django model metadata."""

        db_table = "app_platforms"
        managed = False
        ordering: ClassVar[list[str]] = ["name"]
        unique_together: ClassVar[list[list[str]]] = [["org_id", "app_id", "name"]]

    def __str__(self) -> str:
        """Return string representation of app platform."""
        return self.name
