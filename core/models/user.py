"""Push recipient models: users, their device tokens and topic subscriptions."""

import uuid
from typing import ClassVar

from django.db import models
from django.utils import timezone


class User(models.Model):
    """A push recipient within a tenant.

    Tokens and topic subscriptions are owned by the user row and are only
    mutated by the registry service. Removing the last token never removes
    the user: the inbox and the subscriptions stay.

    Attributes:
        id: Primary key.
        org_id: Tenant organization.
        app_id: Tenant application.
        user_id: Account identifier from the core building block.
        notifications_disabled: Suppresses push delivery when set.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    org_id = models.CharField(max_length=64)
    app_id = models.CharField(max_length=64)
    user_id = models.CharField(max_length=255)
    notifications_disabled = models.BooleanField(default=False)
    date_created = models.DateTimeField(default=timezone.now)
    date_updated = models.DateTimeField(null=True, blank=True)

    class Meta:
        """Django model metadata."""

        db_table = "users"
        managed = False
        ordering: ClassVar[list[str]] = ["date_created"]
        unique_together: ClassVar[list[list[str]]] = [["org_id", "app_id", "user_id"]]
        indexes: ClassVar[list] = [
            models.Index(fields=["org_id", "app_id"]),
        ]

    def __str__(self) -> str:
        """Return string representation of user."""
        return self.user_id

    def __repr__(self) -> str:
        """Return detailed representation of user."""
        return (
            f"<User(user_id={self.user_id}, org_id={self.org_id}, "
            f"app_id={self.app_id})>"
        )

    def token_list(self) -> list["FirebaseToken"]:
        """Tokens in registration order."""
        return list(self.firebase_tokens.order_by("date_created", "id"))

    def topic_names(self) -> list[str]:
        """Subscribed topic names in subscription order."""
        return list(
            self.topics.order_by("date_created", "id").values_list("topic", flat=True)
        )


class FirebaseToken(models.Model):
    """A device token registered to a user.

    A token string belongs to at most one user per tenant, enforced by the
    unique key on ``(org_id, app_id, token)``.
    """

    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name="firebase_tokens",
        db_column="user_ref",
    )
    org_id = models.CharField(max_length=64)
    app_id = models.CharField(max_length=64)
    token = models.CharField(max_length=512)
    app_platform = models.CharField(max_length=64, null=True, blank=True)
    app_version = models.CharField(max_length=64, null=True, blank=True)
    date_created = models.DateTimeField(default=timezone.now)

    class Meta:
        """Django model metadata."""

        db_table = "users_firebase_tokens"
        managed = False
        ordering: ClassVar[list[str]] = ["date_created", "id"]
        unique_together: ClassVar[list[list[str]]] = [["org_id", "app_id", "token"]]
        indexes: ClassVar[list] = [
            models.Index(fields=["org_id", "app_id"]),
        ]

    def __str__(self) -> str:
        """Return string representation of token."""
        return self.token


class UserTopic(models.Model):
    """Topic subscription of a user."""

    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name="topics",
        db_column="user_ref",
    )
    topic = models.CharField(max_length=255)
    date_created = models.DateTimeField(default=timezone.now)

    class Meta:
        """Django model metadata."""

        db_table = "users_topics"
        managed = False
        ordering: ClassVar[list[str]] = ["date_created", "id"]
        unique_together: ClassVar[list[list[str]]] = [["user", "topic"]]
        indexes: ClassVar[list] = [
            models.Index(fields=["topic"]),
        ]

    def __str__(self) -> str:
        """Return string representation of subscription."""
        return f"{self.user_id} -> {self.topic}"
