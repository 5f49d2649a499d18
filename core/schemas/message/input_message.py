"""Domain input for message creation."""

from datetime import datetime
from typing import Any

from pydantic import Field, field_validator, model_validator

from core.enums import SenderType
from core.schemas.base_schema_model import BaseSchemaModel


class SenderAccount(BaseSchemaModel):
    """Account reference of a user or administrative sender."""

    user_id: str
    name: str | None = None


class Sender(BaseSchemaModel):
    """Tagged sender.

    ``user`` and ``administrative`` senders carry an account; a ``system``
    sender may name the service account that sent on its behalf.
    """

    type: SenderType
    user: SenderAccount | None = None

    @model_validator(mode="after")
    def check_account(self) -> "Sender":
        if SenderType(self.type).has_account and self.user is None:
            raise ValueError(f"{self.type} sender requires a user account")
        return self


class RecipientCriteria(BaseSchemaModel):
    """Token predicate: every non-null field must match."""

    app_platform: str | None = None
    app_version: str | None = None


class InputRecipient(BaseSchemaModel):
    """Explicitly addressed recipient."""

    user_id: str = Field(..., min_length=1)
    mute: bool = False


class InputMessage(BaseSchemaModel):
    """Everything needed to create a message in a tenant."""

    org_id: str
    app_id: str
    id: str | None = None
    time: datetime | None = None
    priority: int = 0
    subject: str = ""
    body: str = ""
    data: dict[str, str] = Field(default_factory=dict)
    sender: Sender
    recipients: list[InputRecipient] = Field(default_factory=list)
    recipients_criteria_list: list[RecipientCriteria] = Field(default_factory=list)
    recipient_account_criteria: dict[str, Any] = Field(default_factory=dict)
    topic: str | None = None
    topics: list[str] = Field(default_factory=list)

    @field_validator("data", mode="before")
    @classmethod
    def stringify_data(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return {str(k): "" if v is None else str(v) for k, v in value.items()}
        return value

    def all_topics(self) -> list[str]:
        """``topic`` followed by ``topics``, without blanks or repeats."""
        names = [self.topic, *self.topics] if self.topic else list(self.topics)
        return list(dict.fromkeys(name for name in names if name))
