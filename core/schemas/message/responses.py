"""Message response bodies."""

from datetime import datetime
from typing import Any

from core.schemas.base_schema_model import BaseSchemaModel


class MessageResponse(BaseSchemaModel):
    """A stored message."""

    id: str
    org_id: str
    app_id: str
    priority: int
    time: datetime | None = None
    subject: str
    body: str
    data: dict[str, str]
    sender: dict[str, Any]
    topic: str | None = None
    topics: list[str] = []
    recipients_criteria_list: list[dict[str, Any]] = []
    recipient_account_criteria: dict[str, Any] = {}
    calculated_recipients_count: int | None = None
    date_created: datetime
    date_updated: datetime | None = None


class UserMessageResponse(MessageResponse):
    """A message as seen in one user's inbox."""

    mute: bool = False
    read: bool = False

    @classmethod
    def from_recipient(cls, recipient) -> "UserMessageResponse":
        """Build from a MessageRecipient with its message loaded."""
        message = MessageResponse.model_validate(recipient.message)
        return cls(**message.model_dump(), mute=recipient.mute, read=recipient.read)


class MessagesStatsResponse(BaseSchemaModel):
    """Inbox counters of one user."""

    total_count: int
    muted_count: int
    not_muted_count: int
    read_count: int
    not_read_count: int
    not_read_not_mute: int


class RecipientResponse(BaseSchemaModel):
    """An inbox entry without its message."""

    id: str
    message_id: str
    user_id: str
    mute: bool
    read: bool
    date_created: datetime

    @classmethod
    def from_recipient(cls, recipient) -> "RecipientResponse":
        """Build from a MessageRecipient row."""
        return cls(
            id=str(recipient.id),
            message_id=recipient.message_id,
            user_id=recipient.user_id,
            mute=recipient.mute,
            read=recipient.read,
            date_created=recipient.date_created,
        )
