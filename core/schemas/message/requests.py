"""Message request bodies."""

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import Field, field_validator

from core.constants import (
    DEFAULT_MESSAGES_LIMIT,
    FCM_RESERVED_DATA_KEYS,
    FCM_RESERVED_DATA_PREFIXES,
    MAX_EPOCH_SECONDS,
    MAX_MESSAGES_LIMIT,
)
from core.schemas.base_schema_model import BaseSchemaModel
from core.schemas.message.input_message import (
    InputMessage,
    InputRecipient,
    RecipientCriteria,
    Sender,
)


class CreateMessageRequest(BaseSchemaModel):
    """Body of the message creation endpoints.

    ``time`` is the intended send time as Unix seconds.
    """

    id: str | None = None
    time: int | None = Field(default=None, ge=0, le=MAX_EPOCH_SECONDS)
    priority: int = 0
    subject: str = ""
    body: str = ""
    data: dict[str, Any] = Field(default_factory=dict)
    recipients: list[InputRecipient] = Field(default_factory=list)
    recipients_criteria_list: list[RecipientCriteria] = Field(default_factory=list)
    recipient_account_criteria: dict[str, Any] = Field(default_factory=dict)
    topic: str | None = None
    topics: list[str] = Field(default_factory=list)

    @field_validator("recipients", "recipients_criteria_list", "topics", mode="before")
    @classmethod
    def null_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("data")
    @classmethod
    def no_reserved_data_keys(cls, value: dict[str, Any]) -> dict[str, Any]:
        for key in value:
            if key in FCM_RESERVED_DATA_KEYS or key.startswith(FCM_RESERVED_DATA_PREFIXES):
                raise ValueError(f"data key '{key}' is reserved by the push provider")
        return value

    def to_input(self, org_id: str, app_id: str, sender: Sender) -> InputMessage:
        """Attach tenant and sender to build the domain input."""
        send_time = (
            datetime.fromtimestamp(self.time, tz=UTC) if self.time is not None else None
        )
        return InputMessage(
            org_id=org_id,
            app_id=app_id,
            id=self.id,
            time=send_time,
            priority=self.priority,
            subject=self.subject,
            body=self.body,
            data=self.data,
            sender=sender,
            recipients=self.recipients,
            recipients_criteria_list=self.recipients_criteria_list,
            recipient_account_criteria=self.recipient_account_criteria or {},
            topic=self.topic,
            topics=self.topics,
        )


class TenantCreateMessageRequest(CreateMessageRequest):
    """Message body that names its tenant, used by service callers."""

    org_id: str | None = None
    app_id: str | None = None


class SendMessageRequest(BaseSchemaModel):
    """Envelope of the v2 internal and bbs send endpoints."""

    is_async: bool | None = Field(default=None, alias="async")
    message: TenantCreateMessageRequest


class BbsCreateMessagesRequest(BaseSchemaModel):
    """Batch of messages sent by a first-party service."""

    messages: list[TenantCreateMessageRequest] = Field(..., min_length=1)


class UpdateMessageRequest(BaseSchemaModel):
    """Editable message metadata."""

    priority: int | None = None
    topic: str | None = None
    subject: str | None = None
    body: str | None = None


class DeleteMessagesRequest(BaseSchemaModel):
    """IDs of messages to remove."""

    ids: list[str] = Field(..., min_length=1)

    @field_validator("ids", mode="before")
    @classmethod
    def split_ids(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value


class ReadAllMessagesRequest(BaseSchemaModel):
    """Read flag applied to every inbox entry of the caller."""

    read: bool = True


class AddRecipientsRequest(BaseSchemaModel):
    """Recipients added to an existing message."""

    recipients: list[InputRecipient] = Field(..., min_length=1)
    read: bool = False


class UpdateRecipientRequest(BaseSchemaModel):
    """Inbox state of one recipient."""

    user_id: str = Field(..., min_length=1)
    mute: bool | None = None
    read: bool | None = None


class InboxQuery(BaseSchemaModel):
    """Query string filters of message listings.

    ``start_date`` and ``end_date`` are Unix milliseconds compared against
    the message send time. ``ids`` is a comma separated list.
    """

    read: bool | None = None
    mute: bool | None = None
    ids: list[str] = Field(default_factory=list)
    start_date: int | None = Field(default=None, ge=0, le=MAX_EPOCH_SECONDS * 1000)
    end_date: int | None = Field(default=None, ge=0, le=MAX_EPOCH_SECONDS * 1000)
    topic: str | None = None
    sender_id: str | None = None
    offset: int = Field(default=0, ge=0)
    limit: int = Field(default=DEFAULT_MESSAGES_LIMIT, ge=1, le=MAX_MESSAGES_LIMIT)
    order: Literal["asc", "desc"] = "desc"

    @field_validator("ids", mode="before")
    @classmethod
    def split_ids(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return [] if value is None else value

    @staticmethod
    def epoch_ms(value: int | None) -> datetime | None:
        """Convert Unix milliseconds to an aware datetime."""
        if value is None:
            return None
        return datetime.fromtimestamp(value / 1000, tz=UTC)

