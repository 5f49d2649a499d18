"""Message schemas."""

from core.schemas.message.input_message import (
    InputMessage,
    InputRecipient,
    RecipientCriteria,
    Sender,
    SenderAccount,
)
from core.schemas.message.requests import (
    AddRecipientsRequest,
    BbsCreateMessagesRequest,
    CreateMessageRequest,
    DeleteMessagesRequest,
    InboxQuery,
    ReadAllMessagesRequest,
    SendMessageRequest,
    TenantCreateMessageRequest,
    UpdateMessageRequest,
    UpdateRecipientRequest,
)
from core.schemas.message.responses import (
    MessageResponse,
    MessagesStatsResponse,
    RecipientResponse,
    UserMessageResponse,
)

__all__ = [
    "AddRecipientsRequest",
    "BbsCreateMessagesRequest",
    "CreateMessageRequest",
    "DeleteMessagesRequest",
    "InboxQuery",
    "InputMessage",
    "InputRecipient",
    "MessageResponse",
    "MessagesStatsResponse",
    "ReadAllMessagesRequest",
    "RecipientCriteria",
    "RecipientResponse",
    "Sender",
    "SendMessageRequest",
    "SenderAccount",
    "TenantCreateMessageRequest",
    "UpdateMessageRequest",
    "UpdateRecipientRequest",
    "UserMessageResponse",
]
