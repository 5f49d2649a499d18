"""Database models for the core application."""

from core.models.app_release import AppPlatform, AppVersion
from core.models.message import Message
from core.models.message_recipient import MessageRecipient
from core.models.provider_config import ProviderConfig
from core.models.queue_item import QueueItem
from core.models.topic import Topic
from core.models.user import FirebaseToken, User, UserTopic

__all__ = [
    "AppPlatform",
    "AppVersion",
    "FirebaseToken",
    "Message",
    "MessageRecipient",
    "ProviderConfig",
    "QueueItem",
    "Topic",
    "User",
    "UserTopic",
]
