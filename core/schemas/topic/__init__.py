"""Topic and subscription schemas."""

from datetime import datetime

from pydantic import Field

from core.schemas.base_schema_model import BaseSchemaModel


class TopicResponse(BaseSchemaModel):
    """A topic of the tenant."""

    name: str
    description: str = ""
    date_created: datetime
    date_updated: datetime | None = None


class SubscriptionRequest(BaseSchemaModel):
    """Subscribe or unsubscribe a device to a topic."""

    token: str | None = None


class UpdateTopicRequest(BaseSchemaModel):
    """New description of a topic."""

    name: str = Field(..., min_length=1)
    description: str = ""


class NameResponse(BaseSchemaModel):
    """A named lookup record (app version or platform)."""

    name: str


__all__ = ["NameResponse", "SubscriptionRequest", "TopicResponse", "UpdateTopicRequest"]
