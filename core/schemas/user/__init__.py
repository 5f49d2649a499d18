"""User and token schemas."""

from datetime import datetime

from pydantic import Field

from core.schemas.base_schema_model import BaseSchemaModel


class TokenInfo(BaseSchemaModel):
    """Token registration: the new token and the one it replaces."""

    token: str = Field(..., min_length=1)
    previous_token: str | None = None
    app_platform: str | None = None
    app_version: str | None = None


class TokenResponse(BaseSchemaModel):
    """A registered device token."""

    token: str
    app_platform: str | None = None
    app_version: str | None = None
    date_created: datetime


class UserResponse(BaseSchemaModel):
    """A push recipient with tokens and subscriptions."""

    user_id: str
    notifications_disabled: bool
    firebase_tokens: list[TokenResponse]
    topics: list[str]
    date_created: datetime
    date_updated: datetime | None = None

    @classmethod
    def from_user(cls, user) -> "UserResponse":
        """Build from a User row."""
        return cls(
            user_id=user.user_id,
            notifications_disabled=user.notifications_disabled,
            firebase_tokens=[
                TokenResponse.model_validate(token) for token in user.token_list()
            ],
            topics=user.topic_names(),
            date_created=user.date_created,
            date_updated=user.date_updated,
        )


class UpdateUserRequest(BaseSchemaModel):
    """Profile settings a user may change."""

    notifications_disabled: bool


__all__ = ["TokenInfo", "TokenResponse", "UpdateUserRequest", "UserResponse"]
