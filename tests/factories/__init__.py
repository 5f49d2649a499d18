"""Builders for test data.

Rows are created through the ORM with faker-generated identifiers. Tokens
for the API are signed with the test ``JWT_SECRET``.
"""

import time
from datetime import datetime, timedelta

from django.conf import settings
from django.utils import timezone

import jwt
from faker import Faker

from core.enums import QueueItemState, SenderType
from core.models import (
    FirebaseToken,
    Message,
    MessageRecipient,
    ProviderConfig,
    QueueItem,
    Topic,
    User,
    UserTopic,
)
from core.schemas.message import InputMessage, InputRecipient, Sender, SenderAccount

fake = Faker()

ORG_ID = "test-org"
APP_ID = "test-app"


def create_user(
    user_id: str | None = None,
    tokens: list[str] | tuple[str, ...] = (),
    topics: list[str] | tuple[str, ...] = (),
    notifications_disabled: bool = False,
    org_id: str = ORG_ID,
    app_id: str = APP_ID,
    app_platform: str | None = "android",
    app_version: str | None = "1.0",
) -> User:
    """Create a user with tokens and topic subscriptions."""
    user = User.objects.create(
        org_id=org_id,
        app_id=app_id,
        user_id=user_id or fake.uuid4(),
        notifications_disabled=notifications_disabled,
    )
    for token in tokens:
        create_token(user, token, app_platform=app_platform, app_version=app_version)
    for topic in topics:
        subscribe(user, topic)
    return user


def create_token(
    user: User,
    token: str | None = None,
    app_platform: str | None = "android",
    app_version: str | None = "1.0",
) -> FirebaseToken:
    """Register a device token to a user."""
    return FirebaseToken.objects.create(
        user=user,
        org_id=user.org_id,
        app_id=user.app_id,
        token=token or fake.sha256(),
        app_platform=app_platform,
        app_version=app_version,
    )


def subscribe(user: User, topic: str) -> UserTopic:
    """Subscribe a user to a topic, creating the topic when missing."""
    Topic.objects.get_or_create(org_id=user.org_id, app_id=user.app_id, name=topic)
    return UserTopic.objects.create(user=user, topic=topic)


def create_provider_config(
    org_id: str = ORG_ID, app_id: str = APP_ID, project_id: str | None = None
) -> ProviderConfig:
    """Create a Firebase configuration for a tenant."""
    return ProviderConfig.objects.create(
        org_id=org_id,
        app_id=app_id,
        project_id=project_id or fake.slug(),
        auth={"type": "service_account", "client_email": fake.email()},
    )


def create_message(
    recipients: list[str] | tuple[str, ...] = (),
    sender_type: SenderType = SenderType.SYSTEM,
    sender_account_id: str | None = None,
    org_id: str = ORG_ID,
    app_id: str = APP_ID,
    priority: int = 0,
    topic: str | None = None,
    send_time=None,
    muted: list[str] | tuple[str, ...] = (),
    criteria: list[dict] | None = None,
    queued: bool = True,
) -> Message:
    """Store a message with recipients and, optionally, their queue items."""
    now = timezone.now()
    message_id = fake.uuid4()
    message = Message.objects.create(
        id=message_id,
        org_id=org_id,
        app_id=app_id,
        priority=priority,
        time=send_time or now,
        subject=fake.sentence(nb_words=4),
        body=fake.sentence(),
        data={"message_id": message_id},
        sender_type=sender_type.value,
        sender_account_id=sender_account_id,
        topic=topic,
        topics=[topic] if topic else [],
        recipients_criteria_list=criteria or [],
        calculated_recipients_count=len(recipients),
    )
    for user_id in recipients:
        recipient = MessageRecipient.objects.create(
            org_id=org_id,
            app_id=app_id,
            message=message,
            user_id=user_id,
            mute=user_id in muted,
        )
        if queued:
            create_queue_item(recipient)
    return message


def create_queue_item(
    recipient: MessageRecipient,
    state: QueueItemState = QueueItemState.PENDING,
    next_attempt_at=None,
    attempts: int = 0,
    **fields,
) -> QueueItem:
    """Queue the push of a message to one recipient."""
    message = recipient.message
    return QueueItem.objects.create(
        org_id=recipient.org_id,
        app_id=recipient.app_id,
        message=message,
        message_recipient=recipient,
        user_id=recipient.user_id,
        subject=message.subject,
        body=message.body,
        data=message.data,
        time=message.time,
        priority=message.priority,
        state=state.value,
        attempts=attempts,
        next_attempt_at=next_attempt_at or message.time,
        **fields,
    )


def input_message(
    recipients: list[str] | tuple[str, ...] = (),
    sender: Sender | None = None,
    org_id: str = ORG_ID,
    app_id: str = APP_ID,
    **fields,
) -> InputMessage:
    """Domain input for message creation."""
    return InputMessage(
        org_id=org_id,
        app_id=app_id,
        subject=fields.pop("subject", fake.sentence(nb_words=4)),
        body=fields.pop("body", fake.sentence()),
        sender=sender or Sender(type=SenderType.SYSTEM),
        recipients=[InputRecipient(user_id=user_id) for user_id in recipients],
        **fields,
    )


def user_sender(user_id: str | None = None, name: str | None = None) -> Sender:
    """Sender for a message created by an end user."""
    return Sender(
        type=SenderType.USER,
        user=SenderAccount(user_id=user_id or fake.uuid4(), name=name or fake.name()),
    )


def make_jwt(
    subject: str | None = None,
    org_id: str = ORG_ID,
    app_id: str = APP_ID,
    expires_in: int = 3600,
    **claims,
) -> str:
    """Sign a core access token with the test secret."""
    now = int(time.time())
    payload = {
        "sub": subject or fake.uuid4(),
        "org_id": org_id,
        "app_id": app_id,
        "aud": settings.JWT_AUDIENCE,
        "iat": now,
        "exp": now + expires_in,
        **claims,
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm="HS256")


def auth_headers(subject: str | None = None, **claims) -> dict[str, str]:
    """Django test client headers carrying a bearer token."""
    return {"HTTP_AUTHORIZATION": f"Bearer {make_jwt(subject, **claims)}"}


def internal_headers(key: str | None = None) -> dict[str, str]:
    """Django test client headers carrying the internal API key."""
    return {"HTTP_INTERNAL_API_KEY": key or settings.INTERNAL_API_KEY}


def past(seconds: int) -> datetime:
    """A moment ``seconds`` ago."""
    return timezone.now() - timedelta(seconds=seconds)
