"""Message service: creation, inbox reads, read/mute state and deletion.

Creation writes the message, its recipients and one queue item per recipient
in a single transaction, then wakes the delivery queue once it commits.
"""

import uuid

from django.db.models import Count, Q, QuerySet
from django.utils import timezone

import structlog

from core.constants import MESSAGE_ID_DATA_KEY
from core.enums import QueueItemState
from core.exceptions import ForbiddenError, NotFoundError
from core.models import Message, MessageRecipient, QueueItem
from core.schemas.message import (
    InboxQuery,
    InputMessage,
    InputRecipient,
    MessagesStatsResponse,
    UpdateMessageRequest,
)
from core.services.recipient_resolver import recipient_resolver
from core.store import run_in_transaction
from core.store.events import publish_on_commit, queue_items_added

logger = structlog.get_logger(__name__)

UPDATABLE_FIELDS = ("priority", "topic", "subject", "body")


class MessageService:
    """Stores messages and the inbox entries of their recipients."""

    def __init__(self, resolver=None):
        self.resolver = resolver or recipient_resolver

    # Creation

    def create_message(self, input_message: InputMessage) -> Message:
        """Create one message and enqueue its push deliveries.

        A message without recipients is still stored, with a count of 0.
        """
        return self.create_messages([input_message])[0]

    def create_messages(
        self, input_messages: list[InputMessage], is_batch: bool = False
    ) -> list[Message]:
        """Create several messages in one transaction.

        In batch mode a user receives only the first message naming them.
        """

        def _create() -> list[Message]:
            now = timezone.now()
            seen: set[str] = set()
            messages = []
            queued = 0
            for input_message in input_messages:
                message = self._build_message(input_message, now)
                recipients = self.resolver.resolve(
                    input_message.org_id,
                    input_message.app_id,
                    message.id,
                    input_message.recipients,
                    input_message.recipients_criteria_list,
                    input_message.recipient_account_criteria,
                    input_message.all_topics(),
                    now=now,
                )
                if is_batch:
                    recipients = [r for r in recipients if r.user_id not in seen]
                    seen.update(r.user_id for r in recipients)

                message.calculated_recipients_count = len(recipients)
                message.save(force_insert=True)
                queued += self._insert_recipients(message, recipients, now)
                messages.append(message)

            if queued:
                publish_on_commit(queue_items_added, sender=self.__class__, count=queued)
            return messages

        messages = run_in_transaction(_create)
        for message in messages:
            logger.info(
                "message_created",
                org_id=message.org_id,
                app_id=message.app_id,
                message_id=message.id,
                sender_type=message.sender_type,
                recipients=message.calculated_recipients_count,
            )
        return messages

    def _build_message(self, input_message: InputMessage, now) -> Message:
        message_id = input_message.id or str(uuid.uuid4())
        data = dict(input_message.data)
        data[MESSAGE_ID_DATA_KEY] = message_id
        sender = input_message.sender
        account = sender.user
        return Message(
            id=message_id,
            org_id=input_message.org_id,
            app_id=input_message.app_id,
            priority=input_message.priority,
            time=input_message.time or now,
            subject=input_message.subject,
            body=input_message.body,
            data=data,
            sender_type=sender.type,
            sender_account_id=account.user_id if account else None,
            sender_name=account.name if account else None,
            topic=input_message.topic,
            topics=input_message.all_topics(),
            recipients_criteria_list=[
                criteria.model_dump() for criteria in input_message.recipients_criteria_list
            ],
            recipient_account_criteria=input_message.recipient_account_criteria,
            date_created=now,
        )

    def _insert_recipients(
        self, message: Message, recipients: list[MessageRecipient], now
    ) -> int:
        """Bulk insert recipients and their queue items. Returns the item count."""
        if not recipients:
            return 0
        MessageRecipient.objects.bulk_create(recipients)
        QueueItem.objects.bulk_create(
            [
                QueueItem(
                    org_id=message.org_id,
                    app_id=message.app_id,
                    message=message,
                    message_recipient=recipient,
                    user_id=recipient.user_id,
                    subject=message.subject,
                    body=message.body,
                    data=message.data,
                    time=message.time,
                    priority=message.priority,
                    state=QueueItemState.PENDING.value,
                    next_attempt_at=message.time,
                    date_created=now,
                )
                for recipient in recipients
            ]
        )
        return len(recipients)

    # Reads

    def get_message(self, org_id: str, app_id: str, message_id: str) -> Message:
        """Message by ID.

        Raises:
            NotFoundError: If the message does not exist in the tenant.
        """
        message = Message.objects.filter(org_id=org_id, app_id=app_id, pk=message_id).first()
        if message is None:
            raise NotFoundError(f"Message {message_id} not found")
        return message

    def get_user_message(
        self, org_id: str, app_id: str, message_id: str, account_id: str
    ) -> Message | None:
        """Message visible to an account: its sender or one of its recipients.

        Returns None when the message is missing or not visible.
        """
        message = Message.objects.filter(org_id=org_id, app_id=app_id, pk=message_id).first()
        if message is None:
            return None
        if message.is_sent_by(account_id):
            return message
        if message.recipients.filter(user_id=account_id).exists():
            return message
        return None

    def get_user_recipient(
        self, org_id: str, app_id: str, message_id: str, user_id: str
    ) -> MessageRecipient | None:
        """Inbox entry of a user for a message, or None."""
        return (
            MessageRecipient.objects.select_related("message")
            .filter(org_id=org_id, app_id=app_id, message_id=message_id, user_id=user_id)
            .first()
        )

    def get_user_messages(
        self, org_id: str, app_id: str, user_id: str, query: InboxQuery
    ) -> list[MessageRecipient]:
        """Inbox of a user, with the message of each entry loaded."""
        entries = MessageRecipient.objects.select_related("message").filter(
            org_id=org_id, app_id=app_id, user_id=user_id
        )
        if query.read is not None:
            entries = entries.filter(read=query.read)
        if query.mute is not None:
            entries = entries.filter(mute=query.mute)
        if query.ids:
            entries = entries.filter(message_id__in=query.ids)
        if query.topic:
            entries = entries.filter(message__topic=query.topic)
        entries = self._time_window(entries, query, "message__time")
        return list(self._page(entries, query, "date_created"))

    def get_messages(self, org_id: str, app_id: str, query: InboxQuery) -> list[Message]:
        """Messages of a tenant for administrators."""
        messages = Message.objects.filter(org_id=org_id, app_id=app_id)
        if query.ids:
            messages = messages.filter(pk__in=query.ids)
        if query.sender_id:
            messages = messages.filter(sender_account_id=query.sender_id)
        if query.topic:
            messages = messages.filter(topic=query.topic)
        messages = self._time_window(messages, query, "time")
        return list(self._page(messages, query, "date_created"))

    def get_messages_stats(
        self, org_id: str, app_id: str, user_id: str
    ) -> MessagesStatsResponse:
        """Inbox counters of a user."""
        counts = MessageRecipient.objects.filter(
            org_id=org_id, app_id=app_id, user_id=user_id
        ).aggregate(
            total_count=Count("id"),
            muted_count=Count("id", filter=Q(mute=True)),
            not_muted_count=Count("id", filter=Q(mute=False)),
            read_count=Count("id", filter=Q(read=True)),
            not_read_count=Count("id", filter=Q(read=False)),
            not_read_not_mute=Count("id", filter=Q(read=False, mute=False)),
        )
        return MessagesStatsResponse(**counts)

    @staticmethod
    def _time_window(queryset: QuerySet, query: InboxQuery, field: str) -> QuerySet:
        start = InboxQuery.epoch_ms(query.start_date)
        end = InboxQuery.epoch_ms(query.end_date)
        if start is not None:
            queryset = queryset.filter(**{f"{field}__gte": start})
        if end is not None:
            queryset = queryset.filter(**{f"{field}__lte": end})
        return queryset

    @staticmethod
    def _page(queryset: QuerySet, query: InboxQuery, field: str) -> QuerySet:
        ordering = field if query.order == "asc" else f"-{field}"
        return queryset.order_by(ordering, "pk")[query.offset : query.offset + query.limit]

    # Updates

    def update_message(
        self,
        auth_user_id: str | None,
        org_id: str,
        app_id: str,
        message_id: str,
        update: UpdateMessageRequest,
    ) -> Message:
        """Edit message metadata.

        Only the sender may edit; ``auth_user_id=None`` stands for the system
        or an administrator. Recipients are not re-resolved.

        Raises:
            NotFoundError: If the message does not exist.
            ForbiddenError: If the caller did not send the message.
        """

        def _update() -> Message:
            message = self.get_message(org_id, app_id, message_id)
            if auth_user_id is not None and not message.is_sent_by(auth_user_id):
                raise ForbiddenError("Only the sender can update the message")
            changed = [
                field for field in UPDATABLE_FIELDS if getattr(update, field) is not None
            ]
            for field in changed:
                setattr(message, field, getattr(update, field))
            message.date_updated = timezone.now()
            message.save(update_fields=[*changed, "date_updated"])
            return message

        message = run_in_transaction(_update)
        logger.info("message_updated", org_id=org_id, app_id=app_id, message_id=message_id)
        return message

    def update_read_message(
        self, org_id: str, app_id: str, message_id: str, user_id: str, read: bool = True
    ) -> Message | None:
        """Mark a message read for one user. None if not in their inbox."""
        recipient = self.get_user_recipient(org_id, app_id, message_id, user_id)
        if recipient is None:
            return None
        recipient.mark_read(read)
        return recipient.message

    def update_all_user_messages_read(
        self, org_id: str, app_id: str, user_id: str, read: bool
    ) -> int:
        """Set the read flag on every inbox entry of a user."""
        updated = MessageRecipient.objects.filter(
            org_id=org_id, app_id=app_id, user_id=user_id
        ).update(read=read, date_updated=timezone.now())
        logger.info(
            "inbox_read_updated", org_id=org_id, app_id=app_id, read=read, entries=updated
        )
        return updated

    def update_recipient(
        self,
        org_id: str,
        app_id: str,
        message_id: str,
        user_id: str,
        mute: bool | None = None,
        read: bool | None = None,
    ) -> MessageRecipient:
        """Set read and mute flags of one inbox entry.

        Raises:
            NotFoundError: If the user is not a recipient of the message.
        """
        recipient = self.get_user_recipient(org_id, app_id, message_id, user_id)
        if recipient is None:
            raise NotFoundError(f"Recipient {user_id} of message {message_id} not found")
        if mute is not None:
            recipient.set_mute(mute)
        if read is not None:
            recipient.mark_read(read)
        return recipient

    def add_recipients(
        self,
        org_id: str,
        app_id: str,
        message_id: str,
        recipients: list[InputRecipient],
        read: bool = False,
    ) -> list[MessageRecipient]:
        """Add recipients to an existing message and enqueue their pushes.

        Users already receiving the message are left untouched.

        Raises:
            NotFoundError: If the message does not exist.
        """

        def _add() -> list[MessageRecipient]:
            now = timezone.now()
            message = self.get_message(org_id, app_id, message_id)
            existing = set(message.recipients.values_list("user_id", flat=True))
            added = []
            for recipient in recipients:
                if recipient.user_id in existing:
                    continue
                existing.add(recipient.user_id)
                added.append(
                    MessageRecipient(
                        org_id=org_id,
                        app_id=app_id,
                        message=message,
                        user_id=recipient.user_id,
                        mute=recipient.mute,
                        read=read,
                        date_created=now,
                    )
                )
            if self._insert_recipients(message, added, now):
                publish_on_commit(queue_items_added, sender=self.__class__, count=len(added))
            return added

        added = run_in_transaction(_add)
        logger.info(
            "recipients_added", org_id=org_id, app_id=app_id, message_id=message_id, count=len(added)
        )
        return added

    # Deletion

    def delete_message(self, org_id: str, app_id: str, message_id: str) -> None:
        """Delete a message with its recipients and queue items.

        Items already claimed by a worker are removed as well; the worker's
        result is discarded when it tries to finalize them.

        Raises:
            NotFoundError: If the message does not exist.
        """

        def _delete() -> None:
            message = self.get_message(org_id, app_id, message_id)
            message.delete()

        run_in_transaction(_delete)
        logger.info("message_deleted", org_id=org_id, app_id=app_id, message_id=message_id)

    def delete_messages(
        self, org_id: str, app_id: str, sender_account_id: str, message_ids: list[str]
    ) -> None:
        """Delete messages sent by a service account, all or none.

        Raises:
            NotFoundError: If any message does not exist.
            ForbiddenError: If any message was sent by another account.
        """

        def _delete() -> None:
            ids = list(dict.fromkeys(message_ids))
            messages = list(Message.objects.filter(org_id=org_id, app_id=app_id, pk__in=ids))
            if len(messages) != len(ids):
                found = {message.id for message in messages}
                missing = [message_id for message_id in ids if message_id not in found]
                raise NotFoundError(f"Messages not found: {', '.join(missing)}")
            for message in messages:
                if not message.is_sent_by(sender_account_id):
                    raise ForbiddenError(f"Message {message.id} was sent by another account")
            Message.objects.filter(pk__in=ids).delete()

        run_in_transaction(_delete)
        logger.info("messages_deleted", org_id=org_id, app_id=app_id, count=len(message_ids))

    def delete_user_message(
        self, org_id: str, app_id: str, user_id: str, message_id: str
    ) -> None:
        """Remove a message from one user's inbox.

        The message stays for its other recipients.

        Raises:
            NotFoundError: If the message is not in the user's inbox.
        """
        deleted, _ = MessageRecipient.objects.filter(
            org_id=org_id, app_id=app_id, user_id=user_id, message_id=message_id
        ).delete()
        if not deleted:
            raise NotFoundError(f"Message {message_id} not found")
        logger.info("user_message_deleted", org_id=org_id, app_id=app_id, message_id=message_id)

    def delete_user_messages(
        self, org_id: str, app_id: str, user_id: str, message_ids: list[str]
    ) -> int:
        """Remove several messages from one user's inbox. Returns entries removed."""

        def _delete() -> int:
            entries = MessageRecipient.objects.filter(
                org_id=org_id, app_id=app_id, user_id=user_id, message_id__in=message_ids
            )
            removed = entries.count()
            entries.delete()
            return removed

        removed = run_in_transaction(_delete)
        logger.info("user_messages_deleted", org_id=org_id, app_id=app_id, count=removed)
        return removed


message_service = MessageService()
