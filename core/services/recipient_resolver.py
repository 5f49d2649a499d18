"""Recipient resolution for new messages.

Combines explicit recipients, topic subscribers, token criteria and an
external account query into the per-user rows of a message. The result is
deterministic for a given store state and keeps input order.
"""

from datetime import datetime
from typing import Any

from django.utils import timezone

import structlog

from core.exceptions import DownstreamServiceError
from core.models import MessageRecipient
from core.repositories import UserRepository
from core.schemas.message import InputRecipient, RecipientCriteria
from core.services.downstream import core_account_client

logger = structlog.get_logger(__name__)


class RecipientResolver:
    """Computes the recipients of a message."""

    def __init__(self, account_client=None):
        self.account_client = account_client or core_account_client

    def resolve(
        self,
        org_id: str,
        app_id: str,
        message_id: str,
        recipients: list[InputRecipient],
        criteria_list: list[RecipientCriteria],
        account_criteria: dict[str, Any],
        topics: list[str],
        now: datetime | None = None,
    ) -> list[MessageRecipient]:
        """Resolve recipients, unsaved and ready for a bulk insert.

        1. Explicit recipients form the base set.
        2. With topics, an empty base becomes the subscribers; otherwise
           explicit recipients who are not subscribers are muted. No
           subscribers and no explicit recipients skips step 3.
        3. Token criteria replace an empty base or narrow a non-empty one.
        4. Accounts matching the account criteria are appended.

        A user appears once, with the first row that named them.
        """
        now = now or timezone.now()
        rows = [(recipient.user_id, False) for recipient in recipients]
        check_criteria = True

        if topics:
            subscribers = UserRepository.user_ids_by_topics(org_id, app_id, topics)
            if not rows:
                rows = [(user_id, False) for user_id in subscribers]
                check_criteria = bool(subscribers)
            else:
                subscribed = set(subscribers)
                rows = [(user_id, user_id not in subscribed) for user_id, _ in rows]

        if criteria_list and check_criteria:
            criteria = [criterion.model_dump() for criterion in criteria_list]
            matched = UserRepository.user_ids_by_criteria(org_id, app_id, criteria)
            if not rows:
                rows = [(user_id, False) for user_id in matched]
            else:
                matching = set(matched)
                rows = [row for row in rows if row[0] in matching]

        if account_criteria:
            rows.extend(
                (user_id, False)
                for user_id in self._account_recipients(org_id, app_id, account_criteria)
            )

        unique: dict[str, bool] = {}
        for user_id, mute in rows:
            unique.setdefault(user_id, mute)

        return [
            MessageRecipient(
                org_id=org_id,
                app_id=app_id,
                message_id=message_id,
                user_id=user_id,
                mute=mute,
                read=False,
                date_created=now,
            )
            for user_id, mute in unique.items()
        ]

    def _account_recipients(
        self, org_id: str, app_id: str, account_criteria: dict[str, Any]
    ) -> list[str]:
        try:
            return self.account_client.find_account_ids(org_id, app_id, account_criteria)
        except DownstreamServiceError as e:
            logger.warning(
                "account_criteria_lookup_failed",
                org_id=org_id,
                app_id=app_id,
                error=str(e),
            )
            return []


recipient_resolver = RecipientResolver()
