"""Token and subscription registry.

The registry is the only writer of a user's tokens and topic subscriptions.
Local state changes are transactional; the matching push provider calls are
made afterwards and repaired by compensating jobs when they fail.
"""

from itertools import product

from django.utils import timezone

import structlog

from core.enums import PushFailureReason
from core.exceptions import (
    NotFoundError,
    PermanentProviderError,
    PushProviderError,
    TransientProviderError,
)
from core.models import AppPlatform, AppVersion, FirebaseToken, Topic, User, UserTopic
from core.repositories import UserRepository
from core.schemas.user import TokenInfo
from core.services.health_service import health_service
from core.services.push import push_dispatcher
from core.store import run_in_transaction

logger = structlog.get_logger(__name__)


class RegistryService:
    """Owns the user to token and user to topic relations of every tenant."""

    def __init__(self, dispatcher=None):
        self.dispatcher = dispatcher or push_dispatcher

    def store_token(self, org_id: str, app_id: str, user_id: str, info: TokenInfo) -> User:
        """Register a device token for a user.

        Runs in one transaction. A previous token is removed from whoever
        owns it; a token owned by another user moves to ``user_id``; a token
        the user already has is left alone. Users are never deleted here,
        even when their last token moves away.

        Returns:
            The user now owning the token.
        """

        def _store() -> User:
            if info.previous_token and info.previous_token != info.token:
                removed, _ = FirebaseToken.objects.filter(
                    org_id=org_id, app_id=app_id, token=info.previous_token
                ).delete()
                if removed:
                    logger.info("previous_token_removed", org_id=org_id, app_id=app_id)

            existing = UserRepository.find_token(org_id, app_id, info.token)
            if existing is not None and existing.user.user_id == user_id:
                return existing.user

            if existing is not None:
                logger.info(
                    "token_reassigned",
                    org_id=org_id,
                    app_id=app_id,
                    from_user_id=existing.user.user_id,
                    to_user_id=user_id,
                )
                existing.delete()

            user = UserRepository.get_or_create_user(org_id, app_id, user_id)
            FirebaseToken.objects.create(
                user=user,
                org_id=org_id,
                app_id=app_id,
                token=info.token,
                app_platform=info.app_platform,
                app_version=info.app_version,
            )
            user.date_updated = timezone.now()
            user.save(update_fields=["date_updated"])
            UserRepository.record_app_release(
                org_id, app_id, info.app_version, info.app_platform
            )
            return user

        user = run_in_transaction(_store)
        logger.info("token_stored", org_id=org_id, app_id=app_id, user_id=user_id)
        return user

    def find_user_by_token(self, org_id: str, app_id: str, token: str) -> User | None:
        """Owner of a token, or None."""
        return UserRepository.find_user_by_token(org_id, app_id, token)

    def find_user(self, org_id: str, app_id: str, user_id: str) -> User | None:
        """User by account ID, or None."""
        return UserRepository.find_user(org_id, app_id, user_id)

    def get_user(self, org_id: str, app_id: str, user_id: str) -> User:
        """User by account ID.

        Raises:
            NotFoundError: If the user is not registered in the tenant.
        """
        user = self.find_user(org_id, app_id, user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found")
        return user

    def update_user(
        self, org_id: str, app_id: str, user_id: str, notifications_disabled: bool
    ) -> User:
        """Enable or disable push delivery for a user."""
        user = self.get_user(org_id, app_id, user_id)
        user.notifications_disabled = notifications_disabled
        user.date_updated = timezone.now()
        user.save(update_fields=["notifications_disabled", "date_updated"])
        logger.info(
            "user_updated",
            org_id=org_id,
            app_id=app_id,
            user_id=user_id,
            notifications_disabled=notifications_disabled,
        )
        return user

    def subscribe(
        self,
        org_id: str,
        app_id: str,
        token: str | None,
        user_id: str | None,
        anonymous: bool,
        topic: str,
    ) -> None:
        """Subscribe a user (and device) to a topic.

        Anonymous callers are only subscribed at the provider. Otherwise the
        subscription is persisted first; a failed provider call afterwards
        schedules a compensating retry instead of rolling back.
        """
        if anonymous or not user_id:
            if token:
                self.dispatcher.subscribe(org_id, app_id, token, topic)
            return

        def _persist() -> None:
            user = UserRepository.get_or_create_user(org_id, app_id, user_id)
            UserTopic.objects.get_or_create(user=user, topic=topic)
            Topic.objects.get_or_create(org_id=org_id, app_id=app_id, name=topic)

        run_in_transaction(_persist)
        logger.info("topic_subscribed", org_id=org_id, app_id=app_id, user_id=user_id, topic=topic)

        if token:
            self._sync_provider("subscribe", org_id, app_id, token, topic)

    def unsubscribe(
        self,
        org_id: str,
        app_id: str,
        token: str | None,
        user_id: str | None,
        anonymous: bool,
        topic: str,
    ) -> None:
        """Unsubscribe a user (and device) from a topic."""
        if anonymous or not user_id:
            if token:
                self.dispatcher.unsubscribe(org_id, app_id, token, topic)
            return

        def _persist() -> None:
            UserTopic.objects.filter(
                user__org_id=org_id,
                user__app_id=app_id,
                user__user_id=user_id,
                topic=topic,
            ).delete()

        run_in_transaction(_persist)
        logger.info(
            "topic_unsubscribed", org_id=org_id, app_id=app_id, user_id=user_id, topic=topic
        )

        if token:
            self._sync_provider("unsubscribe", org_id, app_id, token, topic)

    def _sync_provider(
        self, action: str, org_id: str, app_id: str, token: str, topic: str
    ) -> None:
        try:
            getattr(self.dispatcher, action)(org_id, app_id, token, topic)
        except PushProviderError as e:
            logger.warning(
                "provider_desync",
                action=action,
                org_id=org_id,
                app_id=app_id,
                topic=topic,
                error=str(e),
            )
            health_service.record_provider_desync()
            from core.jobs.subscription_jobs import (  # noqa: PLC0415
                schedule_subscription_retry,
            )

            schedule_subscription_retry(action, org_id, app_id, token, topic, attempt=1)

    def delete_user(self, org_id: str, app_id: str, user_id: str) -> None:
        """Delete a user with its tokens and subscriptions.

        The provider side is cleaned up afterwards on a best-effort basis:
        each token is unsubscribed from each topic, tokens the provider no
        longer knows are skipped.

        Raises:
            NotFoundError: If the user is not registered in the tenant.
        """

        def _delete() -> tuple[list[str], list[str]]:
            user = self.get_user(org_id, app_id, user_id)
            tokens = [token.token for token in user.token_list()]
            topics = user.topic_names()
            user.delete()
            return tokens, topics

        tokens, topics = run_in_transaction(_delete)
        logger.info(
            "user_deleted",
            org_id=org_id,
            app_id=app_id,
            user_id=user_id,
            tokens=len(tokens),
            topics=len(topics),
        )

        for token, topic in product(tokens, topics):
            try:
                self.dispatcher.unsubscribe(org_id, app_id, token, topic)
            except PermanentProviderError as e:
                if e.reason is PushFailureReason.UNREGISTERED:
                    continue
                logger.warning(
                    "provider_unsubscribe_failed", topic=topic, reason=e.reason.value, error=str(e)
                )
            except TransientProviderError as e:
                logger.warning("provider_unsubscribe_failed", topic=topic, error=str(e))

    def remove_token(self, org_id: str, app_id: str, user_id: str, token: str) -> bool:
        """Drop a token the provider rejected. Returns whether it existed."""
        removed, _ = FirebaseToken.objects.filter(
            org_id=org_id, app_id=app_id, user__user_id=user_id, token=token
        ).delete()
        if removed:
            logger.info("token_unregistered", org_id=org_id, app_id=app_id, user_id=user_id)
        return bool(removed)

    def get_tokens_for_user(
        self,
        org_id: str,
        app_id: str,
        user_id: str,
        criteria_list: list[dict] | None = None,
    ) -> list[FirebaseToken]:
        """Tokens a push for ``user_id`` should go to."""
        return list(
            UserRepository.deliverable_tokens(org_id, app_id, user_id, criteria_list)
        )

    def get_topics(self, org_id: str, app_id: str) -> list[Topic]:
        """Topics of a tenant."""
        return list(Topic.objects.filter(org_id=org_id, app_id=app_id))

    def update_topic(self, org_id: str, app_id: str, name: str, description: str) -> Topic:
        """Change a topic description.

        Raises:
            NotFoundError: If the topic does not exist.
        """
        topic = Topic.objects.filter(org_id=org_id, app_id=app_id, name=name).first()
        if topic is None:
            raise NotFoundError(f"Topic {name} not found")
        topic.description = description
        topic.date_updated = timezone.now()
        topic.save(update_fields=["description", "date_updated"])
        return topic

    def get_app_versions(self, org_id: str, app_id: str) -> list[AppVersion]:
        """App versions seen on tokens of a tenant."""
        return list(AppVersion.objects.filter(org_id=org_id, app_id=app_id))

    def get_app_platforms(self, org_id: str, app_id: str) -> list[AppPlatform]:
        """App platforms seen on tokens of a tenant."""
        return list(AppPlatform.objects.filter(org_id=org_id, app_id=app_id))


registry_service = RegistryService()
