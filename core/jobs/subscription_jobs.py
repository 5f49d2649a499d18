"""Compensating jobs that repair provider-side topic subscriptions.

When a subscription change was persisted but the provider call failed, the
same call is retried from an RQ job with exponential backoff until it
succeeds, the provider rejects it permanently, or retries run out. Desyncs
that end without a successful call move to the unresolved health gauge.
"""

from datetime import timedelta

from django.conf import settings

import django_rq
import structlog
from redis.exceptions import RedisError

from core.exceptions import PermanentProviderError, TransientProviderError
from core.services.health_service import health_service
from core.services.push import push_dispatcher

logger = structlog.get_logger(__name__)


def schedule_subscription_retry(
    action: str, org_id: str, app_id: str, token: str, topic: str, attempt: int
) -> None:
    """Schedule ``retry_subscription_job`` after the backoff for ``attempt``."""
    delay_seconds = settings.SUBSCRIPTION_RETRY_DELAY_SECONDS * (2 ** (attempt - 1))
    try:
        scheduler = django_rq.get_scheduler("default")
        scheduler.enqueue_in(
            timedelta(seconds=delay_seconds),
            retry_subscription_job,
            action,
            org_id,
            app_id,
            token,
            topic,
            attempt,
        )
    except RedisError as e:
        logger.error(
            "subscription_retry_not_scheduled",
            action=action,
            org_id=org_id,
            app_id=app_id,
            topic=topic,
            error=str(e),
        )
        health_service.abandon_provider_desync()
        return

    logger.info(
        "subscription_retry_scheduled",
        action=action,
        org_id=org_id,
        app_id=app_id,
        topic=topic,
        attempt=attempt,
        delay_seconds=delay_seconds,
    )


def retry_subscription_job(
    action: str, org_id: str, app_id: str, token: str, topic: str, attempt: int
) -> None:
    """Replay a provider ``subscribe`` / ``unsubscribe`` call.

    Args:
        action: ``subscribe`` or ``unsubscribe``.
        org_id: Tenant organization.
        app_id: Tenant application.
        token: Device token.
        topic: Topic name.
        attempt: Number of the retry being executed, starting at 1.
    """
    try:
        getattr(push_dispatcher, action)(org_id, app_id, token, topic)
    except TransientProviderError as e:
        if attempt < settings.SUBSCRIPTION_MAX_RETRIES:
            schedule_subscription_retry(action, org_id, app_id, token, topic, attempt + 1)
            return
        logger.error(
            "provider_desync_unresolved",
            action=action,
            org_id=org_id,
            app_id=app_id,
            topic=topic,
            attempts=attempt,
            error=str(e),
        )
        health_service.abandon_provider_desync()
        return
    except PermanentProviderError as e:
        logger.error(
            "provider_desync_unresolved",
            action=action,
            org_id=org_id,
            app_id=app_id,
            topic=topic,
            reason=e.reason.value,
            error=str(e),
        )
        health_service.abandon_provider_desync()
        return

    health_service.resolve_provider_desync()
    logger.info(
        "provider_desync_resolved",
        action=action,
        org_id=org_id,
        app_id=app_id,
        topic=topic,
        attempts=attempt,
    )
