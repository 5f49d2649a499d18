"""Publish provider configuration changes to the push dispatcher."""

from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

import structlog

from core.models import ProviderConfig
from core.store.events import provider_configs_changed, publish_on_commit

logger = structlog.get_logger(__name__)


@receiver(post_save, sender=ProviderConfig)
@receiver(post_delete, sender=ProviderConfig)
def publish_provider_configs(sender, instance, **_kwargs) -> None:
    """Send the full config list once the write that changed it commits."""
    logger.info(
        "provider_config_changed",
        org_id=instance.org_id,
        app_id=instance.app_id,
    )
    publish_on_commit(
        provider_configs_changed,
        sender=sender,
        configs=list(ProviderConfig.objects.all()),
    )
