"""Django application configuration for core."""

from django.apps import AppConfig
from django.conf import settings

import structlog

logger = structlog.get_logger(__name__)


class CoreConfig(AppConfig):
    """Configuration class for the core application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "core"

    def ready(self) -> None:
        """Check configuration and wire the store events when Django is ready."""
        from core.config import check_required_env  # noqa: PLC0415
        from core.logging import setup_logging  # noqa: PLC0415
        from core.services import health_service  # noqa: PLC0415
        from core.services.push import push_dispatcher  # noqa: PLC0415
        from core.store.events import (  # noqa: PLC0415
            provider_configs_changed,
            queue_items_added,
        )
        from core.store.wakeups import broadcast_queue_items_added  # noqa: PLC0415

        import core.signals  # noqa: PLC0415

        del core.signals

        if not settings.TEST_MODE:
            check_required_env()
            setup_logging()

        health_service.set_push_dispatcher(push_dispatcher)
        provider_configs_changed.connect(
            push_dispatcher.on_provider_configs_changed,
            dispatch_uid="push_dispatcher_reload",
        )
        queue_items_added.connect(
            broadcast_queue_items_added, dispatch_uid="queue_wake_broadcast"
        )
        logger.info("core_app_ready")
