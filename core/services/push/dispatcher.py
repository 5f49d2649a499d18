"""Push dispatcher: routes push calls to the tenant's provider client.

The active client map is an immutable snapshot. ``reload_configs`` builds a
new map and publishes it with a single assignment; calls already running
keep the snapshot they started with.

Provider configurations are edited out of band, so every process also
compares a fingerprint of ``firebase_configurations`` against the loaded
snapshot: on each queue dispatcher pass, and on use once
``PROVIDER_CONFIG_REFRESH_SECONDS`` have passed since the last check.
"""

import json
import threading
import time
from collections.abc import Callable, Iterable, Mapping
from types import MappingProxyType

from django.conf import settings
from django.db import DatabaseError

import structlog

from core.enums import PushFailureReason
from core.exceptions import PermanentProviderError
from core.services.push.fcm_client import FCMClient

logger = structlog.get_logger(__name__)

Tenant = tuple[str, str]


def config_fingerprint(configs: Iterable) -> frozenset:
    """Identify a set of provider configs by every field a client is built from."""
    return frozenset(
        (
            str(getattr(config, "pk", "")),
            config.org_id,
            config.app_id,
            config.project_id,
            json.dumps(config.auth, sort_keys=True, default=str),
            getattr(config, "date_updated", None),
        )
        for config in configs
    )


class PushDispatcher:
    """Push provider facade keyed by tenant.

    Errors are raised as ``TransientProviderError`` (retry later) or
    ``PermanentProviderError`` (never succeeds as issued). A tenant without a
    provider configuration fails permanently with reason ``Configuration``.
    """

    def __init__(self, client_factory: Callable[..., FCMClient] = FCMClient.from_config):
        self._client_factory = client_factory
        self._clients: Mapping[Tenant, FCMClient] = MappingProxyType({})
        self._fingerprint: frozenset | None = None
        self._checked_at = 0.0
        self._loaded = False
        self._load_lock = threading.Lock()

    def reload_configs(self, configs: Iterable) -> None:
        """Swap in clients built from the given provider configs."""
        configs = list(configs)
        clients = {}
        for config in configs:
            tenant = (config.org_id, config.app_id)
            try:
                clients[tenant] = self._client_factory(config)
            except (TypeError, ValueError, KeyError) as e:
                logger.error(
                    "provider_config_invalid",
                    org_id=config.org_id,
                    app_id=config.app_id,
                    error=str(e),
                )
        self._clients = MappingProxyType(clients)
        self._fingerprint = config_fingerprint(configs)
        self._checked_at = time.monotonic()
        self._loaded = True
        logger.info("provider_configs_reloaded", tenants=len(clients))

    def on_provider_configs_changed(self, sender=None, configs=None, **_kwargs) -> None:
        """Receiver for the ``provider_configs_changed`` store event."""
        if configs is None:
            configs = self._stored_configs()
        self.reload_configs(configs)

    def refresh_configs(self) -> bool:
        """Reload if the stored configs differ from the loaded snapshot.

        Returns:
            True when the snapshot was replaced.
        """
        self._checked_at = time.monotonic()
        configs = self._stored_configs()
        if self._loaded and config_fingerprint(configs) == self._fingerprint:
            return False
        logger.info("provider_configs_changed_out_of_band")
        self.reload_configs(configs)
        return True

    @staticmethod
    def _stored_configs() -> list:
        from core.models import ProviderConfig  # noqa: PLC0415

        return list(ProviderConfig.objects.all())

    def configured_tenants(self) -> list[Tenant]:
        """Tenants with a provider client in the current snapshot."""
        return list(self._snapshot().keys())

    def send_to_token(self, org_id: str, app_id: str, token: str, payload: dict) -> str:
        """Push a payload to one device token."""
        return self._client(org_id, app_id).send_to_token(token, payload)

    def send_to_topic(self, org_id: str, app_id: str, topic: str, payload: dict) -> str:
        """Push a payload to a provider topic."""
        return self._client(org_id, app_id).send_to_topic(topic, payload)

    def subscribe(self, org_id: str, app_id: str, token: str, topic: str) -> None:
        """Subscribe a token to a provider topic."""
        self._client(org_id, app_id).subscribe(token, topic)
        logger.debug("provider_subscribed", org_id=org_id, app_id=app_id, topic=topic)

    def unsubscribe(self, org_id: str, app_id: str, token: str, topic: str) -> None:
        """Unsubscribe a token from a provider topic."""
        self._client(org_id, app_id).unsubscribe(token, topic)
        logger.debug("provider_unsubscribed", org_id=org_id, app_id=app_id, topic=topic)

    def _snapshot(self) -> Mapping[Tenant, FCMClient]:
        if not self._loaded:
            with self._load_lock:
                if not self._loaded:
                    self.on_provider_configs_changed()
        elif (
            time.monotonic() - self._checked_at >= settings.PROVIDER_CONFIG_REFRESH_SECONDS
            and self._load_lock.acquire(blocking=False)
        ):
            try:
                self.refresh_configs()
            except DatabaseError as e:
                logger.warning("provider_config_refresh_failed", error=str(e))
            finally:
                self._load_lock.release()
        return self._clients

    def _client(self, org_id: str, app_id: str) -> FCMClient:
        client = self._snapshot().get((org_id, app_id))
        if client is None:
            logger.error("provider_config_missing", org_id=org_id, app_id=app_id)
            raise PermanentProviderError(
                PushFailureReason.CONFIGURATION,
                f"No push provider configured for {org_id}/{app_id}",
                tenant=(org_id, app_id),
            )
        return client


push_dispatcher = PushDispatcher()
