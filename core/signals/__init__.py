"""Django signal receivers of the core app."""

from core.signals.provider_config_signals import publish_provider_configs

__all__ = ["publish_provider_configs"]
