"""Required environment configuration."""

import os

from django.core.exceptions import ImproperlyConfigured

REQUIRED_ENV_VARS = (
    "NOTIFICATIONS_ORG_ID",
    "NOTIFICATIONS_APP_ID",
    "DB_NAME",
    "DB_HOST",
    "DB_USER",
    "DB_PASSWORD",
    "INTERNAL_API_KEY",
    "CORE_BB_HOST",
    "CORE_SERVICE_PRIVATE_KEY",
    "NOTIFICATIONS_SERVICE_URL",
    "SMTP_HOST",
    "SMTP_PORT",
    "SMTP_USER",
    "SMTP_PASSWORD",
    "SMTP_EMAIL_FROM",
)


def missing_env_vars(environ=None) -> list[str]:
    """Return the required variables that are unset or empty."""
    environ = os.environ if environ is None else environ
    return [name for name in REQUIRED_ENV_VARS if not environ.get(name)]


def check_required_env(environ=None) -> None:
    """Refuse to start when required configuration is missing.

    Raises:
        ImproperlyConfigured: Listing every missing variable.
    """
    missing = missing_env_vars(environ)
    if missing:
        raise ImproperlyConfigured(
            "Missing required environment variables: " + ", ".join(missing)
        )
