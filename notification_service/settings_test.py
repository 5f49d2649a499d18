"""Test-specific Django settings."""

from django.db.models.signals import class_prepared

from .settings import *

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

DEBUG = False

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
    }
}

TEST_MODE = True

NOTIFICATIONS_ORG_ID = "test-org"
NOTIFICATIONS_APP_ID = "test-app"
INTERNAL_API_KEY = "test-internal-key"
CORE_BB_HOST = "http://core.test"
JWT_SECRET = "test-jwt-secret-with-enough-bytes-for-hs256"
CORE_AUTH_PUBLIC_KEY = ""

QUEUE_MAX_ATTEMPTS = 3
QUEUE_BACKOFF_JITTER_SECONDS = 0
QUEUE_WAKE_CHANNEL = ""

EMAIL_HOST = "smtp.test"
DEFAULT_FROM_EMAIL = "noreply@example.com"


# Models are managed=False because the schema is provisioned outside the
# service. The test database still needs the tables.
def make_unmanaged_models_managed(sender, **_kwargs):
    """Signal handler to make unmanaged models managed during tests."""
    if not sender._meta.managed:
        sender._meta.managed = True


class_prepared.connect(make_unmanaged_models_managed)
