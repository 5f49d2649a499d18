"""Django settings for the notification dispatch service.

Values come from environment variables. Variables the service cannot run
without are listed in ``core.config.env.REQUIRED_ENV_VARS`` and checked when
the ``core`` app becomes ready.
"""

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

SERVICE_VERSION = os.getenv("SERVICE_VERSION", "1.0.0")
SERVICE_URL = os.getenv("NOTIFICATIONS_SERVICE_URL", "http://localhost:8000")

SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "insecure-development-key")
DEBUG = os.getenv("DEBUG", "false").lower() == "true"
ALLOWED_HOSTS = os.getenv("ALLOWED_HOSTS", "*").split(",")

# Test settings override this flag
TEST_MODE = False

INSTALLED_APPS = [
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "rest_framework",
    "django_rq",
    "core",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "core.middleware.request_id.RequestIDMiddleware",
    "django.middleware.common.CommonMiddleware",
    "core.middleware.security_context.SecurityContextMiddleware",
]

ROOT_URLCONF = "notification_service.urls"
WSGI_APPLICATION = "notification_service.wsgi.application"

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.postgresql",
        "NAME": os.getenv("DB_NAME", "notifications"),
        "USER": os.getenv("DB_USER", "notifications"),
        "PASSWORD": os.getenv("DB_PASSWORD", ""),
        "HOST": os.getenv("DB_HOST", "localhost"),
        "PORT": os.getenv("DB_PORT", "5432"),
        "CONN_MAX_AGE": int(os.getenv("DB_CONN_MAX_AGE", "60")),
    }
}

REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.redis.RedisCache",
        "LOCATION": REDIS_URL,
    }
}

RQ_QUEUES = {
    "default": {
        "URL": REDIS_URL,
        "DEFAULT_TIMEOUT": 360,
    },
}

REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": [],
    "DEFAULT_PERMISSION_CLASSES": [],
    "DEFAULT_RENDERER_CLASSES": ["rest_framework.renderers.JSONRenderer"],
    "DEFAULT_PARSER_CLASSES": ["rest_framework.parsers.JSONParser"],
    "EXCEPTION_HANDLER": "core.exceptions.handlers.custom_exception_handler",
    "UNAUTHENTICATED_USER": None,
}

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_TZ = True
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# Logging is configured by core.logging.setup_logging() from CoreConfig.ready()
LOGGING_CONFIG = None

# Tenant used by the legacy internal endpoints
NOTIFICATIONS_ORG_ID = os.getenv("NOTIFICATIONS_ORG_ID", "")
NOTIFICATIONS_APP_ID = os.getenv("NOTIFICATIONS_APP_ID", "")

# Authentication
INTERNAL_API_KEY = os.getenv("INTERNAL_API_KEY", "")
INTERNAL_API_KEY_HEADER = "INTERNAL-API-KEY"
CORE_BB_HOST = os.getenv("CORE_BB_HOST", "")
CORE_AUTH_PUBLIC_KEY = os.getenv("CORE_AUTH_PUBLIC_KEY", "")
CORE_SERVICE_PRIVATE_KEY = os.getenv("CORE_SERVICE_PRIVATE_KEY", "")
CORE_SERVICE_ACCOUNT_ID = os.getenv("CORE_SERVICE_ACCOUNT_ID", "notifications")
CORE_ACCESS_TOKEN_CACHE_KEY = "core_service_access_token"
JWT_SECRET = os.getenv("JWT_SECRET", "")
JWT_AUDIENCE = os.getenv("JWT_AUDIENCE", "rokwire")

# Store
DB_TRANSACTION_TIMEOUT_SECONDS = int(os.getenv("DB_TRANSACTION_TIMEOUT_SECONDS", "10"))
DB_TRANSACTION_MAX_RETRIES = int(os.getenv("DB_TRANSACTION_MAX_RETRIES", "3"))

# Push provider
PUSH_REQUEST_TIMEOUT_SECONDS = int(os.getenv("PUSH_REQUEST_TIMEOUT_SECONDS", "120"))
FCM_API_BASE_URL = os.getenv("FCM_API_BASE_URL", "https://fcm.googleapis.com/v1")
FCM_IID_BASE_URL = os.getenv("FCM_IID_BASE_URL", "https://iid.googleapis.com/iid/v1")

# Delivery queue
QUEUE_WORKER_POOL_SIZE = int(os.getenv("QUEUE_WORKER_POOL_SIZE", "4"))
QUEUE_CHANNEL_CAPACITY = int(os.getenv("QUEUE_CHANNEL_CAPACITY", "64"))
QUEUE_CLAIM_BATCH_SIZE = int(os.getenv("QUEUE_CLAIM_BATCH_SIZE", "16"))
QUEUE_POLL_INTERVAL_SECONDS = float(os.getenv("QUEUE_POLL_INTERVAL_SECONDS", "5"))
QUEUE_LEASE_SECONDS = int(os.getenv("QUEUE_LEASE_SECONDS", "300"))
QUEUE_MAX_ATTEMPTS = int(os.getenv("QUEUE_MAX_ATTEMPTS", "5"))
QUEUE_BACKOFF_BASE_SECONDS = float(os.getenv("QUEUE_BACKOFF_BASE_SECONDS", "30"))
QUEUE_BACKOFF_CAP_SECONDS = float(os.getenv("QUEUE_BACKOFF_CAP_SECONDS", "3600"))
QUEUE_BACKOFF_JITTER_SECONDS = float(os.getenv("QUEUE_BACKOFF_JITTER_SECONDS", "10"))
QUEUE_RETENTION_HOURS = int(os.getenv("QUEUE_RETENTION_HOURS", "24"))
# Redis pub/sub channel that wakes the queue process, empty to rely on polling
QUEUE_WAKE_CHANNEL = os.getenv("QUEUE_WAKE_CHANNEL", "notifications:queue-wake")
# Seconds between checks of firebase_configurations for out-of-band changes
PROVIDER_CONFIG_REFRESH_SECONDS = float(
    os.getenv("PROVIDER_CONFIG_REFRESH_SECONDS", "30")
)

# Compensating provider subscription calls
SUBSCRIPTION_RETRY_DELAY_SECONDS = int(
    os.getenv("SUBSCRIPTION_RETRY_DELAY_SECONDS", "60")
)
SUBSCRIPTION_MAX_RETRIES = int(os.getenv("SUBSCRIPTION_MAX_RETRIES", "3"))

# Email
EMAIL_HOST = os.getenv("SMTP_HOST", "")
EMAIL_PORT = int(os.getenv("SMTP_PORT", "587"))
EMAIL_HOST_USER = os.getenv("SMTP_USER", "")
EMAIL_HOST_PASSWORD = os.getenv("SMTP_PASSWORD", "")
EMAIL_USE_TLS = os.getenv("SMTP_USE_TLS", "true").lower() == "true"
DEFAULT_FROM_EMAIL = os.getenv("SMTP_EMAIL_FROM", "")
EMAIL_MAX_RETRIES = 3
