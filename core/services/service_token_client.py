"""Service account access tokens for calls to the core building block.

The service signs a short-lived JWT assertion with its private key and
exchanges it for an access token. Tokens are cached until shortly before
they expire.
"""

import time
import uuid

from django.conf import settings
from django.core.cache import cache

import jwt
import requests
import structlog

from core.config.downstream_urls import core_access_token_url
from core.exceptions import ServiceTokenError

logger = structlog.get_logger(__name__)

ASSERTION_LIFETIME_SECONDS = 300
JWT_BEARER_GRANT = "urn:ietf:params:oauth:grant-type:jwt-bearer"


class ServiceTokenClient:
    """Fetches and caches the service account access token."""

    def __init__(self, timeout: int = 10):
        self.timeout = timeout

    def get_access_token(self) -> str:
        """Return a valid access token, fetching a new one when needed.

        Raises:
            ServiceTokenError: If the key is missing or the exchange fails.
        """
        cached = cache.get(settings.CORE_ACCESS_TOKEN_CACHE_KEY)
        if cached:
            return cached

        access_token, expires_in = self._fetch_token()
        cache.set(
            settings.CORE_ACCESS_TOKEN_CACHE_KEY,
            access_token,
            timeout=max(expires_in - 30, 60),
        )
        return access_token

    def clear_cache(self) -> None:
        """Drop the cached token so the next call fetches a new one."""
        cache.delete(settings.CORE_ACCESS_TOKEN_CACHE_KEY)

    def _assertion(self) -> str:
        if not settings.CORE_SERVICE_PRIVATE_KEY:
            raise ServiceTokenError(
                "CORE_SERVICE_PRIVATE_KEY is not configured", service_name="core"
            )
        now = int(time.time())
        claims = {
            "iss": settings.CORE_SERVICE_ACCOUNT_ID,
            "sub": settings.CORE_SERVICE_ACCOUNT_ID,
            "aud": core_access_token_url(),
            "iat": now,
            "exp": now + ASSERTION_LIFETIME_SECONDS,
            "jti": str(uuid.uuid4()),
        }
        try:
            return jwt.encode(claims, settings.CORE_SERVICE_PRIVATE_KEY, algorithm="RS256")
        except (ValueError, TypeError, jwt.PyJWTError) as e:
            raise ServiceTokenError(
                f"Could not sign service assertion: {e}", service_name="core"
            ) from e

    def _fetch_token(self) -> tuple[str, int]:
        try:
            response = requests.post(
                core_access_token_url(),
                data={"grant_type": JWT_BEARER_GRANT, "assertion": self._assertion()},
                headers={"Content-Type": "application/x-www-form-urlencoded"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error("service_token_request_failed", error=str(e))
            raise ServiceTokenError(
                f"Token request failed: {e}", service_name="core"
            ) from e

        if response.status_code != 200:
            logger.error(
                "service_token_rejected",
                status_code=response.status_code,
                response=response.text,
            )
            raise ServiceTokenError(
                f"Token request failed with status {response.status_code}",
                service_name="core",
                status_code=response.status_code,
            )

        data = response.json()
        logger.info("service_token_fetched", expires_in=data.get("expires_in"))
        return data["access_token"], int(data.get("expires_in", 3600))


service_token_client = ServiceTokenClient()
