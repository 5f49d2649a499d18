"""Shared key authentication for internal callers."""

import hmac

from django.conf import settings

import structlog
from rest_framework import authentication, exceptions

from core.auth.claims import CoreClaims
from core.auth.context import set_current_claims

logger = structlog.get_logger(__name__)

INTERNAL_SUBJECT = "internal"


class InternalAPIKeyAuthentication(authentication.BaseAuthentication):
    """Checks the ``INTERNAL-API-KEY`` header.

    Internal callers act as the system in the tenant the service is
    configured for.
    """

    def authenticate(self, request):
        api_key = request.headers.get(settings.INTERNAL_API_KEY_HEADER)
        if not api_key:
            return None

        expected = settings.INTERNAL_API_KEY
        if not expected or not hmac.compare_digest(api_key.encode(), expected.encode()):
            logger.warning("internal_api_key_rejected")
            raise exceptions.AuthenticationFailed("Invalid internal API key")

        claims = CoreClaims(
            org_id=settings.NOTIFICATIONS_ORG_ID,
            app_id=settings.NOTIFICATIONS_APP_ID,
            subject=INTERNAL_SUBJECT,
            internal=True,
        )
        set_current_claims(claims)
        return (claims, None)

    def authenticate_header(self, _request):
        return settings.INTERNAL_API_KEY_HEADER
