"""Bearer token authentication against the core building block."""

from django.conf import settings

import jwt
import structlog
from rest_framework import authentication, exceptions

from core.auth.claims import CoreClaims
from core.auth.context import set_current_claims

logger = structlog.get_logger(__name__)


class CoreUserAuthentication(authentication.BaseAuthentication):
    """Validates ``Authorization: Bearer <jwt>`` tokens issued by core.

    Tokens are RS256 signed with the core auth key. When no public key is
    configured, HS256 tokens signed with ``JWT_SECRET`` are accepted instead.
    """

    def authenticate(self, request):
        """Authenticate the request from its bearer token.

        Returns:
            Tuple of (claims, token) or None if no token was sent

        Raises:
            AuthenticationFailed: If the token is malformed, expired or invalid
        """
        auth_header = request.headers.get("authorization")
        if not auth_header:
            return None

        parts = auth_header.split()
        if len(parts) != 2 or parts[0].lower() != "bearer":
            raise exceptions.AuthenticationFailed("Invalid authorization header format")

        token = parts[1]
        claims = CoreClaims.from_token(self._decode(token))
        if not claims.org_id or not claims.app_id or not claims.subject:
            raise exceptions.AuthenticationFailed("Token is missing tenant or subject")

        set_current_claims(claims)
        return (claims, token)

    def _decode(self, token: str) -> dict:
        if settings.CORE_AUTH_PUBLIC_KEY:
            key, algorithms = settings.CORE_AUTH_PUBLIC_KEY, ["RS256"]
        elif settings.JWT_SECRET:
            key, algorithms = settings.JWT_SECRET, ["HS256"]
        else:
            logger.error("token_validation_not_configured")
            raise exceptions.AuthenticationFailed("Token validation not configured")

        try:
            return jwt.decode(
                token,
                key,
                algorithms=algorithms,
                audience=settings.JWT_AUDIENCE,
                options={"require": ["exp", "sub"]},
            )
        except jwt.ExpiredSignatureError as e:
            logger.info("token_expired")
            raise exceptions.AuthenticationFailed("Token has expired") from e
        except jwt.InvalidTokenError as e:
            logger.warning("token_invalid", error=str(e))
            raise exceptions.AuthenticationFailed("Invalid token") from e

    def authenticate_header(self, _request):
        """Return WWW-Authenticate header value for 401 responses."""
        return "Bearer"
