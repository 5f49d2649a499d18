"""Thread-local context management for security/authentication."""

import threading

from rest_framework.exceptions import NotAuthenticated

from core.auth.claims import CoreClaims

# Thread-local storage for security context
_security_context = threading.local()


def set_current_claims(claims: CoreClaims) -> None:
    """Store the caller's claims in thread-local storage."""
    _security_context.claims = claims


def get_current_claims() -> CoreClaims | None:
    """Retrieve the caller's claims, or None outside an authenticated request."""
    return getattr(_security_context, "claims", None)


def require_current_claims() -> CoreClaims:
    """Retrieve the caller's claims or raise an exception.

    Raises:
        NotAuthenticated: If no claims are set in the security context.
    """
    claims = get_current_claims()
    if claims is None:
        raise NotAuthenticated("Authentication required")
    return claims


def clear_current_claims() -> None:
    """Clear the claims once the request completes.

    Called after request processing to prevent context bleeding between
    requests served by the same thread.
    """
    if hasattr(_security_context, "claims"):
        delattr(_security_context, "claims")
