"""Authentication and authorization for the notification service."""

from core.auth.claims import CoreClaims
from core.auth.context import (
    clear_current_claims,
    get_current_claims,
    require_current_claims,
    set_current_claims,
)
from core.auth.core_auth import CoreUserAuthentication
from core.auth.internal_auth import InternalAPIKeyAuthentication
from core.auth.policy import IsAdmin, IsFirstPartyService, IsInternal, IsUser

__all__ = [
    "CoreClaims",
    "CoreUserAuthentication",
    "InternalAPIKeyAuthentication",
    "IsAdmin",
    "IsFirstPartyService",
    "IsInternal",
    "IsUser",
    "clear_current_claims",
    "get_current_claims",
    "require_current_claims",
    "set_current_claims",
]
