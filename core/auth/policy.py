"""Static access policy and the DRF permission classes that consult it.

Each entry of ``POLICY`` is ``(subject, resource, action)``: callers acting
as ``subject`` may perform the HTTP ``action`` on ``resource``. Views name
their resource with a ``policy_resource`` attribute.
"""

from rest_framework.permissions import BasePermission

from core.auth.claims import CoreClaims

USER = "user"
ANONYMOUS = "anonymous"
ADMIN = "admin"
FIRST_PARTY = "first_party"
INTERNAL = "internal"

POLICY: frozenset[tuple[str, str, str]] = frozenset(
    {
        (USER, "token", "POST"),
        (ANONYMOUS, "token", "POST"),
        (USER, "user", "GET"),
        (USER, "user", "PUT"),
        (USER, "user", "DELETE"),
        (USER, "messages", "GET"),
        (USER, "messages", "DELETE"),
        (USER, "messages_stats", "GET"),
        (USER, "messages_read", "PUT"),
        (USER, "message", "POST"),
        (USER, "message", "GET"),
        (USER, "message", "DELETE"),
        (USER, "message_read", "PUT"),
        (USER, "topics", "GET"),
        (ANONYMOUS, "topics", "GET"),
        (USER, "topic_messages", "GET"),
        (USER, "topic_subscription", "POST"),
        (ANONYMOUS, "topic_subscription", "POST"),
        (INTERNAL, "int_message", "POST"),
        (INTERNAL, "int_mail", "POST"),
        (FIRST_PARTY, "bbs_message", "POST"),
        (FIRST_PARTY, "bbs_messages", "POST"),
        (FIRST_PARTY, "bbs_messages", "DELETE"),
        (FIRST_PARTY, "bbs_mail", "POST"),
        (FIRST_PARTY, "bbs_recipients", "POST"),
        (FIRST_PARTY, "bbs_recipients", "PUT"),
        (ADMIN, "admin_app_versions", "GET"),
        (ADMIN, "admin_app_platforms", "GET"),
        (ADMIN, "admin_topics", "GET"),
        (ADMIN, "admin_topic", "POST"),
        (ADMIN, "admin_messages", "GET"),
        (ADMIN, "admin_messages", "POST"),
        (ADMIN, "admin_message", "GET"),
        (ADMIN, "admin_message", "PUT"),
        (ADMIN, "admin_message", "DELETE"),
    }
)


def is_allowed(subject: str, resource: str, action: str) -> bool:
    """Look up one entry of the policy table."""
    return (subject, resource, action.upper()) in POLICY


class PolicyPermission(BasePermission):
    """Allows callers acting as ``subjects`` when the policy table agrees."""

    subjects: tuple[str, ...] = ()

    def has_permission(self, request, view):
        claims = getattr(request, "user", None)
        if not isinstance(claims, CoreClaims):
            return False
        resource = getattr(view, "policy_resource", None)
        if resource is None:
            return False
        return any(
            is_allowed(subject, resource, request.method)
            for subject in claims.roles()
            if subject in self.subjects
        )


class IsUser(PolicyPermission):
    """End users, including anonymous ones where the policy allows it."""

    subjects = (USER, ANONYMOUS)


class IsAdmin(PolicyPermission):
    """Users holding the notifications admin permission."""

    subjects = (ADMIN,)


class IsFirstPartyService(PolicyPermission):
    """First-party building block services."""

    subjects = (FIRST_PARTY,)


class IsInternal(PolicyPermission):
    """Callers presenting the internal API key."""

    subjects = (INTERNAL,)
