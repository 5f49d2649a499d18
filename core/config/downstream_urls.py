"""Downstream service URL configuration."""

from django.conf import settings


def core_accounts_url() -> str:
    """Account lookup endpoint of the core building block."""
    return f"{settings.CORE_BB_HOST.rstrip('/')}/bbs/accounts"


def core_access_token_url() -> str:
    """Service account token endpoint of the core building block."""
    return f"{settings.CORE_BB_HOST.rstrip('/')}/bbs/access-token"


def fcm_send_url(project_id: str) -> str:
    """FCM HTTP v1 send endpoint for a Firebase project."""
    return f"{settings.FCM_API_BASE_URL}/projects/{project_id}/messages:send"


def fcm_topic_url(action: str) -> str:
    """Instance ID batch topic management endpoint (batchAdd / batchRemove)."""
    return f"{settings.FCM_IID_BASE_URL}:{action}"
