"""Push provider integration."""

from core.services.push.dispatcher import PushDispatcher, push_dispatcher
from core.services.push.fcm_client import FCMClient

__all__ = ["FCMClient", "PushDispatcher", "push_dispatcher"]
