"""Classified reasons for permanent push provider failures."""

from enum import Enum


class PushFailureReason(str, Enum):
    """Why a push call can never succeed as issued."""

    INVALID_TOKEN = "InvalidToken"
    UNREGISTERED = "Unregistered"
    AUTHENTICATION = "Authentication"
    CONFIGURATION = "Configuration"
    INVALID_MESSAGE = "InvalidMessage"

    @property
    def is_token_error(self) -> bool:
        """Token errors mean the caller must unregister the token."""
        return self in (PushFailureReason.INVALID_TOKEN, PushFailureReason.UNREGISTERED)
