"""Message sender type enumeration."""

from enum import Enum


class SenderType(str, Enum):
    """Who created a message.

    ``user`` and ``administrative`` senders carry an account reference,
    ``system`` senders do not.
    """

    USER = "user"
    ADMINISTRATIVE = "administrative"
    SYSTEM = "system"

    @property
    def has_account(self) -> bool:
        """Whether this sender type references an account."""
        return self is not SenderType.SYSTEM
