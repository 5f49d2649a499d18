"""Logging utilities for the notification service."""

from core.logging.config import setup_logging
from core.logging.context import bind_worker, get_request_id, set_request_id

__all__ = [
    "bind_worker",
    "get_request_id",
    "set_request_id",
    "setup_logging",
]
