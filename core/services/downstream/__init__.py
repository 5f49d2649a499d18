"""Clients for downstream services."""

from core.services.downstream.core_account_client import (
    CoreAccountClient,
    core_account_client,
)

__all__ = ["CoreAccountClient", "core_account_client"]
