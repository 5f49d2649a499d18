"""Repositories for database queries."""

from core.repositories.queue_repository import QueueRepository
from core.repositories.user_repository import UserRepository, criteria_filter

__all__ = ["QueueRepository", "UserRepository", "criteria_filter"]
