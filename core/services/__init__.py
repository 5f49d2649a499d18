"""Services for the core app."""

from core.services.email_service import EmailService
from core.services.health_service import HealthService, health_service

# Domain services import models and are not exported here to avoid import
# cycles during Django app initialization. Import them from their modules.

__all__ = [
    "EmailService",
    "HealthService",
    "health_service",
]
