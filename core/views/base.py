"""Helpers shared by the API views."""

from typing import Any, TypeVar

import structlog
from pydantic import BaseModel, ValidationError

from core.auth.claims import CoreClaims
from core.exceptions import ForbiddenError, ValidationFailedError

logger = structlog.get_logger(__name__)

SchemaT = TypeVar("SchemaT", bound=BaseModel)


def parse(schema: type[SchemaT], data: Any) -> SchemaT:
    """Validate request data against a pydantic schema.

    Raises:
        ValidationFailedError: With the first validation error as message.
    """
    try:
        return schema.model_validate(data)
    except ValidationError as e:
        errors = e.errors(include_url=False)
        logger.warning("request_validation_failed", schema=schema.__name__, errors=errors)
        first = errors[0]
        location = ".".join(str(part) for part in first["loc"])
        message = f"{location}: {first['msg']}" if location else first["msg"]
        raise ValidationFailedError(message) from e


def query_data(request) -> dict[str, Any]:
    """Query string as a plain dict, last value wins."""
    return request.query_params.dict()


def dump(model: BaseModel) -> dict[str, Any]:
    """JSON-ready representation of a response schema."""
    return model.model_dump(mode="json")


def dump_list(models: list[BaseModel]) -> list[dict[str, Any]]:
    """JSON-ready representation of a list of response schemas."""
    return [dump(model) for model in models]


def service_tenant(
    claims: CoreClaims, org_id: str | None, app_id: str | None
) -> tuple[str, str]:
    """Tenant named in a service request, defaulting to the caller's.

    Raises:
        ForbiddenError: If the caller may not act in the named tenant.
    """
    tenant = (org_id or claims.org_id, app_id or claims.app_id)
    if tenant != claims.tenant:
        logger.warning(
            "tenant_access_denied",
            org_id=tenant[0],
            app_id=tenant[1],
            caller=claims.subject,
        )
        raise ForbiddenError("Cannot access the requested organization or application")
    return tenant
