"""Client for account queries against the core building block."""

from typing import Any

import structlog

from core.config.downstream_urls import core_accounts_url
from core.exceptions import DownstreamServiceError
from core.services.downstream.base_downstream_client import BaseDownstreamClient

logger = structlog.get_logger(__name__)


class CoreAccountClient(BaseDownstreamClient):
    """Looks up accounts matching arbitrary criteria."""

    def __init__(self):
        """Initialize core account client."""
        super().__init__(service_name="core")

    def find_account_ids(
        self, org_id: str, app_id: str, criteria: dict[str, Any]
    ) -> list[str]:
        """Return the IDs of accounts matching ``criteria`` in a tenant.

        Raises:
            DownstreamServiceError: If the core service rejects the query or
                returns an unexpected body
            DownstreamServiceUnavailableError: If the core service is down
        """
        response = self._make_request(
            "POST",
            core_accounts_url(),
            params={"org_id": org_id, "app_id": app_id},
            json_data=criteria,
        )

        try:
            accounts = response.json()
        except ValueError as e:
            raise DownstreamServiceError(
                message="core returned a non-JSON account list",
                service_name=self.service_name,
                status_code=response.status_code,
            ) from e

        account_ids = [
            account["id"]
            for account in accounts or []
            if isinstance(account, dict) and account.get("id")
        ]
        logger.info(
            "core_accounts_found",
            org_id=org_id,
            app_id=app_id,
            count=len(account_ids),
        )
        return account_ids


core_account_client = CoreAccountClient()
