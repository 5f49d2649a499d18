"""Base client for downstream service communication."""

from typing import Any

import requests
import structlog

from core.exceptions import DownstreamServiceError, DownstreamServiceUnavailableError
from core.services.service_token_client import service_token_client

logger = structlog.get_logger(__name__)


class BaseDownstreamClient:
    """Base class for downstream service HTTP clients."""

    def __init__(self, service_name: str, requires_auth: bool = True, timeout: int = 10):
        """Initialize base downstream client.

        Args:
            service_name: Name of the downstream service (for logging/errors)
            requires_auth: Whether requests carry the service access token
            timeout: Request timeout in seconds
        """
        self.service_name = service_name
        self.requires_auth = requires_auth
        self.timeout = timeout

    def _get_headers(self) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if self.requires_auth:
            headers["Authorization"] = f"Bearer {service_token_client.get_access_token()}"
        return headers

    def _make_request(
        self,
        method: str,
        url: str,
        params: dict[str, Any] | None = None,
        json_data: Any = None,
    ) -> requests.Response:
        """Make HTTP request with error handling.

        Raises:
            DownstreamServiceError: For client errors and connection failures
            DownstreamServiceUnavailableError: For server errors (5xx)
        """
        headers = self._get_headers()

        logger.info(
            "downstream_request",
            service=self.service_name,
            method=method,
            url=url,
            params=params,
        )

        try:
            response = requests.request(
                method=method,
                url=url,
                headers=headers,
                params=params,
                json=json_data,
                timeout=self.timeout,
            )
        except requests.Timeout as e:
            logger.error(
                "downstream_request_timeout",
                service=self.service_name,
                url=url,
                timeout=self.timeout,
            )
            raise DownstreamServiceError(
                message=f"{self.service_name} request timed out",
                service_name=self.service_name,
            ) from e
        except requests.ConnectionError as e:
            logger.error(
                "downstream_connection_failed",
                service=self.service_name,
                url=url,
                error=str(e),
            )
            raise DownstreamServiceError(
                message=f"Failed to connect to {self.service_name}",
                service_name=self.service_name,
            ) from e

        if response.status_code >= 500:
            logger.error(
                "downstream_server_error",
                service=self.service_name,
                status_code=response.status_code,
                response_text=response.text,
            )
            raise DownstreamServiceUnavailableError(
                service_name=self.service_name,
                status_code=response.status_code,
            )

        if response.status_code >= 400:
            logger.error(
                "downstream_client_error",
                service=self.service_name,
                status_code=response.status_code,
                response_text=response.text,
            )
            raise DownstreamServiceError(
                message=f"{self.service_name} returned {response.status_code}: {response.text}",
                service_name=self.service_name,
                status_code=response.status_code,
            )

        return response
