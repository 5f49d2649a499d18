"""Firebase Cloud Messaging HTTP v1 client for one tenant."""

import threading
from typing import Any

from django.conf import settings

import requests
import structlog
from google.auth.exceptions import RefreshError, TransportError
from google.auth.transport.requests import Request
from google.oauth2 import service_account

from core.config.downstream_urls import fcm_send_url, fcm_topic_url
from core.constants import FCM_SCOPES
from core.enums import PushFailureReason
from core.exceptions import PermanentProviderError, TransientProviderError

logger = structlog.get_logger(__name__)

AUTH_ERROR_CODES = {"SENDER_ID_MISMATCH", "THIRD_PARTY_AUTH_ERROR", "PERMISSION_DENIED"}
RETRYABLE_ERROR_CODES = {"QUOTA_EXCEEDED", "UNAVAILABLE", "INTERNAL"}
FCM_ERROR_TYPE = "type.googleapis.com/google.firebase.fcm.v1.FcmError"
BAD_REQUEST_TYPE = "type.googleapis.com/google.rpc.BadRequest"
TOKEN_FIELD = "message.token"

# Per-token result codes of the Instance ID batch topic API
IID_TOKEN_ERRORS = {
    "NOT_FOUND": PushFailureReason.UNREGISTERED,
    "INVALID_ARGUMENT": PushFailureReason.INVALID_TOKEN,
}


class FCMClient:
    """Sends pushes and manages topic subscriptions for one Firebase project.

    Access tokens come from the tenant's service account and are refreshed
    when they expire. All failures are raised as ``TransientProviderError``
    or ``PermanentProviderError`` with a classified reason.
    """

    def __init__(
        self,
        org_id: str,
        app_id: str,
        project_id: str,
        service_account_info: dict[str, Any],
        timeout: float | None = None,
        credentials: Any = None,
    ):
        """Initialize the client.

        Args:
            org_id: Tenant organization
            app_id: Tenant application
            project_id: Firebase project
            service_account_info: Service account key as a dict
            timeout: Request timeout in seconds
            credentials: Pre-built google-auth credentials
        """
        self.tenant = (org_id, app_id)
        self.project_id = project_id
        self.timeout = timeout or settings.PUSH_REQUEST_TIMEOUT_SECONDS
        self._service_account_info = service_account_info
        self._credentials = credentials
        self._credentials_lock = threading.Lock()
        self._session = requests.Session()

    @classmethod
    def from_config(cls, config) -> "FCMClient":
        """Build a client from a ProviderConfig row."""
        return cls(
            org_id=config.org_id,
            app_id=config.app_id,
            project_id=config.project_id,
            service_account_info=config.auth,
        )

    def send_to_token(self, token: str, payload: dict) -> str:
        """Push to a single device. Returns the provider message name."""
        return self._send({"token": token, **self._content(payload)}, token_target=True)

    def send_to_topic(self, topic: str, payload: dict) -> str:
        """Push to every device subscribed to a topic."""
        return self._send({"topic": topic, **self._content(payload)}, token_target=False)

    def subscribe(self, token: str, topic: str) -> None:
        """Subscribe a device to a topic."""
        self._manage_topic("batchAdd", token, topic)

    def unsubscribe(self, token: str, topic: str) -> None:
        """Unsubscribe a device from a topic."""
        self._manage_topic("batchRemove", token, topic)

    @staticmethod
    def _content(payload: dict) -> dict:
        data = {str(k): str(v) for k, v in (payload.get("data") or {}).items()}
        return {
            "notification": {
                "title": payload.get("subject") or "",
                "body": payload.get("body") or "",
            },
            "data": data,
        }

    def _access_token(self) -> str:
        with self._credentials_lock:
            if self._credentials is None:
                try:
                    self._credentials = (
                        service_account.Credentials.from_service_account_info(
                            self._service_account_info, scopes=FCM_SCOPES
                        )
                    )
                except (ValueError, KeyError) as e:
                    raise self._permanent(
                        PushFailureReason.CONFIGURATION,
                        f"Invalid service account for project {self.project_id}: {e}",
                    ) from e
            if not self._credentials.valid:
                try:
                    self._credentials.refresh(Request())
                except RefreshError as e:
                    raise self._permanent(
                        PushFailureReason.AUTHENTICATION,
                        f"Access token refresh rejected: {e}",
                    ) from e
                except TransportError as e:
                    raise TransientProviderError(
                        f"Access token refresh failed: {e}", tenant=self.tenant
                    ) from e
            return self._credentials.token

    def _post(self, url: str, body: dict, headers: dict | None = None) -> requests.Response:
        request_headers = {
            "Authorization": f"Bearer {self._access_token()}",
            "Content-Type": "application/json",
        }
        request_headers.update(headers or {})
        try:
            return self._session.post(
                url, json=body, headers=request_headers, timeout=self.timeout
            )
        except requests.Timeout as e:
            raise TransientProviderError(
                f"FCM request timed out after {self.timeout}s", tenant=self.tenant
            ) from e
        except requests.RequestException as e:
            raise TransientProviderError(
                f"FCM request failed: {e}", tenant=self.tenant
            ) from e

    def _send(self, message: dict, token_target: bool) -> str:
        response = self._post(fcm_send_url(self.project_id), {"message": message})
        if response.status_code == 200:
            try:
                return response.json().get("name", "")
            except ValueError:
                logger.warning("fcm_response_unreadable", project_id=self.project_id)
                return ""
        raise self._classify(response, token_target)

    def _manage_topic(self, action: str, token: str, topic: str) -> None:
        response = self._post(
            fcm_topic_url(action),
            {"to": f"/topics/{topic}", "registration_tokens": [token]},
            headers={"access_token_auth": "true"},
        )
        if response.status_code != 200:
            raise self._classify(response, token_target=True)

        try:
            results = response.json().get("results") or [{}]
        except ValueError as e:
            raise TransientProviderError(
                f"Topic {action} returned an unreadable body", tenant=self.tenant
            ) from e
        error = results[0].get("error")
        if not error:
            return
        reason = IID_TOKEN_ERRORS.get(error)
        if reason is None:
            raise TransientProviderError(
                f"Topic {action} failed: {error}", tenant=self.tenant
            )
        raise self._permanent(reason, f"Topic {action} rejected token: {error}")

    def _classify(self, response: requests.Response, token_target: bool):
        """Map an FCM error response to a provider error."""
        try:
            error = response.json().get("error") or {}
        except ValueError:
            error = {}
        if not isinstance(error, dict):
            error = {"status": str(error)}

        code = error.get("status")
        token_rejected = False
        for detail in error.get("details") or []:
            if detail.get("@type") == FCM_ERROR_TYPE and detail.get("errorCode"):
                code = detail["errorCode"]
            elif detail.get("@type") == BAD_REQUEST_TYPE:
                token_rejected = token_rejected or any(
                    violation.get("field") == TOKEN_FIELD
                    for violation in detail.get("fieldViolations") or []
                )
        message = error.get("message") or response.text or f"HTTP {response.status_code}"
        status_code = response.status_code

        if code in RETRYABLE_ERROR_CODES or status_code == 429 or status_code >= 500:
            return TransientProviderError(
                f"FCM {code or status_code}: {message}", tenant=self.tenant
            )
        if code in AUTH_ERROR_CODES or status_code in (401, 403):
            return self._permanent(PushFailureReason.AUTHENTICATION, message)
        if token_target and (code == "UNREGISTERED" or status_code == 404):
            return self._permanent(PushFailureReason.UNREGISTERED, message)
        if code == "INVALID_ARGUMENT" or status_code == 400:
            # INVALID_ARGUMENT also covers payload errors
            if token_target and token_rejected:
                return self._permanent(PushFailureReason.INVALID_TOKEN, message)
            return self._permanent(PushFailureReason.INVALID_MESSAGE, message)
        return self._permanent(PushFailureReason.CONFIGURATION, message)

    def _permanent(self, reason: PushFailureReason, message: str):
        if reason is PushFailureReason.INVALID_MESSAGE:
            logger.warning(
                "push_message_rejected",
                org_id=self.tenant[0],
                app_id=self.tenant[1],
                error=message,
            )
        elif not reason.is_token_error:
            logger.error(
                "push_provider_misconfigured",
                org_id=self.tenant[0],
                app_id=self.tenant[1],
                project_id=self.project_id,
                reason=reason.value,
                error=message,
            )
        return PermanentProviderError(reason, message, tenant=self.tenant)
