"""Internal API: legacy send endpoints behind the internal API key."""

from django.conf import settings

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from core.auth import InternalAPIKeyAuthentication, IsInternal
from core.enums import SenderType
from core.jobs.email_jobs import enqueue_mail
from core.schemas.mail import MailRequest
from core.schemas.message import (
    MessageResponse,
    Sender,
    SendMessageRequest,
    TenantCreateMessageRequest,
)
from core.services.message_service import message_service
from core.views.base import dump, parse


class InternalAPIView(APIView):
    """Base view for internal callers."""

    authentication_classes = (InternalAPIKeyAuthentication,)
    permission_classes = (IsInternal,)


def _send_system_message(body: TenantCreateMessageRequest) -> Response:
    org_id = body.org_id or settings.NOTIFICATIONS_ORG_ID
    app_id = body.app_id or settings.NOTIFICATIONS_APP_ID
    message = message_service.create_message(
        body.to_input(org_id, app_id, Sender(type=SenderType.SYSTEM))
    )
    return Response(dump(MessageResponse.model_validate(message)))


class InternalMessageView(InternalAPIView):
    """Sends a system message.

    The tenant is taken from the body, or the configured one when absent.
    """

    policy_resource = "int_message"

    def post(self, request):
        return _send_system_message(parse(TenantCreateMessageRequest, request.data))


class InternalMessageV2View(InternalAPIView):
    """Sends a system message wrapped in a ``{async, message}`` envelope."""

    policy_resource = "int_message"

    def post(self, request):
        return _send_system_message(parse(SendMessageRequest, request.data).message)


class InternalMailView(InternalAPIView):
    """Queues an email."""

    policy_resource = "int_mail"

    def post(self, request):
        body = parse(MailRequest, request.data)
        enqueue_mail(body.to_mail, body.subject, body.body)
        return Response(status=status.HTTP_200_OK)
