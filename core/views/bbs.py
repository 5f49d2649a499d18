"""Building block API: endpoints for first-party services."""

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from core.auth import CoreUserAuthentication, IsFirstPartyService
from core.enums import SenderType
from core.jobs.email_jobs import enqueue_mail
from core.schemas.mail import MailRequest
from core.schemas.message import (
    AddRecipientsRequest,
    BbsCreateMessagesRequest,
    DeleteMessagesRequest,
    MessageResponse,
    RecipientResponse,
    Sender,
    SenderAccount,
    SendMessageRequest,
    UpdateRecipientRequest,
)
from core.services.message_service import message_service
from core.views.base import dump, dump_list, parse, query_data, service_tenant


class BbsAPIView(APIView):
    """Base view for first-party services."""

    authentication_classes = (CoreUserAuthentication,)
    permission_classes = (IsFirstPartyService,)


def _service_sender(claims) -> Sender:
    """System sender that remembers the service account behind it."""
    return Sender(
        type=SenderType.SYSTEM,
        user=SenderAccount(user_id=claims.subject, name=claims.name),
    )


class BbsMessageView(BbsAPIView):
    """Sends one message on behalf of a service."""

    policy_resource = "bbs_message"

    def post(self, request):
        claims = request.user
        body = parse(SendMessageRequest, request.data).message
        org_id, app_id = service_tenant(claims, body.org_id, body.app_id)
        message = message_service.create_message(
            body.to_input(org_id, app_id, _service_sender(claims))
        )
        return Response(dump(MessageResponse.model_validate(message)))


class BbsMessageDetailView(BbsAPIView):
    """A message the service sent."""

    policy_resource = "bbs_messages"

    def delete(self, request, message_id):
        claims = request.user
        message_service.delete_messages(
            claims.org_id, claims.app_id, claims.subject, [message_id]
        )
        return Response(status=status.HTTP_200_OK)


class BbsMessagesView(BbsAPIView):
    """Batch send and batch delete."""

    policy_resource = "bbs_messages"

    def post(self, request):
        """Send several messages.

        With ``?isBatch=true`` a user receives only the first message of the
        batch that names them.
        """
        claims = request.user
        data = request.data
        body = parse(
            BbsCreateMessagesRequest, {"messages": data} if isinstance(data, list) else data
        )
        is_batch = query_data(request).get("isBatch", "").lower() in ("1", "true")
        sender = _service_sender(claims)
        inputs = []
        for item in body.messages:
            org_id, app_id = service_tenant(claims, item.org_id, item.app_id)
            inputs.append(item.to_input(org_id, app_id, sender))
        messages = message_service.create_messages(inputs, is_batch=is_batch)
        return Response(dump_list([MessageResponse.model_validate(m) for m in messages]))

    def delete(self, request):
        """Delete the messages listed in ``ids``, all or none."""
        claims = request.user
        body = parse(DeleteMessagesRequest, request.data or query_data(request))
        message_service.delete_messages(
            claims.org_id, claims.app_id, claims.subject, body.ids
        )
        return Response(status=status.HTTP_200_OK)


class BbsMailView(BbsAPIView):
    """Queues an email."""

    policy_resource = "bbs_mail"

    def post(self, request):
        body = parse(MailRequest, request.data)
        enqueue_mail(body.to_mail, body.subject, body.body)
        return Response(status=status.HTTP_200_OK)


class BbsRecipientsView(BbsAPIView):
    """Recipients of an existing message."""

    policy_resource = "bbs_recipients"

    def post(self, request, message_id):
        """Add recipients and enqueue their pushes."""
        claims = request.user
        data = request.data
        body = parse(
            AddRecipientsRequest, {"recipients": data} if isinstance(data, list) else data
        )
        added = message_service.add_recipients(
            claims.org_id, claims.app_id, message_id, body.recipients, read=body.read
        )
        return Response(dump_list([RecipientResponse.from_recipient(r) for r in added]))

    def put(self, request, message_id):
        """Change the read and mute flags of one recipient."""
        claims = request.user
        body = parse(UpdateRecipientRequest, request.data)
        recipient = message_service.update_recipient(
            claims.org_id,
            claims.app_id,
            message_id,
            body.user_id,
            mute=body.mute,
            read=body.read,
        )
        return Response(dump(RecipientResponse.from_recipient(recipient)))
