"""Admin API: tenant administration for users with the admin permission."""

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from core.auth import CoreUserAuthentication, IsAdmin
from core.enums import SenderType
from core.schemas.message import (
    CreateMessageRequest,
    InboxQuery,
    MessageResponse,
    Sender,
    SenderAccount,
    UpdateMessageRequest,
)
from core.schemas.topic import NameResponse, TopicResponse, UpdateTopicRequest
from core.services.message_service import message_service
from core.services.registry_service import registry_service
from core.views.base import dump, dump_list, parse, query_data


class AdminAPIView(APIView):
    """Base view for administrators; the tenant comes from the token."""

    authentication_classes = (CoreUserAuthentication,)
    permission_classes = (IsAdmin,)


class AdminAppVersionsView(AdminAPIView):
    policy_resource = "admin_app_versions"

    def get(self, request):
        claims = request.user
        versions = registry_service.get_app_versions(claims.org_id, claims.app_id)
        return Response(dump_list([NameResponse.model_validate(v) for v in versions]))


class AdminAppPlatformsView(AdminAPIView):
    policy_resource = "admin_app_platforms"

    def get(self, request):
        claims = request.user
        platforms = registry_service.get_app_platforms(claims.org_id, claims.app_id)
        return Response(dump_list([NameResponse.model_validate(p) for p in platforms]))


class AdminTopicsView(AdminAPIView):
    policy_resource = "admin_topics"

    def get(self, request):
        claims = request.user
        topics = registry_service.get_topics(claims.org_id, claims.app_id)
        return Response(dump_list([TopicResponse.model_validate(t) for t in topics]))


class AdminTopicView(AdminAPIView):
    """Updates a topic description."""

    policy_resource = "admin_topic"

    def post(self, request):
        claims = request.user
        body = parse(UpdateTopicRequest, request.data)
        topic = registry_service.update_topic(
            claims.org_id, claims.app_id, body.name, body.description
        )
        return Response(dump(TopicResponse.model_validate(topic)))


class AdminMessagesView(AdminAPIView):
    """Lists the tenant's messages and sends administrative ones."""

    policy_resource = "admin_messages"

    def get(self, request):
        claims = request.user
        query = parse(InboxQuery, query_data(request))
        messages = message_service.get_messages(claims.org_id, claims.app_id, query)
        return Response(dump_list([MessageResponse.model_validate(m) for m in messages]))

    def post(self, request):
        claims = request.user
        body = parse(CreateMessageRequest, request.data)
        sender = Sender(
            type=SenderType.ADMINISTRATIVE,
            user=SenderAccount(user_id=claims.subject, name=claims.name),
        )
        message = message_service.create_message(
            body.to_input(claims.org_id, claims.app_id, sender)
        )
        return Response(dump(MessageResponse.model_validate(message)))


class AdminMessageView(AdminAPIView):
    """Any message of the tenant."""

    policy_resource = "admin_message"

    def get(self, request, message_id):
        claims = request.user
        message = message_service.get_message(claims.org_id, claims.app_id, message_id)
        return Response(dump(MessageResponse.model_validate(message)))

    def put(self, request, message_id):
        """Edit priority, topic, subject or body. Recipients stay as they are."""
        claims = request.user
        body = parse(UpdateMessageRequest, request.data)
        message = message_service.update_message(
            None, claims.org_id, claims.app_id, message_id, body
        )
        return Response(dump(MessageResponse.model_validate(message)))

    def delete(self, request, message_id):
        """Delete the message with its inbox entries and pending pushes."""
        claims = request.user
        message_service.delete_message(claims.org_id, claims.app_id, message_id)
        return Response(status=status.HTTP_200_OK)
