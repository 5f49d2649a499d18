"""Client API: endpoints called by end users of the apps."""

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from core.auth import CoreUserAuthentication, IsUser
from core.enums import SenderType
from core.exceptions import NotFoundError
from core.schemas.message import (
    CreateMessageRequest,
    DeleteMessagesRequest,
    InboxQuery,
    MessageResponse,
    MessagesStatsResponse,
    ReadAllMessagesRequest,
    Sender,
    SenderAccount,
    UserMessageResponse,
)
from core.schemas.topic import SubscriptionRequest, TopicResponse
from core.schemas.user import TokenInfo, UpdateUserRequest, UserResponse
from core.services.message_service import message_service
from core.services.registry_service import registry_service
from core.views.base import dump, dump_list, parse, query_data


class ClientAPIView(APIView):
    """Base view for end user endpoints; the tenant comes from the token."""

    authentication_classes = (CoreUserAuthentication,)
    permission_classes = (IsUser,)


class TokenView(ClientAPIView):
    """Registers the push token of the caller's device."""

    policy_resource = "token"

    def post(self, request):
        """Store a token, replacing ``previous_token`` when given.

        Returns:
            200 once the token belongs to the caller
            400 Bad Request if the body is invalid
        """
        claims = request.user
        info = parse(TokenInfo, request.data)
        registry_service.store_token(claims.org_id, claims.app_id, claims.subject, info)
        return Response(status=status.HTTP_200_OK)


class UserView(ClientAPIView):
    """The caller as a push recipient."""

    policy_resource = "user"

    def get(self, request):
        claims = request.user
        user = registry_service.get_user(claims.org_id, claims.app_id, claims.subject)
        return Response(dump(UserResponse.from_user(user)))

    def put(self, request):
        claims = request.user
        body = parse(UpdateUserRequest, request.data)
        user = registry_service.update_user(
            claims.org_id, claims.app_id, claims.subject, body.notifications_disabled
        )
        return Response(dump(UserResponse.from_user(user)))

    def delete(self, request):
        """Delete the caller's tokens and subscriptions. The inbox stays."""
        claims = request.user
        registry_service.delete_user(claims.org_id, claims.app_id, claims.subject)
        return Response(status=status.HTTP_200_OK)


class MessagesView(ClientAPIView):
    """The caller's inbox."""

    policy_resource = "messages"

    def get(self, request):
        claims = request.user
        query = parse(InboxQuery, query_data(request))
        entries = message_service.get_user_messages(
            claims.org_id, claims.app_id, claims.subject, query
        )
        return Response(dump_list([UserMessageResponse.from_recipient(e) for e in entries]))

    def delete(self, request):
        """Remove several messages from the inbox, by body or ``ids`` query."""
        claims = request.user
        body = parse(DeleteMessagesRequest, request.data or query_data(request))
        message_service.delete_user_messages(
            claims.org_id, claims.app_id, claims.subject, body.ids
        )
        return Response(status=status.HTTP_200_OK)


class MessagesStatsView(ClientAPIView):
    """Inbox counters."""

    policy_resource = "messages_stats"

    def get(self, request):
        claims = request.user
        stats: MessagesStatsResponse = message_service.get_messages_stats(
            claims.org_id, claims.app_id, claims.subject
        )
        return Response(dump(stats))


class MessagesReadView(ClientAPIView):
    """Marks the whole inbox read or unread."""

    policy_resource = "messages_read"

    def put(self, request):
        claims = request.user
        body = parse(ReadAllMessagesRequest, request.data or {})
        message_service.update_all_user_messages_read(
            claims.org_id, claims.app_id, claims.subject, body.read
        )
        return Response(status=status.HTTP_200_OK)


class MessageCreateView(ClientAPIView):
    """Sends a message as the caller."""

    policy_resource = "message"

    def post(self, request):
        claims = request.user
        body = parse(CreateMessageRequest, request.data)
        sender = Sender(
            type=SenderType.USER,
            user=SenderAccount(user_id=claims.subject, name=claims.name),
        )
        message = message_service.create_message(
            body.to_input(claims.org_id, claims.app_id, sender)
        )
        return Response(dump(MessageResponse.model_validate(message)))


class MessageDetailView(ClientAPIView):
    """A message the caller sent or received."""

    policy_resource = "message"

    def get(self, request, message_id):
        claims = request.user
        message = message_service.get_user_message(
            claims.org_id, claims.app_id, message_id, claims.subject
        )
        if message is None:
            raise NotFoundError(f"Message {message_id} not found")
        entry = message_service.get_user_recipient(
            claims.org_id, claims.app_id, message_id, claims.subject
        )
        if entry is not None:
            return Response(dump(UserMessageResponse.from_recipient(entry)))
        return Response(dump(MessageResponse.model_validate(message)))

    def delete(self, request, message_id):
        """Hide the message from the caller's inbox only."""
        claims = request.user
        message_service.delete_user_message(
            claims.org_id, claims.app_id, claims.subject, message_id
        )
        return Response(status=status.HTTP_200_OK)


class MessageReadView(ClientAPIView):
    """Marks one message read."""

    policy_resource = "message_read"

    def put(self, request, message_id):
        claims = request.user
        message = message_service.update_read_message(
            claims.org_id, claims.app_id, message_id, claims.subject
        )
        if message is None:
            raise NotFoundError(f"Message {message_id} not found")
        return Response(dump(MessageResponse.model_validate(message)))


class TopicsView(ClientAPIView):
    """Topics of the caller's tenant."""

    policy_resource = "topics"

    def get(self, request):
        claims = request.user
        topics = registry_service.get_topics(claims.org_id, claims.app_id)
        return Response(dump_list([TopicResponse.model_validate(t) for t in topics]))


class TopicMessagesView(ClientAPIView):
    """Inbox entries of the caller for messages sent to a topic."""

    policy_resource = "topic_messages"

    def get(self, request, topic):
        claims = request.user
        query = parse(InboxQuery, {**query_data(request), "topic": topic})
        entries = message_service.get_user_messages(
            claims.org_id, claims.app_id, claims.subject, query
        )
        return Response(dump_list([UserMessageResponse.from_recipient(e) for e in entries]))


class TopicSubscribeView(ClientAPIView):
    """Subscribes the caller and device to a topic."""

    policy_resource = "topic_subscription"

    def post(self, request, topic):
        claims = request.user
        body = parse(SubscriptionRequest, request.data or {})
        registry_service.subscribe(
            claims.org_id,
            claims.app_id,
            body.token,
            claims.subject,
            claims.anonymous,
            topic,
        )
        return Response(status=status.HTTP_200_OK)


class TopicUnsubscribeView(ClientAPIView):
    """Unsubscribes the caller and device from a topic."""

    policy_resource = "topic_subscription"

    def post(self, request, topic):
        claims = request.user
        body = parse(SubscriptionRequest, request.data or {})
        registry_service.unsubscribe(
            claims.org_id,
            claims.app_id,
            body.token,
            claims.subject,
            claims.anonymous,
            topic,
        )
        return Response(status=status.HTTP_200_OK)
