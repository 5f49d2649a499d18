"""URL routing configuration for core application."""

from django.urls import path

from core.views import admin, bbs, client, health, internal

urlpatterns = [
    # Health and version
    path("version", health.VersionView.as_view(), name="version"),
    path("health/live", health.LivenessCheckView.as_view(), name="health-live"),
    path("health/ready", health.ReadinessCheckView.as_view(), name="health-ready"),
    # Client endpoints
    path("token", client.TokenView.as_view(), name="token"),
    path("user", client.UserView.as_view(), name="user"),
    path("messages", client.MessagesView.as_view(), name="messages"),
    path("messages/stats", client.MessagesStatsView.as_view(), name="messages-stats"),
    path("messages/read", client.MessagesReadView.as_view(), name="messages-read"),
    path("message", client.MessageCreateView.as_view(), name="message-create"),
    path(
        "message/<str:message_id>/read",
        client.MessageReadView.as_view(),
        name="message-read",
    ),
    path(
        "message/<str:message_id>",
        client.MessageDetailView.as_view(),
        name="message-detail",
    ),
    path("topics", client.TopicsView.as_view(), name="topics"),
    path(
        "topic/<str:topic>/messages",
        client.TopicMessagesView.as_view(),
        name="topic-messages",
    ),
    path(
        "topic/<str:topic>/subscribe",
        client.TopicSubscribeView.as_view(),
        name="topic-subscribe",
    ),
    path(
        "topic/<str:topic>/unsubscribe",
        client.TopicUnsubscribeView.as_view(),
        name="topic-unsubscribe",
    ),
    # Internal endpoints
    path("int/message", internal.InternalMessageView.as_view(), name="int-message"),
    path(
        "int/v2/message",
        internal.InternalMessageV2View.as_view(),
        name="int-message-v2",
    ),
    path("int/mail", internal.InternalMailView.as_view(), name="int-mail"),
    # Building block endpoints
    path("bbs/message", bbs.BbsMessageView.as_view(), name="bbs-message"),
    path(
        "bbs/message/<str:message_id>",
        bbs.BbsMessageDetailView.as_view(),
        name="bbs-message-detail",
    ),
    path("bbs/messages", bbs.BbsMessagesView.as_view(), name="bbs-messages"),
    path("bbs/mail", bbs.BbsMailView.as_view(), name="bbs-mail"),
    path(
        "bbs/recipients/<str:message_id>",
        bbs.BbsRecipientsView.as_view(),
        name="bbs-recipients",
    ),
    # Admin endpoints
    path(
        "admin/app-versions",
        admin.AdminAppVersionsView.as_view(),
        name="admin-app-versions",
    ),
    path(
        "admin/app-platforms",
        admin.AdminAppPlatformsView.as_view(),
        name="admin-app-platforms",
    ),
    path("admin/topics", admin.AdminTopicsView.as_view(), name="admin-topics"),
    path("admin/topic", admin.AdminTopicView.as_view(), name="admin-topic"),
    path("admin/messages", admin.AdminMessagesView.as_view(), name="admin-messages"),
    path(
        "admin/message/<str:message_id>",
        admin.AdminMessageView.as_view(),
        name="admin-message",
    ),
]
