"""
URL configuration for chat API.

URL Structure:
    Conversations:
        /conversations/                 GET, POST
        /conversations/{id}/            GET
        /conversations/{id}/read/       POST

    Messages:
        /conversations/{id}/messages/   GET, POST
        /messages/                      POST (lazy conversation creation)
        /messages/{id}/read/            POST

All URLs are prefixed with /api/v1/chat/ in the main URL configuration.
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from chat.views import (
    ConversationMessageViewSet,
    ConversationViewSet,
    MessageReadView,
    MessageSendView,
)

router = DefaultRouter()
router.register(r"conversations", ConversationViewSet, basename="conversation")

app_name = "chat"

urlpatterns = [
    path("", include(router.urls)),
    path(
        "conversations/<int:conversation_pk>/messages/",
        ConversationMessageViewSet.as_view({"get": "list", "post": "create"}),
        name="conversation-message-list",
    ),
    path("messages/", MessageSendView.as_view(), name="message-send"),
    path("messages/<int:pk>/read/", MessageReadView.as_view(), name="message-read"),
]
