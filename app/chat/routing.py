"""
WebSocket URL routing for the chat application.

URL Patterns:
    ws/chat/inbox/ - Personal inbox (new conversations)
    ws/chat/<conversation_id>/ - Connect to a specific conversation

Authentication:
    JWT token is passed as query parameter (?token=<jwt_access_token>) or
    as subprotocol ("jwt", <jwt_access_token>). JWTAuthMiddleware validates
    the token and attaches the user to the consumer's scope.
"""

from django.urls import path

from chat import consumers

websocket_urlpatterns = [
    path(
        "ws/chat/inbox/",
        consumers.InboxConsumer.as_asgi(),
    ),
    path(
        "ws/chat/<int:conversation_id>/",
        consumers.ChatConsumer.as_asgi(),
    ),
]
