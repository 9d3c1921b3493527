"""
WebSocket consumers for the chat application.

Consumers:
    ChatConsumer: Real-time stream of one conversation
    InboxConsumer: Per-user stream of newly opened conversations

Authentication:
    JWTAuthMiddleware attaches the user to self.scope["user"].

Channel Groups:
    chat_<conversation_id>: Members connected to a conversation
    user_<user_id>: All inbox connections of a user

Message Types (from client):
    - message: Send a new message to the conversation
    - read: Mark a message as read

Message Types (to client):
    - connection: Connection state (sent once subscribed)
    - message: New message in conversation
    - read: A message was read by its recipient
    - conversation: New conversation in the inbox
    - error: Error response (the connection stays open)

Messages sent over the socket are broadcast by the commit hook in
chat.events, the same path as messages sent through the REST API.
"""

from __future__ import annotations

import logging

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncJsonWebsocketConsumer

from core.services import ServiceResult

from chat.constants import REALTIME_CONFIG
from chat.events import conversation_group_name, user_group_name
from chat.middleware import JWT_SUBPROTOCOL
from chat.models import Conversation
from chat.services import MessageService

logger = logging.getLogger(__name__)


def _authenticated_user(scope):
    user = scope.get("user")
    if user is None or not user.is_authenticated:
        return None
    return user


def _accepted_subprotocol(scope) -> str | None:
    """Echo the jwt subprotocol back when the client authenticated with it."""
    subprotocols = scope.get("subprotocols") or []
    return JWT_SUBPROTOCOL if JWT_SUBPROTOCOL in subprotocols else None


class ChatConsumer(AsyncJsonWebsocketConsumer):
    """
    WebSocket consumer for one conversation.

    Handles:
        - Connection authentication and membership check
        - Joining/leaving the conversation channel group
        - Sending messages and read receipts
        - Forwarding message and read events

    Attributes:
        conversation_id: Id of the connected conversation
        conversation: Conversation instance (after connect)
        room_group_name: Channel layer group name for the conversation
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.conversation_id: int | None = None
        self.conversation: Conversation | None = None
        self.room_group_name: str | None = None

    async def connect(self):
        """
        Handle WebSocket connection.

        Validates:
            1. User is authenticated (else close 4001)
            2. Conversation exists (else close 4004)
            3. User is one of the two members (else close 4003)

        On success, joins the channel group, accepts the connection and
        reports the subscribed state.
        """
        self.conversation_id = self.scope["url_route"]["kwargs"]["conversation_id"]

        user = _authenticated_user(self.scope)
        if user is None:
            logger.warning(
                f"Rejected unauthenticated connection to conversation {self.conversation_id}"
            )
            await self.close(code=REALTIME_CONFIG.CLOSE_UNAUTHENTICATED)
            return

        self.conversation = await self._get_conversation()
        if not self.conversation:
            logger.warning(
                f"User {user.id} tried to connect to non-existent "
                f"conversation {self.conversation_id}"
            )
            await self.close(code=REALTIME_CONFIG.CLOSE_NOT_FOUND)
            return

        if not self.conversation.is_participant(user):
            logger.warning(
                f"User {user.id} is not a participant in "
                f"conversation {self.conversation_id}"
            )
            await self.close(code=REALTIME_CONFIG.CLOSE_FORBIDDEN)
            return

        self.room_group_name = conversation_group_name(self.conversation_id)
        await self.channel_layer.group_add(self.room_group_name, self.channel_name)

        await self.accept(subprotocol=_accepted_subprotocol(self.scope))
        await self.send_json(
            {
                "type": "connection",
                "state": REALTIME_CONFIG.STATE_SUBSCRIBED,
                "conversation_id": self.conversation_id,
            }
        )
        logger.info(f"User {user.id} connected to conversation {self.conversation_id}")

    async def disconnect(self, close_code):
        """Leave the channel group if one was joined."""
        if self.room_group_name:
            await self.channel_layer.group_discard(
                self.room_group_name,
                self.channel_name,
            )
            user = _authenticated_user(self.scope)
            logger.info(
                f"User {user.id if user else 'anonymous'} disconnected from "
                f"conversation {self.conversation_id} ({close_code})"
            )

    async def receive_json(self, content):
        """
        Handle incoming WebSocket frames.

        Expected frame format:
            {"type": "message", "content": "Hello!"}
            {"type": "read", "message_id": 123}
        """
        message_type = content.get("type") if isinstance(content, dict) else None
        user = self.scope["user"]

        if message_type == "message":
            await self._handle_message(user, content)
        elif message_type == "read":
            await self._handle_read(user, content)
        else:
            await self._send_error(
                f"Unknown message type: {message_type}",
                "UNKNOWN_MESSAGE_TYPE",
            )

    async def _handle_message(self, user, content):
        result = await self._send_message(user, content.get("content"))
        if not result:
            await self._send_error(result.error, result.error_code)

    async def _handle_read(self, user, content):
        message_id = content.get("message_id")
        if not isinstance(message_id, int):
            await self._send_error("message_id must be an integer", "INVALID_MESSAGE_ID")
            return

        result = await self._mark_read(user, message_id)
        if not result:
            await self._send_error(result.error, result.error_code)

    async def _send_error(self, error: str, error_code: str | None):
        await self.send_json(
            {
                "type": "error",
                "error": error,
                "error_code": error_code,
            }
        )

    async def message_created(self, event):
        """Forward message.created events to the client."""
        await self.send_json(
            {
                "type": "message",
                "message": event["message"],
            }
        )

    async def message_read(self, event):
        """Forward message.read events to the client."""
        await self.send_json(
            {
                "type": "read",
                "message_id": event["message_id"],
                "conversation_id": event["conversation_id"],
                "read_at": event["read_at"],
            }
        )

    @database_sync_to_async
    def _get_conversation(self) -> Conversation | None:
        return Conversation.objects.filter(pk=self.conversation_id).first()

    @database_sync_to_async
    def _send_message(self, user, content):
        return MessageService.send(self.conversation, user, content)

    @database_sync_to_async
    def _mark_read(self, user, message_id: int):
        message = (
            self.conversation.messages.select_related("conversation", "sender__profile")
            .filter(pk=message_id)
            .first()
        )
        if message is None:
            return ServiceResult.failure("Message not found", error_code="MESSAGE_NOT_FOUND")
        return MessageService.mark_read(message, user)


class InboxConsumer(AsyncJsonWebsocketConsumer):
    """
    WebSocket consumer for a user's inbox.

    Joins the user's personal group and forwards conversation.created
    events, so conversation lists can refresh when a new thread appears.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.inbox_group_name: str | None = None

    async def connect(self):
        user = _authenticated_user(self.scope)
        if user is None:
            logger.warning("Rejected unauthenticated inbox connection")
            await self.close(code=REALTIME_CONFIG.CLOSE_UNAUTHENTICATED)
            return

        self.inbox_group_name = user_group_name(user.id)
        await self.channel_layer.group_add(self.inbox_group_name, self.channel_name)

        await self.accept(subprotocol=_accepted_subprotocol(self.scope))
        await self.send_json(
            {
                "type": "connection",
                "state": REALTIME_CONFIG.STATE_SUBSCRIBED,
            }
        )
        logger.debug(f"User {user.id} connected to inbox")

    async def disconnect(self, close_code):
        if self.inbox_group_name:
            await self.channel_layer.group_discard(
                self.inbox_group_name,
                self.channel_name,
            )

    async def receive_json(self, content):
        await self.send_json(
            {
                "type": "error",
                "error": "The inbox stream is read-only",
                "error_code": "READ_ONLY",
            }
        )

    async def conversation_created(self, event):
        """Forward conversation.created events to the client."""
        await self.send_json(
            {
                "type": "conversation",
                "conversation": event["conversation"],
            }
        )

