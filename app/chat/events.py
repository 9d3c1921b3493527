"""
Real-time chat events published on the channel layer.

Groups:
    chat_<conversation_id>: Every subscriber of one conversation
    user_<user_id>: Inbox of one user (new conversations)

Event types (channel-layer "type" values; Channels dispatches
"message.created" to a consumer's message_created handler):
    message.created: A message was committed to a conversation
    message.read: A message flipped to read
    conversation.created: A conversation was opened (sent to both inboxes)

Every publish_* function defers the send with transaction.on_commit, so a
subscriber never observes a row that was rolled back, and events leave in
commit order. Outside a transaction the callback runs immediately.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.db import transaction

from chat.constants import REALTIME_CONFIG
from chat.serializers import ConversationEventSerializer, MessageSerializer

if TYPE_CHECKING:
    from typing import Any

    from chat.models import Conversation, Message

logger = logging.getLogger(__name__)

MESSAGE_CREATED = "message.created"
MESSAGE_READ = "message.read"
CONVERSATION_CREATED = "conversation.created"


def conversation_group_name(conversation_id: int) -> str:
    return f"{REALTIME_CONFIG.CONVERSATION_GROUP_PREFIX}_{conversation_id}"


def user_group_name(user_id: int) -> str:
    return f"{REALTIME_CONFIG.USER_GROUP_PREFIX}_{user_id}"


def _send(group: str, event: dict[str, Any]) -> None:
    """
    Send an event to a channel group.

    Transport failures are logged and not raised: the row behind the event
    is already committed, and subscribers reconcile through the history
    endpoint after reconnecting.
    """
    channel_layer = get_channel_layer()
    if channel_layer is None:
        logger.warning(f"No channel layer configured, dropping {event['type']} event")
        return

    try:
        async_to_sync(channel_layer.group_send)(group, event)
    except Exception:
        logger.exception(f"Failed to publish {event['type']} event to {group}")


def publish_message_created(message: Message) -> None:
    """Publish message.created to the conversation group after commit."""
    payload = MessageSerializer(message).data
    group = conversation_group_name(message.conversation_id)

    transaction.on_commit(
        lambda: _send(group, {"type": MESSAGE_CREATED, "message": dict(payload)})
    )


def publish_message_read(message: Message) -> None:
    """Publish message.read to the conversation group after commit."""
    event = {
        "type": MESSAGE_READ,
        "message_id": message.id,
        "conversation_id": message.conversation_id,
        "read_at": message.read_at.isoformat() if message.read_at else None,
    }
    group = conversation_group_name(message.conversation_id)

    transaction.on_commit(lambda: _send(group, event))


def publish_conversation_created(conversation: Conversation) -> None:
    """Publish conversation.created to both participants' inboxes after commit."""
    payload = dict(ConversationEventSerializer(conversation).data)

    def send_to_inboxes():
        for user_id in conversation.participant_ids:
            _send(
                user_group_name(user_id),
                {"type": CONVERSATION_CREATED, "conversation": payload},
            )

    transaction.on_commit(send_to_inboxes)
