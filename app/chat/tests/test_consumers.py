"""
Tests for the chat WebSocket consumers.

Connections go through the same stack as production (JWTAuthMiddleware and
the URL router), using channels.testing.WebsocketCommunicator and the
in-memory channel layer.
"""

import pytest
from channels.db import database_sync_to_async
from channels.routing import URLRouter
from channels.testing import WebsocketCommunicator
from rest_framework_simplejwt.tokens import AccessToken

from authentication.tests.factories import UserFactory
from chat.middleware import JWTAuthMiddleware
from chat.models import Message
from chat.routing import websocket_urlpatterns
from chat.services import ConversationService
from chat.tests.factories import ConversationFactory, MessageFactory
from listings.tests.factories import ListingFactory

application = JWTAuthMiddleware(URLRouter(websocket_urlpatterns))


def _token(user) -> str:
    return str(AccessToken.for_user(user))


def _communicator(path, user=None):
    if user is not None:
        path = f"{path}?token={_token(user)}"
    return WebsocketCommunicator(application, path)


@database_sync_to_async
def _create_conversation():
    conversation = ConversationFactory()
    return conversation, conversation.buyer, conversation.seller


@database_sync_to_async
def _create_user():
    return UserFactory()


async def _connect_member(conversation, user):
    communicator = _communicator(f"/ws/chat/{conversation.id}/", user)
    connected, _ = await communicator.connect()
    assert connected
    greeting = await communicator.receive_json_from()
    assert greeting == {
        "type": "connection",
        "state": "subscribed",
        "conversation_id": conversation.id,
    }
    return communicator


@pytest.mark.asyncio
@pytest.mark.django_db(transaction=True)
class TestChatConsumerConnect:
    """
    Verifies:
    - Anonymous and invalid-token connections are closed with 4001
    - Unknown conversations are closed with 4004
    - Non-members are closed with 4003
    - Members receive the subscribed state
    """

    async def test_rejects_anonymous_connection(self):
        conversation, _, _ = await _create_conversation()
        communicator = _communicator(f"/ws/chat/{conversation.id}/")

        connected, code = await communicator.connect()

        assert connected is False
        assert code == 4001

    async def test_rejects_invalid_token(self):
        conversation, _, _ = await _create_conversation()
        communicator = WebsocketCommunicator(
            application, f"/ws/chat/{conversation.id}/?token=not-a-jwt"
        )

        connected, code = await communicator.connect()

        assert connected is False
        assert code == 4001

    async def test_rejects_unknown_conversation(self):
        user = await _create_user()
        communicator = _communicator("/ws/chat/999999/", user)

        connected, code = await communicator.connect()

        assert connected is False
        assert code == 4004

    async def test_rejects_non_member(self):
        conversation, _, _ = await _create_conversation()
        outsider = await _create_user()
        communicator = _communicator(f"/ws/chat/{conversation.id}/", outsider)

        connected, code = await communicator.connect()

        assert connected is False
        assert code == 4003

    async def test_member_receives_subscribed_state(self):
        conversation, buyer, _ = await _create_conversation()

        communicator = await _connect_member(conversation, buyer)

        await communicator.disconnect()

    async def test_accepts_token_in_subprotocol(self):
        conversation, buyer, _ = await _create_conversation()
        communicator = WebsocketCommunicator(
            application,
            f"/ws/chat/{conversation.id}/",
            subprotocols=["jwt", _token(buyer)],
        )

        connected, subprotocol = await communicator.connect()

        assert connected is True
        assert subprotocol == "jwt"
        await communicator.disconnect()


@pytest.mark.asyncio
@pytest.mark.django_db(transaction=True)
class TestChatConsumerFrames:
    """
    Verifies:
    - A sent message is persisted and broadcast to both members
    - Invalid frames are answered with an error and keep the connection
    - Read receipts are broadcast
    """

    async def test_message_is_broadcast_to_both_members(self):
        conversation, buyer, seller = await _create_conversation()
        buyer_socket = await _connect_member(conversation, buyer)
        seller_socket = await _connect_member(conversation, seller)

        await buyer_socket.send_json_to({"type": "message", "content": "  Is this available? "})

        for socket in (buyer_socket, seller_socket):
            event = await socket.receive_json_from(timeout=2)
            assert event["type"] == "message"
            assert event["message"]["content"] == "Is this available?"
            assert event["message"]["sender_id"] == buyer.id
            assert event["message"]["read"] is False

        count = await database_sync_to_async(
            Message.objects.filter(conversation_id=conversation.id).count
        )()
        assert count == 1

        await buyer_socket.disconnect()
        await seller_socket.disconnect()

    async def test_empty_message_returns_error_and_keeps_connection(self):
        conversation, buyer, _ = await _create_conversation()
        socket = await _connect_member(conversation, buyer)

        await socket.send_json_to({"type": "message", "content": "   "})
        error = await socket.receive_json_from()

        assert error == {
            "type": "error",
            "error": "Message content cannot be empty",
            "error_code": "EMPTY_CONTENT",
        }

        await socket.send_json_to({"type": "message", "content": "second try"})
        event = await socket.receive_json_from(timeout=2)
        assert event["type"] == "message"

        await socket.disconnect()

    async def test_unknown_frame_type_returns_error(self):
        conversation, buyer, _ = await _create_conversation()
        socket = await _connect_member(conversation, buyer)

        await socket.send_json_to({"type": "typing"})
        error = await socket.receive_json_from()

        assert error["type"] == "error"
        assert error["error_code"] == "UNKNOWN_MESSAGE_TYPE"

        await socket.disconnect()

    async def test_read_receipt_is_broadcast(self):
        conversation, buyer, seller = await _create_conversation()
        message = await database_sync_to_async(MessageFactory)(
            conversation=conversation, sender=buyer
        )
        buyer_socket = await _connect_member(conversation, buyer)
        seller_socket = await _connect_member(conversation, seller)

        await seller_socket.send_json_to({"type": "read", "message_id": message.id})

        event = await buyer_socket.receive_json_from(timeout=2)
        assert event["type"] == "read"
        assert event["message_id"] == message.id
        assert event["conversation_id"] == conversation.id
        assert event["read_at"] is not None

        await buyer_socket.disconnect()
        await seller_socket.disconnect()

    async def test_sender_cannot_mark_own_message_read(self):
        conversation, buyer, _ = await _create_conversation()
        message = await database_sync_to_async(MessageFactory)(
            conversation=conversation, sender=buyer
        )
        socket = await _connect_member(conversation, buyer)

        await socket.send_json_to({"type": "read", "message_id": message.id})
        error = await socket.receive_json_from()

        assert error["error_code"] == "NOT_RECIPIENT"

        await socket.disconnect()

    async def test_read_of_message_in_other_conversation_is_not_found(self):
        conversation, buyer, seller = await _create_conversation()
        elsewhere = await database_sync_to_async(MessageFactory)()
        socket = await _connect_member(conversation, seller)

        await socket.send_json_to({"type": "read", "message_id": elsewhere.id})
        error = await socket.receive_json_from()

        assert error["error_code"] == "MESSAGE_NOT_FOUND"

        await socket.disconnect()


@pytest.mark.asyncio
@pytest.mark.django_db(transaction=True)
class TestInboxConsumer:
    """
    Verifies:
    - Anonymous inbox connections are closed with 4001
    - Both participants are told about a newly opened conversation
    """

    async def test_rejects_anonymous_connection(self):
        communicator = WebsocketCommunicator(application, "/ws/chat/inbox/")

        connected, code = await communicator.connect()

        assert connected is False
        assert code == 4001

    async def test_new_conversation_reaches_both_inboxes(self):
        buyer = await _create_user()
        listing = await database_sync_to_async(ListingFactory)()
        seller = listing.seller

        buyer_inbox = _communicator("/ws/chat/inbox/", buyer)
        seller_inbox = _communicator("/ws/chat/inbox/", seller)
        for inbox in (buyer_inbox, seller_inbox):
            connected, _ = await inbox.connect()
            assert connected
            assert await inbox.receive_json_from() == {
                "type": "connection",
                "state": "subscribed",
            }

        result = await database_sync_to_async(ConversationService.get_or_create)(
            buyer, seller, listing
        )
        conversation, created = result.data
        assert created is True

        for inbox in (buyer_inbox, seller_inbox):
            event = await inbox.receive_json_from(timeout=2)
            assert event["type"] == "conversation"
            assert event["conversation"]["id"] == conversation.id
            assert event["conversation"]["buyer_id"] == buyer.id
            assert event["conversation"]["seller_id"] == seller.id
            assert event["conversation"]["listing_id"] == listing.id
            await inbox.disconnect()
