"""
Tests for real-time event publishing.

Verifies:
- Events leave only after the surrounding transaction commits
- Payload shapes of message.created, message.read and conversation.created
- Transport failures are logged, never raised to the caller
"""

from unittest import mock

from django.utils import timezone

from chat.events import (
    CONVERSATION_CREATED,
    MESSAGE_CREATED,
    MESSAGE_READ,
    _send,
    conversation_group_name,
    publish_conversation_created,
    publish_message_created,
    publish_message_read,
    user_group_name,
)
from chat.tests.factories import MessageFactory


class TestGroupNames:
    def test_conversation_and_user_groups(self):
        assert conversation_group_name(12) == "chat_12"
        assert user_group_name(7) == "user_7"


class TestPublish:
    def test_message_created_waits_for_commit(
        self, conversation, buyer, django_capture_on_commit_callbacks
    ):
        message = MessageFactory(conversation=conversation, sender=buyer, content="Hi")

        with mock.patch("chat.events._send") as send:
            with django_capture_on_commit_callbacks(execute=False) as callbacks:
                publish_message_created(message)
            send.assert_not_called()

            for callback in callbacks:
                callback()

        group, event = send.call_args.args
        assert group == f"chat_{conversation.id}"
        assert event["type"] == MESSAGE_CREATED
        assert event["message"]["id"] == message.id
        assert event["message"]["content"] == "Hi"

    def test_message_read_payload(self, conversation, buyer, django_capture_on_commit_callbacks):
        message = MessageFactory(conversation=conversation, sender=buyer)
        message.is_read = True
        message.read_at = timezone.now()

        with mock.patch("chat.events._send") as send:
            with django_capture_on_commit_callbacks(execute=True):
                publish_message_read(message)

        send.assert_called_once_with(
            f"chat_{conversation.id}",
            {
                "type": MESSAGE_READ,
                "message_id": message.id,
                "conversation_id": conversation.id,
                "read_at": message.read_at.isoformat(),
            },
        )

    def test_conversation_created_reaches_both_inboxes(
        self, conversation, buyer, seller, django_capture_on_commit_callbacks
    ):
        with mock.patch("chat.events._send") as send:
            with django_capture_on_commit_callbacks(execute=True):
                publish_conversation_created(conversation)

        groups = sorted(call.args[0] for call in send.call_args_list)
        assert groups == sorted([user_group_name(buyer.id), user_group_name(seller.id)])
        event = send.call_args.args[1]
        assert event["type"] == CONVERSATION_CREATED
        assert event["conversation"]["listing_id"] == conversation.listing_id


class TestSend:
    def test_transport_failure_is_logged_not_raised(self):
        layer = mock.Mock()
        layer.group_send = mock.AsyncMock(side_effect=ConnectionError("redis down"))

        with mock.patch("chat.events.get_channel_layer", return_value=layer):
            with mock.patch("chat.events.logger") as logger:
                _send("chat_1", {"type": MESSAGE_CREATED, "message": {}})

        logger.exception.assert_called_once()

    def test_missing_channel_layer_is_logged(self):
        with mock.patch("chat.events.get_channel_layer", return_value=None):
            with mock.patch("chat.events.logger") as logger:
                _send("chat_1", {"type": MESSAGE_CREATED, "message": {}})

        logger.warning.assert_called_once()
