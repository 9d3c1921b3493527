"""
Serializers for chat API.

This module provides serializers for the chat system:
- Message serializers (read, send)
- Conversation serializers (summary, detail, open)

Serializer Hierarchy:
    MessageSerializer: Message as returned by the API and pushed to subscribers
    MessageCreateSerializer: Send to an existing conversation (URL scoped)
    MessageSendSerializer: Send with lazy conversation creation

    ConversationSummarySerializer: Conversation list entry (from summaries)
    ConversationSerializer: Full conversation detail
    ConversationEventSerializer: Payload of conversation.created inbox events
    ConversationCreateSerializer: Open (get or create) a conversation

Design Decisions:
    - Read and write serializers are separate for clarity
    - Write serializers never accept a sender; the sender is request.user
    - The API exposes the read flag as "read", mirroring the event payloads
"""

from __future__ import annotations

from rest_framework import serializers

from authentication.serializers import ParticipantSerializer
from chat.constants import MESSAGE_CONFIG
from chat.models import Conversation, Message
from chat.refs import ConversationRef, ExistingConversation, PendingConversation


# =============================================================================
# Message Serializers
# =============================================================================


class MessageSerializer(serializers.ModelSerializer):
    """
    Message serializer for message lists and real-time events.

    The same representation is used by REST responses and by the
    message.created channel-layer event, so clients can de-duplicate
    messages by id across both sources.
    """

    sender_name = serializers.SerializerMethodField(
        help_text="Display name of the message sender"
    )
    read = serializers.BooleanField(source="is_read", read_only=True)

    class Meta:
        model = Message
        fields = [
            "id",
            "conversation_id",
            "sender_id",
            "sender_name",
            "content",
            "read",
            "read_at",
            "created_at",
        ]
        read_only_fields = fields

    def get_sender_name(self, obj: Message) -> str:
        return obj.sender.get_full_name()


class MessageCreateSerializer(serializers.Serializer):
    """
    Serializer for sending a message to a conversation taken from the URL.

    Empty and whitespace-only content is accepted here and rejected by
    MessageService, so the error code is the same on every entry point.
    """

    content = serializers.CharField(
        required=False,
        default="",
        allow_blank=True,
        trim_whitespace=False,
        help_text=f"Message content (max {MESSAGE_CONFIG.MAX_CONTENT_LENGTH:,} characters)",
    )


class MessageSendSerializer(MessageCreateSerializer):
    """
    Serializer for sending a message with lazy conversation creation.

    Either conversation_id (existing conversation) or recipient_id and
    listing_id (conversation created on first send) must be provided.
    """

    conversation_id = serializers.IntegerField(
        required=False,
        allow_null=True,
        help_text="Existing conversation ID",
    )
    recipient_id = serializers.IntegerField(
        required=False,
        help_text="Other participant, when the conversation does not exist yet",
    )
    listing_id = serializers.IntegerField(
        required=False,
        help_text="Listing the new conversation is about",
    )

    def validate(self, attrs: dict) -> dict:
        """Require either conversation_id or both recipient_id and listing_id."""
        if attrs.get("conversation_id") is not None:
            return attrs

        missing = {
            name: ["This field is required when conversation_id is not provided."]
            for name in ("recipient_id", "listing_id")
            if attrs.get(name) is None
        }
        if missing:
            raise serializers.ValidationError(missing)
        return attrs

    def to_ref(self) -> ConversationRef:
        """Build the conversation reference from validated data."""
        data = self.validated_data
        if data.get("conversation_id") is not None:
            return ExistingConversation(conversation_id=data["conversation_id"])
        return PendingConversation(
            other_participant_id=data["recipient_id"],
            listing_id=data["listing_id"],
        )


# =============================================================================
# Conversation Serializers
# =============================================================================


class ListingReferenceSerializer(serializers.Serializer):
    id = serializers.IntegerField(read_only=True)
    title = serializers.CharField(read_only=True)


class MessagePreviewSerializer(serializers.Serializer):
    """Last message preview in conversation lists."""

    id = serializers.IntegerField(read_only=True)
    sender_id = serializers.IntegerField(read_only=True)
    content = serializers.CharField(read_only=True)
    created_at = serializers.DateTimeField(read_only=True)


class ConversationSummarySerializer(serializers.Serializer):
    """
    Serializer for conversation list entries.

    Reads chat.summaries.ConversationSummary objects, which already carry
    the other participant, listing, last message and unread count.
    """

    id = serializers.IntegerField(read_only=True)
    role = serializers.CharField(
        read_only=True, help_text="Requester's role: buyer or seller"
    )
    other_participant = serializers.DictField(read_only=True)
    listing = ListingReferenceSerializer(read_only=True)
    last_message = MessagePreviewSerializer(read_only=True, allow_null=True)
    unread_count = serializers.IntegerField(read_only=True)
    last_message_at = serializers.DateTimeField(read_only=True, allow_null=True)
    created_at = serializers.DateTimeField(read_only=True)


class ConversationSerializer(serializers.ModelSerializer):
    """
    Full conversation details.

    Role and unread count are computed for the requesting user.
    """

    buyer = ParticipantSerializer(read_only=True)
    seller = ParticipantSerializer(read_only=True)
    listing = ListingReferenceSerializer(read_only=True)
    role = serializers.SerializerMethodField(
        help_text="Requester's role: buyer or seller"
    )
    unread_count = serializers.SerializerMethodField(
        help_text="Number of unread messages addressed to the requester"
    )

    class Meta:
        model = Conversation
        fields = [
            "id",
            "listing",
            "buyer",
            "seller",
            "role",
            "unread_count",
            "last_message_at",
            "created_at",
        ]
        read_only_fields = fields

    def _request_user(self):
        request = self.context.get("request")
        if request and request.user.is_authenticated:
            return request.user
        return None

    def get_role(self, obj: Conversation) -> str | None:
        user = self._request_user()
        return obj.role_of(user) if user else None

    def get_unread_count(self, obj: Conversation) -> int:
        from chat.services import MessageService

        user = self._request_user()
        if not user:
            return 0
        return MessageService.get_unread_count(obj, user)


class ConversationEventSerializer(serializers.ModelSerializer):
    """Payload of conversation.created events sent to inbox groups."""

    class Meta:
        model = Conversation
        fields = [
            "id",
            "listing_id",
            "buyer_id",
            "seller_id",
            "created_at",
        ]
        read_only_fields = fields


class ConversationCreateSerializer(serializers.Serializer):
    """Serializer for opening a conversation with another participant."""

    recipient_id = serializers.IntegerField(
        help_text="User to converse with",
    )
    listing_id = serializers.IntegerField(
        help_text="Listing the conversation is about",
    )
