"""
Chat system service layer.

This module provides the business logic for the chat system, encapsulating
all operations on conversations and messages.

Services:
    ConversationService: Conversation identity and lifecycle (resolve, get or create)
    MessageService: Message operations (send, lazy send, history, read state)

Design Principles:
    - Services are stateless (use class methods)
    - Expected failures return ServiceResult.failure()
    - Unexpected failures raise exceptions (database outages propagate)
    - All writes use transactions; real-time events are published on commit
    - Participants, conversations, messages and listings may be passed as
      model instances or primary keys

Usage:
    from chat.refs import PendingConversation
    from chat.services import ConversationService, MessageService

    # Open (or find) the conversation between a buyer and a listing's seller
    result = ConversationService.get_or_create(buyer, seller, listing)
    if result.success:
        conversation, created = result.data

    # Send the first message, creating the conversation on the way
    result = MessageService.send_lazy(
        sender=buyer,
        ref=PendingConversation(other_participant_id=seller.id, listing_id=listing.id),
        content="Is this still available?",
    )
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from django.contrib.auth import get_user_model
from django.db import IntegrityError
from django.db.models import Count, Q
from django.db.models.functions import Coalesce
from django.utils import timezone

from core.services import BaseService, ServiceResult

from chat.constants import MESSAGE_CONFIG
from chat.events import publish_conversation_created, publish_message_created, publish_message_read
from chat.models import Conversation, Message, canonical_pair
from chat.refs import ConversationRef, PendingConversation
from listings.models import Listing

if TYPE_CHECKING:
    from django.db.models import QuerySet

    from authentication.models import User
    from chat.summaries import ConversationSummary

logger = logging.getLogger(__name__)


def _as_id(value) -> int | None:
    """Return the primary key of a model instance, or the value itself."""
    if value is None:
        return None
    return getattr(value, "pk", value)


class ConversationService(BaseService):
    """
    Service for conversation identity and lifecycle.

    Methods:
        resolve: Find the conversation for a participant pair and listing
        get_or_create: Find or create that conversation (race safe)
        get_for_participant: Load a conversation the user is a member of
        list_for_user: Conversations a user belongs to, most recent first
        list_summaries: Conversation list entries for a user
    """

    @classmethod
    def resolve(
        cls,
        participant_a: User | int | None,
        participant_b: User | int | None,
        listing: Listing | int | None,
    ) -> ServiceResult[Conversation | None]:
        """
        Find the conversation between two participants about a listing.

        The lookup is symmetric: (a, b) and (b, a) resolve to the same
        conversation regardless of who is buyer and who is seller.

        Args:
            participant_a: One participant
            participant_b: The other participant
            listing: Listing the conversation is scoped to

        Returns:
            ServiceResult with the Conversation, or None when none exists yet

        Error codes:
            INVALID_PARTICIPANTS: A participant is missing or both are the same user
            LISTING_REQUIRED: No listing given
        """
        a_id = _as_id(participant_a)
        b_id = _as_id(participant_b)
        listing_id = _as_id(listing)

        if a_id is None or b_id is None or a_id == b_id:
            return ServiceResult.failure(
                "A conversation needs two distinct participants",
                error_code="INVALID_PARTICIPANTS",
            )

        if listing_id is None:
            return ServiceResult.failure(
                "A listing is required to look up a conversation",
                error_code="LISTING_REQUIRED",
            )

        low_id, high_id = canonical_pair(a_id, b_id)
        conversation = Conversation.objects.filter(
            participant_low_id=low_id,
            participant_high_id=high_id,
            listing_id=listing_id,
        ).first()

        return ServiceResult.success(conversation)

    @classmethod
    def get_or_create(
        cls,
        sender: User | int,
        other: User | int | None,
        listing: Listing | int | None,
    ) -> ServiceResult[tuple[Conversation, bool]]:
        """
        Get or create the conversation between sender and other about a listing.

        Like QuerySet.get_or_create, the result carries (conversation, created).

        If the sender is the listing's seller, the other participant becomes
        the buyer; otherwise the sender is the buyer. Concurrent callers for
        the same pair and listing always end up with the same conversation:
        the losing insert hits the unique constraint, its savepoint is
        rolled back and the winner's row is returned instead.

        Args:
            sender: User opening the conversation
            other: The other participant
            listing: Listing the conversation is about

        Returns:
            ServiceResult with (Conversation, created)

        Error codes:
            LISTING_REQUIRED: No listing given
            INVALID_PARTICIPANTS: No other participant given
            SAME_USER: Sender and other participant are the same user
            LISTING_NOT_FOUND: Listing does not exist
            USER_NOT_FOUND: Other participant does not exist or is inactive
            LISTING_UNAVAILABLE: Listing no longer accepts new conversations
        """
        sender_id = _as_id(sender)
        other_id = _as_id(other)
        listing_id = _as_id(listing)

        if listing_id is None:
            return ServiceResult.failure(
                "A listing is required to start a conversation",
                error_code="LISTING_REQUIRED",
            )

        if other_id is None:
            return ServiceResult.failure(
                "A recipient is required to start a conversation",
                error_code="INVALID_PARTICIPANTS",
            )

        if other_id == sender_id:
            return ServiceResult.failure(
                "Cannot start a conversation with yourself",
                error_code="SAME_USER",
            )

        if not isinstance(listing, Listing):
            listing = Listing.objects.filter(pk=listing_id).first()
            if listing is None:
                return ServiceResult.failure(
                    "Listing not found",
                    error_code="LISTING_NOT_FOUND",
                )

        if not get_user_model().objects.filter(pk=other_id, is_active=True).exists():
            return ServiceResult.failure(
                "Recipient not found",
                error_code="USER_NOT_FOUND",
            )

        existing = cls.resolve(sender_id, other_id, listing_id)
        if not existing:
            return existing
        if existing.data is not None:
            return ServiceResult.success((existing.data, False))

        if not listing.is_active:
            return ServiceResult.failure(
                "This listing is no longer available",
                error_code="LISTING_UNAVAILABLE",
            )

        if sender_id == listing.seller_id:
            buyer_id, seller_id = other_id, sender_id
        else:
            buyer_id, seller_id = sender_id, other_id

        try:
            with cls.atomic():
                conversation = Conversation.objects.create(
                    buyer_id=buyer_id,
                    seller_id=seller_id,
                    listing_id=listing_id,
                )
        except IntegrityError:
            # A concurrent request created the same conversation first
            winner = cls.resolve(sender_id, other_id, listing_id)
            if not winner or winner.data is None:
                raise
            cls.get_logger().warning(
                f"Conversation creation race for listing {listing_id} "
                f"(users {buyer_id}, {seller_id}); using conversation {winner.data.id}"
            )
            return ServiceResult.success((winner.data, False))

        publish_conversation_created(conversation)

        cls.get_logger().info(
            f"Created conversation {conversation.id} for listing {listing_id} "
            f"between buyer {buyer_id} and seller {seller_id}"
        )

        return ServiceResult.success((conversation, True))

    @classmethod
    def get_for_participant(
        cls,
        conversation_id: int,
        user: User | int,
    ) -> ServiceResult[Conversation]:
        """
        Load a conversation, checking that the user is a member.

        Error codes:
            CONVERSATION_NOT_FOUND: No conversation with that id
            NOT_PARTICIPANT: User is not one of the two members
        """
        conversation = (
            Conversation.objects.select_related("listing", "buyer__profile", "seller__profile")
            .filter(pk=conversation_id)
            .first()
        )
        if conversation is None:
            return ServiceResult.failure(
                "Conversation not found",
                error_code="CONVERSATION_NOT_FOUND",
            )

        if not conversation.is_participant(user):
            return ServiceResult.failure(
                "You are not a participant in this conversation",
                error_code="NOT_PARTICIPANT",
            )

        return ServiceResult.success(conversation)

    @classmethod
    def list_for_user(cls, user: User | int) -> QuerySet[Conversation]:
        """
        Get all conversations a user belongs to, in either role.

        Ordered by most recent activity; a conversation without messages
        counts as active at its creation time.
        """
        user_id = _as_id(user)
        return Conversation.objects.filter(
            Q(buyer_id=user_id) | Q(seller_id=user_id)
        ).order_by(
            Coalesce("last_message_at", "created_at").desc(),
            "-id",
        )

    @classmethod
    def list_summaries(cls, user: User | int) -> list[ConversationSummary]:
        """Build the conversation list for a user (see chat.summaries)."""
        from chat.summaries import build_summaries

        return build_summaries(cls.list_for_user(user), _as_id(user))


class MessageService(BaseService):
    """
    Service for message operations.

    Methods:
        validate_content: Check and normalize message content
        send: Append a message to an existing conversation
        send_lazy: Send to an existing or not-yet-created conversation
        list_for: Message history of a conversation, oldest first
        mark_read: Mark one message read (recipient only, idempotent)
        mark_conversation_read: Mark every message addressed to a user read
        get_unread_count: Unread messages addressed to a user in a conversation
        get_unread_counts: Same, for many conversations at once
    """

    @classmethod
    def validate_content(cls, content: str | None) -> ServiceResult[str]:
        """
        Validate message content.

        Returns:
            ServiceResult with the stripped content

        Error codes:
            EMPTY_CONTENT: Content is missing, empty or whitespace only
            CONTENT_TOO_LONG: Content exceeds MESSAGE_CONFIG.MAX_CONTENT_LENGTH
        """
        content = (content or "").strip()

        if len(content) < MESSAGE_CONFIG.MIN_CONTENT_LENGTH:
            return ServiceResult.failure(
                "Message content cannot be empty",
                error_code="EMPTY_CONTENT",
            )

        if len(content) > MESSAGE_CONFIG.MAX_CONTENT_LENGTH:
            return ServiceResult.failure(
                f"Message content cannot exceed {MESSAGE_CONFIG.MAX_CONTENT_LENGTH} characters",
                error_code="CONTENT_TOO_LONG",
            )

        return ServiceResult.success(content)

    @classmethod
    def send(
        cls,
        conversation: Conversation,
        sender: User,
        content: str,
    ) -> ServiceResult[Message]:
        """
        Send a message to a conversation.

        The message and the conversation's last_message_at are written in
        one transaction. message.created is published once it commits.

        Args:
            conversation: Conversation to send to
            sender: User sending the message
            content: Message text (stripped before storing)

        Returns:
            ServiceResult with the persisted Message

        Error codes:
            EMPTY_CONTENT: Content is empty or whitespace only
            CONTENT_TOO_LONG: Content exceeds maximum length
            NOT_PARTICIPANT: Sender is not a member of the conversation
        """
        validation = cls.validate_content(content)
        if not validation:
            return validation

        if not conversation.is_participant(sender):
            return ServiceResult.failure(
                "You are not a participant in this conversation",
                error_code="NOT_PARTICIPANT",
            )

        with cls.atomic():
            message = Message.objects.create(
                conversation=conversation,
                sender=sender,
                content=validation.data,
            )

            Conversation.objects.filter(pk=conversation.pk).update(
                last_message_at=message.created_at,
                updated_at=message.created_at,
            )
            conversation.last_message_at = message.created_at

            publish_message_created(message)

        cls.get_logger().debug(
            f"Message {message.id} sent to conversation {conversation.id} "
            f"by user {sender.id}"
        )

        return ServiceResult.success(message)

    @classmethod
    def send_lazy(
        cls,
        sender: User,
        ref: ConversationRef,
        content: str,
    ) -> ServiceResult[Message]:
        """
        Send a message, creating the conversation on the first send.

        Content is validated before anything is written, so an empty first
        message never leaves an empty conversation behind. Creation and
        send happen in one transaction.

        Args:
            sender: User sending the message
            ref: ExistingConversation or PendingConversation
            content: Message text

        Returns:
            ServiceResult with the persisted Message

        Error codes:
            EMPTY_CONTENT / CONTENT_TOO_LONG: Invalid content
            CONVERSATION_NOT_FOUND: Existing reference points nowhere
            NOT_PARTICIPANT: Sender is not a member of the conversation
            Any ConversationService.get_or_create error code
        """
        validation = cls.validate_content(content)
        if not validation:
            return validation

        with cls.atomic():
            if isinstance(ref, PendingConversation):
                opened = ConversationService.get_or_create(
                    sender, ref.other_participant_id, ref.listing_id
                )
                if not opened:
                    return opened
                conversation, _created = opened.data
            else:
                conversation = Conversation.objects.filter(
                    pk=ref.conversation_id
                ).first()
                if conversation is None:
                    return ServiceResult.failure(
                        "Conversation not found",
                        error_code="CONVERSATION_NOT_FOUND",
                    )

            return cls.send(conversation, sender, validation.data)

    @classmethod
    def list_for(
        cls,
        conversation: Conversation,
        user: User | int,
    ) -> ServiceResult[QuerySet[Message]]:
        """
        Get the message history of a conversation, oldest first.

        The returned queryset is lazy and can be evaluated again to observe
        messages committed since.

        Error codes:
            NOT_PARTICIPANT: User is not a member of the conversation
        """
        if not conversation.is_participant(user):
            return ServiceResult.failure(
                "You are not a participant in this conversation",
                error_code="NOT_PARTICIPANT",
            )

        messages = (
            Message.objects.filter(conversation=conversation)
            .select_related("sender__profile")
            .order_by("created_at", "id")
        )
        return ServiceResult.success(messages)

    @classmethod
    def mark_read(
        cls,
        message: Message | int,
        user: User | int,
    ) -> ServiceResult[Message]:
        """
        Mark a message as read by its recipient.

        Idempotent: marking an already read message succeeds without a
        write, and concurrent calls set read_at exactly once.

        Args:
            message: Message (or message id) to mark
            user: User marking the message read

        Returns:
            ServiceResult with the Message (is_read=True)

        Error codes:
            MESSAGE_NOT_FOUND: No message with that id
            NOT_PARTICIPANT: User is not a member of the conversation
            NOT_RECIPIENT: User sent the message
        """
        if not isinstance(message, Message):
            message = (
                Message.objects.select_related("conversation", "sender__profile")
                .filter(pk=message)
                .first()
            )
            if message is None:
                return ServiceResult.failure(
                    "Message not found",
                    error_code="MESSAGE_NOT_FOUND",
                )

        user_id = _as_id(user)

        if not message.conversation.is_participant(user_id):
            return ServiceResult.failure(
                "You are not a participant in this conversation",
                error_code="NOT_PARTICIPANT",
            )

        if message.recipient_id != user_id:
            return ServiceResult.failure(
                "Only the recipient can mark a message as read",
                error_code="NOT_RECIPIENT",
            )

        if message.is_read:
            return ServiceResult.success(message)

        now = timezone.now()
        with cls.atomic():
            updated = Message.objects.filter(pk=message.pk, is_read=False).update(
                is_read=True,
                read_at=now,
                updated_at=now,
            )
            if updated:
                message.is_read = True
                message.read_at = now
                message.updated_at = now
                publish_message_read(message)
            else:
                message.refresh_from_db(fields=["is_read", "read_at", "updated_at"])

        cls.get_logger().debug(f"User {user_id} read message {message.id}")

        return ServiceResult.success(message)

    @classmethod
    def mark_conversation_read(
        cls,
        conversation: Conversation,
        user: User | int,
    ) -> ServiceResult[int]:
        """
        Mark every unread message addressed to the user as read.

        Returns:
            ServiceResult with the number of messages that changed

        Error codes:
            NOT_PARTICIPANT: User is not a member of the conversation
        """
        user_id = _as_id(user)
        if not conversation.is_participant(user_id):
            return ServiceResult.failure(
                "You are not a participant in this conversation",
                error_code="NOT_PARTICIPANT",
            )

        now = timezone.now()
        updated = (
            Message.objects.filter(conversation=conversation, is_read=False)
            .exclude(sender_id=user_id)
            .update(is_read=True, read_at=now, updated_at=now)
        )

        cls.get_logger().debug(
            f"User {user_id} marked {updated} messages read in conversation {conversation.id}"
        )

        return ServiceResult.success(updated)

    @classmethod
    def get_unread_count(
        cls,
        conversation: Conversation,
        user: User | int,
    ) -> int:
        """
        Get count of unread messages addressed to a user in a conversation.

        Returns:
            Number of unread messages (0 if user is not a participant)
        """
        user_id = _as_id(user)
        if not conversation.is_participant(user_id):
            return 0

        return (
            Message.objects.filter(conversation=conversation, is_read=False)
            .exclude(sender_id=user_id)
            .count()
        )

    @classmethod
    def get_unread_counts(
        cls,
        conversation_ids: list[int],
        user: User | int,
    ) -> dict[int, int]:
        """
        Get unread counts for many conversations in one query.

        Conversations without unread messages are absent from the result.
        """
        user_id = _as_id(user)
        rows = (
            Message.objects.filter(conversation_id__in=conversation_ids, is_read=False)
            .exclude(sender_id=user_id)
            .values("conversation_id")
            .annotate(unread=Count("id"))
        )
        return {row["conversation_id"]: row["unread"] for row in rows}
