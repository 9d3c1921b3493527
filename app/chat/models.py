"""
Chat system models.

This module defines the data models for buyer/seller conversations about a
listing:

Models:
    Conversation: The single thread between two participants about one listing
    Message: Individual message within a conversation

Design Decisions:
    - A conversation is created lazily, on the first message, never on browse
    - At most one conversation exists per unordered participant pair and
      listing. The pair is stored a second time in canonical order
      (participant_low < participant_high) so a plain unique constraint
      covers both buyer/seller orientations
    - Conversations and messages are never deleted by normal operation
    - Messages are immutable except for the read flag
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.conf import settings
from django.db import models
from django.db.models import F, Q

from core.models import BaseModel

if TYPE_CHECKING:
    from authentication.models import User


def canonical_pair(user_a_id: int, user_b_id: int) -> tuple[int, int]:
    """Return the two participant ids with the lower one first."""
    return (user_a_id, user_b_id) if user_a_id < user_b_id else (user_b_id, user_a_id)


class Conversation(BaseModel):
    """
    A conversation between a buyer and a seller about one listing.

    Roles are contextual: the same user can be the buyer here and the seller
    in another conversation.

    Fields:
        buyer: Participant acting as buyer
        seller: Participant acting as seller
        listing: Listing this conversation is scoped to
        participant_low: Lower of (buyer, seller) by id, set on save
        participant_high: Higher of (buyer, seller) by id, set on save
        last_message_at: Timestamp of most recent message (for sorting)

    Constraints:
        - UniqueConstraint(participant_low, participant_high, listing):
          one conversation per unordered pair and listing
        - CheckConstraint(participant_low < participant_high)
        - CheckConstraint(buyer != seller)

    Relationships:
        messages: All Message records for this conversation
    """

    buyer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="buying_conversations",
        help_text="Participant acting as buyer in this conversation",
    )

    seller = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="selling_conversations",
        help_text="Participant acting as seller in this conversation",
    )

    listing = models.ForeignKey(
        "listings.Listing",
        on_delete=models.CASCADE,
        related_name="conversations",
        help_text="Listing this conversation is about",
    )

    participant_low = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="+",
        editable=False,
        help_text="Participant with the lower id (canonical pair order)",
    )

    participant_high = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="+",
        editable=False,
        help_text="Participant with the higher id (canonical pair order)",
    )

    last_message_at = models.DateTimeField(
        null=True,
        blank=True,
        db_index=True,
        help_text="Timestamp of most recent message (for sorting conversation lists)",
    )

    class Meta:
        db_table = "chat_conversation"
        ordering = ["-last_message_at", "-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["participant_low", "participant_high", "listing"],
                name="unique_conversation_pair_listing",
            ),
            models.CheckConstraint(
                condition=Q(participant_low_id__lt=F("participant_high_id")),
                name="conversation_participant_low_lt_high",
            ),
            models.CheckConstraint(
                condition=~Q(buyer_id=F("seller_id")),
                name="conversation_buyer_not_seller",
            ),
        ]
        indexes = [
            models.Index(
                fields=["buyer", "-last_message_at"],
                name="chat_conv_buyer_idx",
            ),
            models.Index(
                fields=["seller", "-last_message_at"],
                name="chat_conv_seller_idx",
            ),
        ]

    def __str__(self) -> str:
        return (
            f"Conversation({self.pk}) listing={self.listing_id} "
            f"buyer={self.buyer_id} seller={self.seller_id}"
        )

    def save(self, *args, **kwargs):
        """Keep the canonical pair columns in sync with buyer/seller."""
        self.participant_low_id, self.participant_high_id = canonical_pair(
            self.buyer_id, self.seller_id
        )
        super().save(*args, **kwargs)

    @property
    def participant_ids(self) -> tuple[int, int]:
        return (self.buyer_id, self.seller_id)

    def is_participant(self, user: User | int) -> bool:
        """Check if the user (or user id) is one of the two members."""
        user_id = getattr(user, "pk", user)
        return user_id in self.participant_ids

    def other_participant_id(self, user: User | int) -> int | None:
        """
        Get the id of the member who is not ``user``.

        Returns:
            The other member's id, or None if ``user`` is not a member
        """
        user_id = getattr(user, "pk", user)
        if user_id == self.buyer_id:
            return self.seller_id
        if user_id == self.seller_id:
            return self.buyer_id
        return None

    def role_of(self, user: User | int) -> str | None:
        """Return "buyer", "seller" or None for a non-member."""
        user_id = getattr(user, "pk", user)
        if user_id == self.buyer_id:
            return "buyer"
        if user_id == self.seller_id:
            return "seller"
        return None


class Message(BaseModel):
    """
    A message within a conversation.

    Identifier and created_at are assigned by the store, never by the
    client. Only the read state changes after creation.

    Fields:
        conversation: Conversation this message belongs to
        sender: Member who sent the message
        content: Message text (non-empty, stripped)
        is_read: Whether the recipient has read the message
        read_at: When is_read flipped to True (null while unread)

    Ordering:
        created_at ascending, ties broken by id (commit order)
    """

    conversation = models.ForeignKey(
        Conversation,
        on_delete=models.CASCADE,
        related_name="messages",
        help_text="Conversation this message belongs to",
    )

    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="sent_messages",
        help_text="User who sent this message",
    )

    content = models.TextField(
        help_text="Message text",
    )

    is_read = models.BooleanField(
        default=False,
        help_text="Whether the recipient has read this message",
    )

    read_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the recipient read this message",
    )

    class Meta:
        db_table = "chat_message"
        ordering = ["created_at", "id"]
        indexes = [
            # Messages in a conversation (cursor pagination)
            models.Index(
                fields=["conversation", "created_at", "id"],
                name="chat_msg_conv_cursor_idx",
            ),
            # Unread messages per conversation (unread counts, mark all read)
            models.Index(
                fields=["conversation", "sender"],
                name="chat_msg_conv_unread_idx",
                condition=Q(is_read=False),
            ),
        ]

    def __str__(self) -> str:
        content_preview = (
            self.content[:50] + "..." if len(self.content) > 50 else self.content
        )
        return f"User {self.sender_id}: {content_preview}"

    @property
    def recipient_id(self) -> int:
        """Id of the member this message is addressed to."""
        return self.conversation.other_participant_id(self.sender_id)
