"""
Conversation references.

A message can be addressed either to a conversation that already exists or
to one that will be created by the send itself:

    ConversationRef = ExistingConversation(id) | PendingConversation(other, listing)

MessageService.send_lazy resolves a PendingConversation into an existing
conversation on the first send.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ExistingConversation:
    """A conversation that has already been created."""

    conversation_id: int


@dataclass(frozen=True)
class PendingConversation:
    """
    A conversation that does not exist yet.

    Attributes:
        other_participant_id: The member the sender is writing to
        listing_id: Listing the conversation will be scoped to
    """

    other_participant_id: int
    listing_id: int


ConversationRef = ExistingConversation | PendingConversation
