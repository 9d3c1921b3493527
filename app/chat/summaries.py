"""
Conversation list summaries.

A summary describes one conversation from the point of view of one
participant: who the other side is, which listing it is about, the last
message and how many messages are waiting to be read.

Summaries are computed on demand and never cached. Related rows are loaded
once per request with in_bulk and joined in memory by primary key, so
building N summaries costs a fixed number of queries.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

from django.contrib.auth import get_user_model
from django.db.models import OuterRef, Subquery

from authentication.models import UNKNOWN_DISPLAY_NAME
from chat.constants import MESSAGE_CONFIG
from chat.models import Message
from listings.models import Listing

if TYPE_CHECKING:
    from django.db.models import QuerySet

    from chat.models import Conversation


@dataclass
class ConversationSummary:
    id: int
    role: str
    other_participant: dict
    listing: dict
    last_message: dict | None
    unread_count: int
    last_message_at: datetime | None
    created_at: datetime


def preview(content: str) -> str:
    """Shorten message content for list display."""
    limit = MESSAGE_CONFIG.PREVIEW_LENGTH
    if len(content) <= limit:
        return content
    return content[: limit - 3].rstrip() + "..."


def build_summaries(
    conversations: QuerySet[Conversation],
    user_id: int,
) -> list[ConversationSummary]:
    """
    Build summaries for the given conversations as seen by user_id.

    Order follows the queryset. A participant whose account no longer
    exists is shown as UNKNOWN_DISPLAY_NAME.
    """
    from chat.services import MessageService

    latest_message = (
        Message.objects.filter(conversation=OuterRef("pk"))
        .order_by("-created_at", "-id")
        .values("id")[:1]
    )
    conversations = list(conversations.annotate(last_message_id=Subquery(latest_message)))
    if not conversations:
        return []

    other_ids = {c.other_participant_id(user_id) for c in conversations}
    users = get_user_model().objects.select_related("profile").in_bulk(other_ids)
    listings = Listing.objects.in_bulk({c.listing_id for c in conversations})
    messages = Message.objects.in_bulk(
        [c.last_message_id for c in conversations if c.last_message_id is not None]
    )
    unread_counts = MessageService.get_unread_counts(
        [c.id for c in conversations], user_id
    )

    summaries = []
    for conversation in conversations:
        other_id = conversation.other_participant_id(user_id)
        other = users.get(other_id)
        listing = listings.get(conversation.listing_id)
        last = messages.get(conversation.last_message_id)

        summaries.append(
            ConversationSummary(
                id=conversation.id,
                role=conversation.role_of(user_id),
                other_participant={
                    "id": other_id,
                    "display_name": other.get_full_name() if other else UNKNOWN_DISPLAY_NAME,
                },
                listing={
                    "id": conversation.listing_id,
                    "title": listing.title if listing else "",
                },
                last_message=(
                    {
                        "id": last.id,
                        "sender_id": last.sender_id,
                        "content": preview(last.content),
                        "created_at": last.created_at,
                    }
                    if last
                    else None
                ),
                unread_count=unread_counts.get(conversation.id, 0),
                last_message_at=conversation.last_message_at,
                created_at=conversation.created_at,
            )
        )

    return summaries
