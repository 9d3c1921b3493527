"""
Tests for chat model constraints and computed properties.

This module tests the chat models:
- Conversation: Canonical pair, uniqueness per pair and listing, role helpers
- Message: Ordering, recipient, defaults

Test Organization:
    - Each model has its own test class
    - Each test validates ONE specific behavior
    - Tests use descriptive names following: test_<scenario>_<expected_outcome>
"""

import pytest
from django.db import IntegrityError, transaction

from authentication.tests.factories import UserFactory
from chat.models import Conversation, Message, canonical_pair
from chat.tests.factories import ConversationFactory, MessageFactory
from listings.tests.factories import ListingFactory


# =============================================================================
# TestCanonicalPair
# =============================================================================


class TestCanonicalPair:
    def test_orders_lower_id_first(self):
        assert canonical_pair(7, 3) == (3, 7)
        assert canonical_pair(3, 7) == (3, 7)


# =============================================================================
# TestConversation
# =============================================================================


class TestConversation:
    """
    Tests for Conversation model.

    Verifies:
    - Canonical participant columns are maintained on save
    - One conversation per unordered pair and listing
    - Membership and role helpers
    """

    def test_save_sets_canonical_pair(self, conversation, buyer, seller):
        low, high = sorted([buyer.id, seller.id])

        assert conversation.participant_low_id == low
        assert conversation.participant_high_id == high

    def test_duplicate_pair_and_listing_violates_unique_constraint(self, conversation):
        with pytest.raises(IntegrityError):
            with transaction.atomic():
                Conversation.objects.create(
                    buyer=conversation.buyer,
                    seller=conversation.seller,
                    listing=conversation.listing,
                )

    def test_mirrored_pair_on_same_listing_violates_unique_constraint(self, conversation):
        """Swapping buyer and seller still addresses the same conversation."""
        with pytest.raises(IntegrityError):
            with transaction.atomic():
                Conversation.objects.create(
                    buyer=conversation.seller,
                    seller=conversation.buyer,
                    listing=conversation.listing,
                )

    def test_same_pair_on_different_listing_is_allowed(self, conversation, seller):
        other_listing = ListingFactory(seller=seller)

        second = Conversation.objects.create(
            buyer=conversation.buyer,
            seller=seller,
            listing=other_listing,
        )

        assert second.id != conversation.id

    def test_buyer_equal_to_seller_violates_check_constraint(self, db):
        user = UserFactory()
        listing = ListingFactory(seller=user)

        with pytest.raises(IntegrityError):
            with transaction.atomic():
                Conversation.objects.create(buyer=user, seller=user, listing=listing)

    def test_is_participant(self, conversation, buyer, seller, outsider):
        assert conversation.is_participant(buyer) is True
        assert conversation.is_participant(seller.id) is True
        assert conversation.is_participant(outsider) is False

    def test_other_participant_id(self, conversation, buyer, seller, outsider):
        assert conversation.other_participant_id(buyer) == seller.id
        assert conversation.other_participant_id(seller) == buyer.id
        assert conversation.other_participant_id(outsider) is None

    def test_role_of(self, conversation, buyer, seller, outsider):
        assert conversation.role_of(buyer) == "buyer"
        assert conversation.role_of(seller) == "seller"
        assert conversation.role_of(outsider) is None


# =============================================================================
# TestMessage
# =============================================================================


class TestMessage:
    """
    Tests for Message model.

    Verifies:
    - Defaults (unread)
    - Recipient is the other member
    - Default ordering by (created_at, id)
    """

    def test_new_message_is_unread(self, conversation):
        message = MessageFactory(conversation=conversation)

        assert message.is_read is False
        assert message.read_at is None

    def test_recipient_is_other_member(self, conversation, buyer, seller):
        message = MessageFactory(conversation=conversation, sender=buyer)

        assert message.recipient_id == seller.id

    def test_default_ordering_is_oldest_first(self, conversation):
        first = MessageFactory(conversation=conversation)
        second = MessageFactory(conversation=conversation, sender=conversation.seller)

        assert list(Message.objects.filter(conversation=conversation)) == [first, second]

    def test_str_truncates_long_content(self, conversation):
        message = MessageFactory(conversation=conversation, content="x" * 80)

        assert str(message).endswith("...")
        assert str(message).startswith(f"User {message.sender_id}: ")
