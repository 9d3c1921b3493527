"""
Factory Boy factories for chat models.

Usage:
    from chat.tests.factories import ConversationFactory, MessageFactory

    # Conversation about a listing, buyer messaging the listing's seller
    conversation = ConversationFactory()

    # Message from the buyer
    message = MessageFactory(conversation=conversation, sender=conversation.buyer)
"""

import factory

from authentication.tests.factories import UserFactory
from chat.models import Conversation, Message
from listings.tests.factories import ListingFactory


class ConversationFactory(factory.django.DjangoModelFactory):
    """
    Factory for Conversation model.

    The seller defaults to the listing's seller, so the conversation looks
    like one a buyer opened from a listing page.

    Examples:
        conversation = ConversationFactory()
        conversation = ConversationFactory(buyer=alice, listing=bike)
    """

    class Meta:
        model = Conversation

    listing = factory.SubFactory(ListingFactory)
    buyer = factory.SubFactory(UserFactory)
    seller = factory.LazyAttribute(lambda o: o.listing.seller)
    last_message_at = None


class MessageFactory(factory.django.DjangoModelFactory):
    """
    Factory for Message model.

    Sends from the conversation's buyer unless a sender is given. Does not
    bump conversation.last_message_at; use MessageService.send for that.

    Examples:
        message = MessageFactory(conversation=conversation)
        reply = MessageFactory(conversation=conversation, sender=conversation.seller)
    """

    class Meta:
        model = Message

    conversation = factory.SubFactory(ConversationFactory)
    sender = factory.LazyAttribute(lambda o: o.conversation.buyer)
    content = factory.Faker("sentence")
    is_read = False
    read_at = None
