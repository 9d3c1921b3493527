"""
Test configuration and fixtures for chat tests.

This module provides:
- Buyer, seller and outsider users with display names
- A listing and a conversation about it
- API client helpers for authenticated requests

Usage:
    def test_example(conversation, buyer_client):
        response = buyer_client.get(f'/api/v1/chat/conversations/{conversation.id}/')
        assert response.status_code == 200
"""

import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from authentication.tests.factories import UserFactory
from chat.tests.factories import ConversationFactory
from listings.tests.factories import ListingFactory


# =============================================================================
# User Fixtures
# =============================================================================


@pytest.fixture
def buyer(db):
    """Create a user who will browse and message about listings."""
    return UserFactory(profile__first_name="Alice", profile__last_name="Buyer")


@pytest.fixture
def seller(db):
    """Create a user who owns the test listing."""
    return UserFactory(profile__first_name="Sam", profile__last_name="Seller")


@pytest.fixture
def outsider(db):
    """Create a user who is not a participant in any test conversation."""
    return UserFactory()


# =============================================================================
# Listing and Conversation Fixtures
# =============================================================================


@pytest.fixture
def listing(seller):
    """Create an active listing owned by the seller."""
    return ListingFactory(seller=seller, title="Vintage road bike")


@pytest.fixture
def conversation(buyer, seller, listing):
    """Create a conversation between buyer and seller about the listing."""
    return ConversationFactory(buyer=buyer, seller=seller, listing=listing)


# =============================================================================
# API Client Fixtures
# =============================================================================


def _client_for(user):
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {refresh.access_token}")
    return client


@pytest.fixture
def api_client():
    """Unauthenticated API client."""
    return APIClient()


@pytest.fixture
def buyer_client(buyer):
    """API client authenticated as the buyer."""
    return _client_for(buyer)


@pytest.fixture
def seller_client(seller):
    """API client authenticated as the seller."""
    return _client_for(seller)


@pytest.fixture
def outsider_client(outsider):
    """API client authenticated as the outsider."""
    return _client_for(outsider)
