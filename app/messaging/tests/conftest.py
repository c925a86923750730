"""
Test configuration and fixtures for messaging tests.

This module provides:
- A buyer/seller pair and an unrelated user
- An item id for item-scoped conversations
- Authenticated API clients and raw access tokens (for WebSocket tests)

Usage:
    def test_example(buyer_client, seller):
        response = buyer_client.post(
            "/api/v1/messages/",
            {"recipient_id": str(seller.id), "content": "Hi"},
            format="json",
        )
        assert response.status_code == 201
"""

import uuid

import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from authentication.tests.factories import UserFactory


# =============================================================================
# User Fixtures
# =============================================================================


@pytest.fixture
def buyer(db):
    """User who starts conversations."""
    return UserFactory(first_name="Grace", last_name="Hopper")


@pytest.fixture
def seller(db):
    """User who receives the first message."""
    return UserFactory(first_name="Alan", last_name="Turing")


@pytest.fixture
def outsider(db):
    """User who takes part in none of the test conversations."""
    return UserFactory()


@pytest.fixture
def item_id():
    """Identifier of a marketplace item."""
    return uuid.uuid4()


# =============================================================================
# Client Fixtures
# =============================================================================


@pytest.fixture
def make_token():
    """Return a signed access token for the given user."""

    def _make(user) -> str:
        return str(RefreshToken.for_user(user).access_token)

    return _make


@pytest.fixture
def make_client(make_token):
    """Build an APIClient authenticated as the given user."""

    def _make(user):
        client = APIClient()
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {make_token(user)}")
        return client

    return _make


@pytest.fixture
def buyer_client(make_client, buyer):
    return make_client(buyer)


@pytest.fixture
def seller_client(make_client, seller):
    return make_client(seller)


@pytest.fixture
def outsider_client(make_client, outsider):
    return make_client(outsider)


@pytest.fixture
def anonymous_client():
    return APIClient()
