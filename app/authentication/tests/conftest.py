"""
Test configuration and fixtures for authentication tests.
"""

import pytest
from rest_framework.test import APIClient

from authentication.models import User
from authentication.tests.factories import UserFactory


@pytest.fixture
def user(db):
    """Create a basic active user with a filled-in profile."""
    return UserFactory(first_name="Ada", last_name="Lovelace")


@pytest.fixture
def superuser(db):
    """Create a superuser with admin privileges."""
    return User.objects.create_superuser(
        email="admin@campus.edu", password="AdminPass123!"
    )


@pytest.fixture
def api_client():
    """Unauthenticated API client for public endpoints."""
    return APIClient()
