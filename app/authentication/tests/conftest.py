"""
Test configuration and fixtures for authentication tests.

Usage:
    def test_example(user, api_client):
        response = api_client.post('/api/v1/auth/register/', {...})
        assert response.status_code == 201
"""

import pytest
from rest_framework.test import APIClient

from authentication.models import User
from authentication.services import AccountRegistry
from authentication.tests.factories import UserFactory


@pytest.fixture
def user(db):
    """A verified user without a billing account."""
    return UserFactory(email_verified=True)


@pytest.fixture
def superuser(db):
    """Create a superuser with admin privileges."""
    return User.objects.create_superuser(
        email="admin@example.com", password="AdminPass123!"
    )


@pytest.fixture
def referrer_account(db):
    """A registered account whose referral code other signups can use."""
    result = AccountRegistry.register(email="referrer@example.com", password="TestPass123!")
    assert result.success
    return result.data


@pytest.fixture
def api_client():
    """Unauthenticated DRF API client."""
    return APIClient()
