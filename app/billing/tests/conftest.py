"""
Pytest fixtures for billing tests.

Fixtures build a small catalog (one plan, one location, a few credentials)
and funded accounts so purchase tests can focus on outcomes.

Usage:
    def test_purchase(funded_account, plan, location, credential):
        result = PurchaseOrchestrator.purchase(...)
"""

from decimal import Decimal

import pytest
from django.utils import timezone
from rest_framework.test import APIClient

from billing.ledger.models import Role
from billing.state_machines import CredentialStatus
from billing.tests.factories import (
    AccountFactory,
    CredentialLeaseFactory,
    LocationFactory,
    PlanFactory,
)


# =============================================================================
# Catalog Fixtures
# =============================================================================


@pytest.fixture
def plan(db):
    """Active daily plan priced at 300.00."""
    return PlanFactory(price=Decimal("300.00"), duration_hours=24)


@pytest.fixture
def location(db):
    return LocationFactory()


@pytest.fixture
def credential(db, plan, location):
    """An available credential for (location, plan)."""
    return CredentialLeaseFactory(plan=plan, location=location)


@pytest.fixture
def leased_credential(db, plan, location, account):
    return CredentialLeaseFactory(
        plan=plan,
        location=location,
        status=CredentialStatus.LEASED,
        assigned_to=account,
        assigned_at=timezone.now(),
    )


@pytest.fixture
def disabled_credential(db, plan, location):
    return CredentialLeaseFactory(
        plan=plan,
        location=location,
        status=CredentialStatus.DISABLED,
    )


# =============================================================================
# Account Fixtures
# =============================================================================


@pytest.fixture
def account(db):
    """Account with an empty wallet."""
    return AccountFactory()


@pytest.fixture
def funded_account(db):
    """Account holding 1000.00."""
    return AccountFactory(balance=Decimal("1000.00"))


@pytest.fixture
def admin_account(db):
    return AccountFactory(role=Role.ADMIN)


@pytest.fixture
def referred_account(db, funded_account):
    """Account that signed up with funded_account's referral code."""
    return AccountFactory(referred_by=funded_account, balance=Decimal("500.00"))


# =============================================================================
# API Client Fixtures
# =============================================================================


@pytest.fixture
def api_client():
    """Unauthenticated DRF API client."""
    return APIClient()


@pytest.fixture
def funded_client(funded_account):
    """API client authenticated as funded_account's user."""
    client = APIClient()
    client.force_authenticate(user=funded_account.user)
    return client


@pytest.fixture
def admin_client(admin_account):
    client = APIClient()
    client.force_authenticate(user=admin_account.user)
    return client
