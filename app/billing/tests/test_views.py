"""
Tests for billing API views.

Tests:
- GET /api/v1/billing/wallet/
- GET/POST /api/v1/billing/purchases/
- GET /api/v1/billing/credentials/
"""

from decimal import Decimal

from rest_framework import status
from rest_framework.test import APIClient

from authentication.tests.factories import UserFactory
from billing.models import PurchaseRecord
from billing.state_machines import CredentialStatus
from billing.tests.factories import (
    AccountFactory,
    CredentialLeaseFactory,
    PlanFactory,
    PurchaseRecordFactory,
)

WALLET_URL = "/api/v1/billing/wallet/"
PURCHASES_URL = "/api/v1/billing/purchases/"
CREDENTIALS_URL = "/api/v1/billing/credentials/"


def client_for(account):
    client = APIClient()
    client.force_authenticate(user=account.user)
    return client


# =============================================================================
# Wallet
# =============================================================================


class TestWalletView:
    """Tests for GET /api/v1/billing/wallet/."""

    def test_returns_wallet(self, funded_client, funded_account, settings):
        settings.BILLING_CURRENCY = "NGN"

        response = funded_client.get(WALLET_URL)

        assert response.status_code == status.HTTP_200_OK
        assert response.data["id"] == str(funded_account.id)
        assert response.data["balance"] == "1000.00"
        assert response.data["currency"] == "NGN"
        assert response.data["referral_code"] == funded_account.referral_code
        assert response.data["referred_by_code"] is None
        assert response.data["role"] == "user"

    def test_shows_referrer_code(self, funded_account, referred_account):
        response = client_for(referred_account).get(WALLET_URL)

        assert response.data["referred_by_code"] == funded_account.referral_code

    def test_requires_authentication(self, api_client):
        response = api_client.get(WALLET_URL)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_requires_billing_account(self, api_client, db):
        api_client.force_authenticate(user=UserFactory())

        response = api_client.get(WALLET_URL)

        assert response.status_code == status.HTTP_403_FORBIDDEN


# =============================================================================
# Purchase
# =============================================================================


class TestPurchaseCreate:
    """Tests for POST /api/v1/billing/purchases/."""

    def test_purchase_picks_available_credential(
        self, funded_client, funded_account, plan, location, credential
    ):
        response = funded_client.post(
            PURCHASES_URL,
            {"plan_id": str(plan.id), "location_id": str(location.id)},
            format="json",
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["success"] is True
        assert response.data["credential_id"] == str(credential.id)
        assert response.data["amount"] == "300.00"
        assert response.data["credential"] == {
            "username": credential.username,
            "password": credential.password,
        }

        funded_account.refresh_from_db()
        credential.refresh_from_db()
        assert funded_account.balance == Decimal("700.00")
        assert credential.status == CredentialStatus.LEASED

    def test_purchase_named_credential(self, funded_client, plan, location):
        CredentialLeaseFactory(plan=plan, location=location)
        chosen = CredentialLeaseFactory(plan=plan, location=location)

        response = funded_client.post(
            PURCHASES_URL,
            {
                "plan_id": str(plan.id),
                "location_id": str(location.id),
                "credential_id": str(chosen.id),
            },
            format="json",
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["credential_id"] == str(chosen.id)

    def test_price_comes_from_plan(self, funded_client, funded_account, location):
        plan = PlanFactory(price=Decimal("150.50"))
        CredentialLeaseFactory(plan=plan, location=location)

        response = funded_client.post(
            PURCHASES_URL,
            {"plan_id": str(plan.id), "location_id": str(location.id), "amount": "0.01"},
            format="json",
        )

        assert response.status_code == status.HTTP_201_CREATED
        funded_account.refresh_from_db()
        assert funded_account.balance == Decimal("849.50")

    def test_insufficient_funds(self, account, plan, location, credential):
        response = client_for(account).post(
            PURCHASES_URL,
            {"plan_id": str(plan.id), "location_id": str(location.id)},
            format="json",
        )

        assert response.status_code == status.HTTP_402_PAYMENT_REQUIRED
        assert response.data["error_code"] == "INSUFFICIENT_FUNDS"
        assert response.data["details"]["required"] == "300.00"
        assert response.data["details"]["available"] == "0.00"

    def test_no_credentials_left(self, funded_client, plan, location, leased_credential):
        response = funded_client.post(
            PURCHASES_URL,
            {"plan_id": str(plan.id), "location_id": str(location.id)},
            format="json",
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data["error_code"] == "CREDENTIAL_UNAVAILABLE"

    def test_named_credential_already_leased(
        self, funded_client, funded_account, plan, location, leased_credential
    ):
        response = funded_client.post(
            PURCHASES_URL,
            {
                "plan_id": str(plan.id),
                "location_id": str(location.id),
                "credential_id": str(leased_credential.id),
            },
            format="json",
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data["details"]["observed_status"] == "leased"
        funded_account.refresh_from_db()
        assert funded_account.balance == Decimal("1000.00")

    def test_inactive_plan(self, funded_client, location):
        plan = PlanFactory(is_active=False)
        CredentialLeaseFactory(plan=plan, location=location)

        response = funded_client.post(
            PURCHASES_URL,
            {"plan_id": str(plan.id), "location_id": str(location.id)},
            format="json",
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["error_code"] == "PLAN_NOT_FOUND"

    def test_missing_fields(self, funded_client):
        response = funded_client.post(PURCHASES_URL, {}, format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "plan_id" in response.data
        assert "location_id" in response.data

    def test_cannot_buy_for_another_account(
        self, funded_client, referred_account, plan, location, credential
    ):
        response = funded_client.post(
            PURCHASES_URL,
            {
                "plan_id": str(plan.id),
                "location_id": str(location.id),
                "account_id": str(referred_account.id),
            },
            format="json",
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data["error_code"] == "NOT_ACCOUNT_OWNER"
        referred_account.refresh_from_db()
        assert referred_account.balance == Decimal("500.00")

    def test_admin_buys_for_another_account(
        self, admin_client, funded_account, plan, location, credential
    ):
        response = admin_client.post(
            PURCHASES_URL,
            {
                "plan_id": str(plan.id),
                "location_id": str(location.id),
                "account_id": str(funded_account.id),
            },
            format="json",
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["account_id"] == str(funded_account.id)
        funded_account.refresh_from_db()
        assert funded_account.balance == Decimal("700.00")

    def test_idempotency_header_replays(self, funded_client, funded_account, plan, location):
        CredentialLeaseFactory(plan=plan, location=location)
        CredentialLeaseFactory(plan=plan, location=location)
        body = {"plan_id": str(plan.id), "location_id": str(location.id)}

        first = funded_client.post(
            PURCHASES_URL, body, format="json", HTTP_IDEMPOTENCY_KEY="retry-1"
        )
        second = funded_client.post(
            PURCHASES_URL, body, format="json", HTTP_IDEMPOTENCY_KEY="retry-1"
        )

        assert first.status_code == status.HTTP_201_CREATED
        assert second.status_code == status.HTTP_200_OK
        assert second.data["transaction_id"] == first.data["transaction_id"]
        funded_account.refresh_from_db()
        assert funded_account.balance == Decimal("700.00")

    def test_requires_authentication(self, api_client, plan, location):
        response = api_client.post(
            PURCHASES_URL,
            {"plan_id": str(plan.id), "location_id": str(location.id)},
            format="json",
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


class TestPurchaseList:
    """Tests for GET /api/v1/billing/purchases/."""

    def test_lists_own_and_referred_records(self, funded_client, funded_account, referred_account):
        own = PurchaseRecordFactory(account=funded_account, password="own-secret")
        referred = PurchaseRecordFactory(account=referred_account, password="their-secret")
        PurchaseRecordFactory()

        response = funded_client.get(PURCHASES_URL)

        assert response.status_code == status.HTTP_200_OK
        assert response.data["count"] == 2
        by_id = {row["id"]: row for row in response.data["results"]}
        assert by_id[str(own.id)]["password"] == "own-secret"
        assert by_id[str(referred.id)]["password"] is None

    def test_admin_sees_all(self, admin_client):
        PurchaseRecordFactory()
        PurchaseRecordFactory()

        response = admin_client.get(PURCHASES_URL)

        assert response.data["count"] == 2

    def test_purchase_shows_up_in_history(self, funded_client, plan, location, credential):
        funded_client.post(
            PURCHASES_URL,
            {"plan_id": str(plan.id), "location_id": str(location.id)},
            format="json",
        )

        response = funded_client.get(PURCHASES_URL)

        assert response.data["count"] == 1
        row = response.data["results"][0]
        assert row["plan"]["id"] == str(plan.id)
        assert row["location"]["id"] == str(location.id)
        assert row["username"] == credential.username
        assert PurchaseRecord.objects.count() == 1


class TestCredentialList:
    """Tests for GET /api/v1/billing/credentials/."""

    def test_lists_only_callers_leases(self, account, leased_credential, credential):
        CredentialLeaseFactory(
            plan=credential.plan,
            location=credential.location,
            status=CredentialStatus.LEASED,
            assigned_to=AccountFactory(),
        )

        response = client_for(account).get(CREDENTIALS_URL)

        assert response.status_code == status.HTTP_200_OK
        assert [row["id"] for row in response.data["results"]] == [str(leased_credential.id)]
        assert response.data["results"][0]["password"] == leased_credential.password
