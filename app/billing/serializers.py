"""
DRF serializers for the billing app.

This module provides serializers for:
- Purchase requests and responses
- Wallet display
- Purchase history and leased credentials

Related files:
    - views.py: Billing API views
    - services/purchase_orchestrator.py: PurchaseResult
"""

from __future__ import annotations

from django.conf import settings
from rest_framework import serializers

from billing.models import Account, CredentialLease, Location, Plan, PurchaseRecord


class PurchaseRequestSerializer(serializers.Serializer):
    """
    Purchase request body.

    amount and duration come from the plan, never from the client.
    credential_id is optional; the oldest available credential for the
    (location, plan) pair is used when it is omitted. account_id defaults to
    the caller's own account.
    """

    plan_id = serializers.UUIDField()
    location_id = serializers.UUIDField()
    credential_id = serializers.UUIDField(required=False, allow_null=True)
    account_id = serializers.UUIDField(required=False, allow_null=True)
    idempotency_key = serializers.CharField(
        required=False,
        allow_blank=True,
        max_length=255,
    )


class LeasedCredentialSerializer(serializers.Serializer):
    username = serializers.CharField()
    password = serializers.CharField()


class PurchaseResponseSerializer(serializers.Serializer):
    """Shape of PurchaseResult.to_dict() plus the leased credential."""

    success = serializers.BooleanField()
    transaction_id = serializers.UUIDField()
    account_id = serializers.UUIDField()
    plan_id = serializers.UUIDField()
    location_id = serializers.UUIDField()
    credential_id = serializers.UUIDField()
    amount = serializers.DecimalField(max_digits=10, decimal_places=2)
    expires_at = serializers.DateTimeField()
    credential = LeasedCredentialSerializer()


class PlanSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Plan
        fields = ["id", "name", "duration_hours", "price", "type", "data_amount"]
        read_only_fields = fields


class LocationSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Location
        fields = ["id", "name", "wifi_name"]
        read_only_fields = fields


class PurchaseRecordSerializer(serializers.ModelSerializer):
    """
    Purchase history entry.

    The credential password is only included for the record's own account.
    """

    plan = PlanSummarySerializer(read_only=True)
    location = LocationSummarySerializer(read_only=True)
    password = serializers.SerializerMethodField()

    class Meta:
        model = PurchaseRecord
        fields = [
            "id",
            "account_id",
            "plan",
            "location",
            "credential_id",
            "amount",
            "kind",
            "status",
            "username",
            "password",
            "purchase_date",
            "expires_at",
            "activation_date",
            "payment_reference",
            "payment_method",
        ]
        read_only_fields = fields

    def get_password(self, obj: PurchaseRecord) -> str | None:
        viewer = self.context.get("account")
        if viewer is not None and obj.account_id == viewer.pk:
            return obj.password
        return None


class CredentialLeaseSerializer(serializers.ModelSerializer):
    plan = PlanSummarySerializer(read_only=True)
    location = LocationSummarySerializer(read_only=True)

    class Meta:
        model = CredentialLease
        fields = ["id", "plan", "location", "username", "password", "status", "assigned_at"]
        read_only_fields = fields


class WalletSerializer(serializers.ModelSerializer):
    """Caller's wallet: balance, referral code and role."""

    email = serializers.EmailField(source="user.email", read_only=True)
    currency = serializers.SerializerMethodField()
    referred_by_code = serializers.CharField(
        source="referred_by.referral_code",
        read_only=True,
        default=None,
    )

    class Meta:
        model = Account
        fields = [
            "id",
            "email",
            "balance",
            "currency",
            "referral_code",
            "referred_by_code",
            "role",
            "first_name",
            "last_name",
            "phone",
        ]
        read_only_fields = fields

    def get_currency(self, obj: Account) -> str:
        return settings.BILLING_CURRENCY
