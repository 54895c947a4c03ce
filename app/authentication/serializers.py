"""
DRF serializers for authentication endpoints.

Related files:
    - views.py: RegisterView, ReferralCodeView
    - services.py: AccountRegistry
"""

from __future__ import annotations

from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers


class RegisterSerializer(serializers.Serializer):
    """
    Signup request.

    referral_code is optional; an unknown code fails the registration
    rather than being ignored.
    """

    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, min_length=8)
    referral_code = serializers.CharField(required=False, allow_blank=True, max_length=12)
    first_name = serializers.CharField(required=False, allow_blank=True, max_length=150)
    last_name = serializers.CharField(required=False, allow_blank=True, max_length=150)
    phone = serializers.CharField(required=False, allow_blank=True, max_length=32)

    def validate_password(self, value: str) -> str:
        validate_password(value)
        return value


class RegisteredAccountSerializer(serializers.Serializer):
    account_id = serializers.UUIDField(source="id")
    email = serializers.EmailField(source="user.email")
    referral_code = serializers.CharField()
    balance = serializers.DecimalField(max_digits=10, decimal_places=2)


class ReferralCodeCheckSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=12)
