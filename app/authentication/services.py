"""
Authentication services.

This module provides AccountRegistry, which registers users and provisions
their billing Account in the same transaction. Nothing else creates
accounts: there is no post_save signal, so a User created directly (for
example with createsuperuser) has no wallet until provision_account() is
called for it.

Related files:
    - models.py: User
    - billing/ledger/models.py: Account, Role

Security:
    - Passwords hashed with Django's PBKDF2 via UserManager
    - Referral codes come from secrets, not random
"""

from __future__ import annotations

import secrets
from typing import TYPE_CHECKING

from django.db import IntegrityError

from authentication.models import User
from billing.ledger.models import Account, Role
from core.services import BaseService, ServiceResult

if TYPE_CHECKING:
    from typing import Any


class AccountRegistry(BaseService):
    """
    Registration and wallet provisioning.

    Usage:
        from authentication.services import AccountRegistry

        result = AccountRegistry.register(
            email="user@example.com",
            password="s3cret-pass",
            referral_code="A1B2C3",
        )
        if result.success:
            account = result.data
    """

    REFERRAL_CODE_BYTES = 3
    MAX_CODE_ATTEMPTS = 10

    @classmethod
    def register(
        cls,
        email: str,
        password: str,
        referral_code: str | None = None,
        **profile: Any,
    ) -> ServiceResult[Account]:
        """
        Create a user and its billing account.

        Args:
            email: Login email
            password: Raw password (hashed by UserManager)
            referral_code: Optional code of the referring account
            **profile: first_name, last_name, phone

        Returns:
            ServiceResult with the new Account, or failure with
            EMAIL_EXISTS / INVALID_REFERRAL_CODE
        """
        email = User.objects.normalize_email(email)
        if User.objects.filter(email__iexact=email).exists():
            return ServiceResult.failure(
                "Email already registered",
                error_code="EMAIL_EXISTS",
            )

        referrer = None
        if referral_code:
            referrer = Account.objects.filter(referral_code=referral_code.strip().upper()).first()
            if referrer is None:
                return ServiceResult.failure(
                    "Invalid referral code",
                    error_code="INVALID_REFERRAL_CODE",
                    errors={"referral_code": ["Referral code does not exist."]},
                )

        try:
            with cls.atomic():
                user = User.objects.create_user(email=email, password=password)
                account = cls.provision_account(user, referred_by=referrer, **profile)
        except IntegrityError:
            cls.get_logger().warning("Registration raced on email", extra={"email": email})
            return ServiceResult.failure(
                "Email already registered",
                error_code="EMAIL_EXISTS",
            )

        cls.get_logger().info(
            "Registered account",
            extra={
                "account_id": str(account.id),
                "user_id": user.pk,
                "referred_by": str(referrer.id) if referrer else None,
            },
        )
        return ServiceResult.success(account)

    @classmethod
    def provision_account(
        cls,
        user: User,
        referred_by: Account | None = None,
        role: str = Role.USER,
        **profile: Any,
    ) -> Account:
        """
        Return the user's account, creating it if missing.

        Idempotent: a second call returns the existing account unchanged.

        Raises:
            ValidationError: If role is not a known Role
        """
        role = Role.parse(role)
        existing = Account.objects.filter(user=user).first()
        if existing is not None:
            return existing

        with cls.atomic():
            account, created = Account.objects.get_or_create(
                user=user,
                defaults={
                    "referral_code": cls.generate_referral_code(),
                    "referred_by": referred_by,
                    "role": role,
                    "first_name": profile.get("first_name", ""),
                    "last_name": profile.get("last_name", ""),
                    "phone": profile.get("phone", ""),
                },
            )

        if created:
            cls.get_logger().info(
                "Provisioned account",
                extra={"account_id": str(account.id), "user_id": user.pk, "role": role},
            )
        return account

    @classmethod
    def generate_referral_code(cls) -> str:
        """
        Six upper-case hex characters not yet used by any account.

        Raises:
            RuntimeError: If no free code is found after MAX_CODE_ATTEMPTS
        """
        for _ in range(cls.MAX_CODE_ATTEMPTS):
            code = secrets.token_hex(cls.REFERRAL_CODE_BYTES).upper()
            if not Account.objects.filter(referral_code=code).exists():
                return code
        raise RuntimeError("Could not generate a unique referral code")

    @staticmethod
    def referral_code_exists(code: str) -> bool:
        if not code:
            return False
        return Account.objects.filter(referral_code=code.strip().upper()).exists()

    @staticmethod
    def validate_referral_code(code: str, for_user: User | None = None) -> bool:
        """
        Whether code can be used by for_user: it must exist and must not be
        the user's own code.
        """
        if not code:
            return False
        referrer = Account.objects.filter(referral_code=code.strip().upper()).first()
        if referrer is None:
            return False
        if for_user is not None and referrer.user_id == for_user.pk:
            return False
        return True
