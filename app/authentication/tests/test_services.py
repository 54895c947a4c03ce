"""
Tests for AccountRegistry.

Covers registration, idempotent provisioning, referral code generation and
referral code validation.
"""

import re
from unittest import mock

import pytest

from authentication.models import User
from authentication.services import AccountRegistry
from authentication.tests.factories import UserFactory
from billing.ledger.models import Account, Role
from core.exceptions import ValidationError


class TestRegister:
    """Tests for AccountRegistry.register()."""

    def test_creates_user_and_account(self, db):
        result = AccountRegistry.register(email="new@example.com", password="TestPass123!")

        assert result.success
        account = result.data
        assert account.user.email == "new@example.com"
        assert account.balance == 0
        assert account.role == Role.USER
        assert account.referred_by is None

    def test_links_referrer_when_code_is_valid(self, referrer_account):
        result = AccountRegistry.register(
            email="friend@example.com",
            password="TestPass123!",
            referral_code=referrer_account.referral_code.lower(),
        )

        assert result.success
        assert result.data.referred_by_id == referrer_account.id

    def test_unknown_referral_code_fails_without_creating_user(self, db):
        result = AccountRegistry.register(
            email="friend@example.com",
            password="TestPass123!",
            referral_code="ZZZZZZ",
        )

        assert not result.success
        assert result.error_code == "INVALID_REFERRAL_CODE"
        assert not User.objects.filter(email="friend@example.com").exists()

    def test_duplicate_email_fails(self, referrer_account):
        result = AccountRegistry.register(email="REFERRER@example.com", password="TestPass123!")

        assert not result.success
        assert result.error_code == "EMAIL_EXISTS"

    def test_stores_profile_fields(self, db):
        result = AccountRegistry.register(
            email="named@example.com",
            password="TestPass123!",
            first_name="Ada",
            last_name="Obi",
            phone="+2348000000000",
        )

        account = result.data
        assert (account.first_name, account.last_name, account.phone) == (
            "Ada",
            "Obi",
            "+2348000000000",
        )


class TestProvisionAccount:
    """Tests for AccountRegistry.provision_account()."""

    def test_is_idempotent(self, user):
        first = AccountRegistry.provision_account(user)
        second = AccountRegistry.provision_account(user)

        assert first.pk == second.pk
        assert Account.objects.filter(user=user).count() == 1

    def test_accepts_admin_role(self, user):
        account = AccountRegistry.provision_account(user, role="admin")

        assert account.role == Role.ADMIN

    def test_rejects_unknown_role(self, user):
        with pytest.raises(ValidationError) as exc_info:
            AccountRegistry.provision_account(user, role="superadmin")

        assert exc_info.value.error_code == "UNKNOWN_ROLE"
        assert not Account.objects.filter(user=user).exists()


class TestReferralCodes:
    """Tests for referral code generation and validation."""

    def test_generated_code_is_six_upper_hex(self, db):
        code = AccountRegistry.generate_referral_code()

        assert re.fullmatch(r"[0-9A-F]{6}", code)

    def test_generation_retries_on_collision(self, referrer_account):
        taken = referrer_account.referral_code
        with mock.patch(
            "authentication.services.secrets.token_hex",
            side_effect=[taken.lower(), "abcdef"],
        ):
            code = AccountRegistry.generate_referral_code()

        assert code == "ABCDEF"

    def test_generation_gives_up_after_max_attempts(self, referrer_account):
        taken = referrer_account.referral_code.lower()
        with mock.patch("authentication.services.secrets.token_hex", return_value=taken):
            with pytest.raises(RuntimeError):
                AccountRegistry.generate_referral_code()

    def test_referral_code_exists(self, referrer_account):
        assert AccountRegistry.referral_code_exists(referrer_account.referral_code)
        assert not AccountRegistry.referral_code_exists("000000")
        assert not AccountRegistry.referral_code_exists("")

    def test_own_code_is_not_valid(self, referrer_account):
        code = referrer_account.referral_code

        assert AccountRegistry.validate_referral_code(code, for_user=referrer_account.user) is False
        assert AccountRegistry.validate_referral_code(code, for_user=UserFactory()) is True
        assert AccountRegistry.validate_referral_code("000000") is False
