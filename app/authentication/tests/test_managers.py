"""
Tests for UserManager.

Related files:
    - managers.py: Implementation under test
"""

import pytest
from django.contrib.auth.hashers import check_password

from authentication.models import User


class TestUserManagerCreateUser:
    """Tests for UserManager.create_user() method."""

    def test_creates_user_with_email_and_password(self, db):
        """
        Given valid email and password
        When create_user is called
        Then a user is created with those credentials
        """
        user = User.objects.create_user(email="mgr@example.com", password="SecurePass123!")

        assert user.pk is not None
        assert user.email == "mgr@example.com"
        assert user.check_password("SecurePass123!") is True

    def test_normalizes_email_domain_to_lowercase(self, db):
        """Local part case is preserved, domain is lowercased."""
        user = User.objects.create_user(email="Test.User@EXAMPLE.COM", password="TestPass123!")

        assert user.email == "Test.User@example.com"

    @pytest.mark.parametrize("email", ["", None])
    def test_raises_valueerror_without_email(self, db, email):
        with pytest.raises(ValueError) as exc_info:
            User.objects.create_user(email=email, password="TestPass123!")

        assert "Email field must be set" in str(exc_info.value)

    def test_creates_user_without_password(self, db):
        """
        Given an email but no password
        When create_user is called
        Then user is created with unusable password
        """
        user = User.objects.create_user(email="nopass@example.com", password=None)

        assert user.has_usable_password() is False
        assert user.check_password("") is False

    def test_sets_default_flags_for_regular_user(self, db):
        user = User.objects.create_user(email="regular@example.com", password="TestPass123!")

        assert user.is_staff is False
        assert user.is_superuser is False
        assert user.is_active is True

    def test_password_is_properly_hashed(self, db):
        user = User.objects.create_user(email="hash@example.com", password="SecurePass123!")

        assert user.password != "SecurePass123!"
        assert "$" in user.password, "Password should be in Django hash format"
        assert check_password("SecurePass123!", user.password) is True

    def test_does_not_provision_billing_account(self, db):
        """Accounts are only created by AccountRegistry."""
        user = User.objects.create_user(email="bare@example.com", password="TestPass123!")

        assert user.has_account is False


class TestUserManagerCreateSuperuser:
    """Tests for UserManager.create_superuser() method."""

    def test_creates_superuser_with_flags(self, db):
        user = User.objects.create_superuser(email="root@example.com", password="AdminPass123!")

        assert user.is_staff is True
        assert user.is_superuser is True
        assert user.email_verified is True

    @pytest.mark.parametrize("flag", ["is_staff", "is_superuser"])
    def test_rejects_superuser_without_flag(self, db, flag):
        with pytest.raises(ValueError) as exc_info:
            User.objects.create_superuser(
                email="bad@example.com", password="AdminPass123!", **{flag: False}
            )

        assert f"Superuser must have {flag}=True." in str(exc_info.value)
