"""
Ledger models: the billing Account that holds a user's wallet balance.

The balance is stored directly on the row and mutated only by
AccountLedger under a row lock. A database check constraint backs the
"never negative" rule so no code path can commit a negative balance.

Usage:
    from billing.ledger.models import Account, Role

    account = Account.objects.get(user=request.user)
    account.balance  # Decimal("1500.00")
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.db import models

from core.exceptions import ValidationError
from core.models import BaseModel
from core.model_mixins import UUIDPrimaryKeyMixin


class Role(models.TextChoices):
    """
    Closed set of roles an account can hold.

    ADMIN sees and manages every row; USER is limited to its own rows and
    to accounts it referred.
    """

    ADMIN = "admin", "Admin"
    USER = "user", "User"

    @classmethod
    def parse(cls, value: str) -> Role:
        """
        Convert untrusted input to a Role.

        Raises:
            ValidationError: If value is not a known role
        """
        try:
            return cls(value)
        except ValueError:
            raise ValidationError(
                f"Unknown role: {value!r}",
                error_code="UNKNOWN_ROLE",
                details={"role": str(value), "allowed": list(cls.values)},
            )


class Account(UUIDPrimaryKeyMixin, BaseModel):
    """
    Wallet and profile data for one user.

    Fields:
        user: Identity this account belongs to
        balance: Prepaid wallet balance, two decimal places
        referral_code: Six upper-case hex characters, unique
        referred_by: Account whose referral code was used at signup
        role: Role used by the AuthorizationGate
        phone, first_name, last_name: Optional contact data

    Note:
        Do not assign to balance and save(); go through AccountLedger so the
        row lock and the sufficiency check are applied.
    """

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="account",
        help_text="Identity this billing account belongs to",
    )

    balance = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Prepaid wallet balance",
    )

    referral_code = models.CharField(
        max_length=12,
        unique=True,
        help_text="Code other users enter at signup to be linked to this account",
    )

    referred_by = models.ForeignKey(
        "self",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="referrals",
        help_text="Account that referred this one",
    )

    role = models.CharField(
        max_length=10,
        choices=Role.choices,
        default=Role.USER,
        help_text="Authorization role",
    )

    phone = models.CharField(max_length=32, blank=True, default="")
    first_name = models.CharField(max_length=150, blank=True, default="")
    last_name = models.CharField(max_length=150, blank=True, default="")

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Account"
        verbose_name_plural = "Accounts"
        constraints = [
            models.CheckConstraint(
                condition=models.Q(balance__gte=0),
                name="billing_account_balance_non_negative",
            ),
        ]

    def __str__(self) -> str:
        return f"Account({self.id}, {self.user_id}, {self.balance})"

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN
