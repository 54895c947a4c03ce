"""
Ledger - wallet balances for billing accounts.

Public API:
    Models:
        Account - Wallet balance, referral linkage and role for one user
        Role - Closed set of account roles

    Service:
        AccountLedger - Balance reads, debit and credit under row locks

Usage:
    from billing.ledger import AccountLedger, InsufficientFunds

    with transaction.atomic():
        try:
            AccountLedger.debit(account.id, Decimal("300.00"))
        except InsufficientFunds as e:
            print(f"Need {e.required}, have {e.available}")
"""

from billing.exceptions import AccountNotFound, InsufficientFunds

from .models import Account, Role
from .services import AccountLedger

__all__ = [
    # Models
    "Account",
    "Role",
    # Service
    "AccountLedger",
    # Exceptions
    "AccountNotFound",
    "InsufficientFunds",
]
