"""
Ledger service layer for wallet balances.

AccountLedger is the only code that writes Account.balance. Mutations must
run inside the caller's transaction.atomic() block: the account row is
locked with select_for_update() and the lock is held until that block
commits or rolls back, so the debit rolls back together with whatever else
the caller did.

Usage:
    from billing.ledger.services import AccountLedger

    with transaction.atomic():
        account = AccountLedger.lock_account(account_id)
        new_balance = AccountLedger.debit(account.id, Decimal("300.00"))
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

from django.db.models import F
from django.utils import timezone

from billing.exceptions import AccountNotFound, InsufficientFunds
from billing.ledger.models import Account
from billing.types import as_uuid, parse_amount
from core.services import BaseService

if TYPE_CHECKING:
    from typing import Any


class AccountLedger(BaseService):
    """
    Service class for balance reads and mutations.

    Key features:
    - Row lock on the account before any balance change
    - Guarded conditional UPDATE (balance >= amount) for debits
    - Refuses to mutate outside an enclosing atomic block

    All methods are class methods - no instance state is maintained.
    """

    @classmethod
    def get_account(cls, account_id: Any) -> Account:
        """
        Get account by ID without locking it.

        Raises:
            AccountNotFound: If account doesn't exist
        """
        account_uuid = as_uuid(account_id)
        account = None
        if account_uuid is not None:
            account = Account.objects.filter(pk=account_uuid).first()
        if account is None:
            raise AccountNotFound(
                f"Account {account_id} not found",
                details={"account_id": str(account_id)},
            )
        return account

    @classmethod
    def get_balance(cls, account_id: Any) -> Decimal:
        """
        Get the committed balance for an account.

        Raises:
            AccountNotFound: If account doesn't exist
        """
        return cls.get_account(account_id).balance

    @classmethod
    def lock_account(cls, account_id: Any) -> Account:
        """
        Take an exclusive row lock on the account and return it.

        The returned instance reflects the committed row at lock time.

        Raises:
            TransactionManagementError: If called outside transaction.atomic()
            AccountNotFound: If account doesn't exist
        """
        cls.require_atomic("AccountLedger.lock_account")

        account_uuid = as_uuid(account_id)
        account = None
        if account_uuid is not None:
            account = Account.objects.select_for_update().filter(pk=account_uuid).first()
        if account is None:
            raise AccountNotFound(
                f"Account {account_id} not found",
                details={"account_id": str(account_id)},
            )
        return account

    @classmethod
    def ensure_sufficient(cls, account: Account, amount: Decimal) -> None:
        """
        Raises:
            InsufficientFunds: If account.balance is below amount
        """
        if account.balance < amount:
            raise InsufficientFunds(
                account.id,
                required=amount,
                available=account.balance,
            )

    @classmethod
    def debit(cls, account_id: Any, amount: Any) -> Decimal:
        """
        Subtract amount from the account balance.

        Args:
            account_id: Account to debit
            amount: Positive amount with at most two decimal places

        Returns:
            The balance after the debit

        Raises:
            TransactionManagementError: If called outside transaction.atomic()
            PurchaseValidationError: If amount is not a positive money value
            AccountNotFound: If account doesn't exist
            InsufficientFunds: If the balance is below amount
        """
        cls.require_atomic("AccountLedger.debit")
        amount = parse_amount(amount)
        account = cls.lock_account(account_id)
        cls.ensure_sufficient(account, amount)

        updated = Account.objects.filter(pk=account.pk, balance__gte=amount).update(
            balance=F("balance") - amount,
            updated_at=timezone.now(),
        )
        if updated != 1:
            account.refresh_from_db(fields=["balance"])
            raise InsufficientFunds(
                account.id,
                required=amount,
                available=account.balance,
            )

        account.refresh_from_db(fields=["balance", "updated_at"])
        cls.get_logger().info(
            "Debited account",
            extra={
                "account_id": str(account.id),
                "amount": str(amount),
                "balance": str(account.balance),
            },
        )
        return account.balance

    @classmethod
    def credit(cls, account_id: Any, amount: Any) -> Decimal:
        """
        Add amount to the account balance.

        Returns:
            The balance after the credit

        Raises:
            TransactionManagementError: If called outside transaction.atomic()
            PurchaseValidationError: If amount is not a positive money value
            AccountNotFound: If account doesn't exist
        """
        cls.require_atomic("AccountLedger.credit")
        amount = parse_amount(amount)
        account = cls.lock_account(account_id)

        Account.objects.filter(pk=account.pk).update(
            balance=F("balance") + amount,
            updated_at=timezone.now(),
        )

        account.refresh_from_db(fields=["balance", "updated_at"])
        cls.get_logger().info(
            "Credited account",
            extra={
                "account_id": str(account.id),
                "amount": str(amount),
                "balance": str(account.balance),
            },
        )
        return account.balance

