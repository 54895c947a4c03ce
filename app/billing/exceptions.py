"""
Billing-specific exceptions for wallet and purchase operations.

This module provides a hierarchy of exceptions for the purchase path,
inheriting from the core exception base class for API consistency. Every
one of them aborts the enclosing atomic purchase, so a raised error always
means "nothing changed".

Exception Hierarchy:
    BillingError (base)
    ├── AccountNotFound - Account lookup failures
    ├── InsufficientFunds - Balance below the purchase amount
    ├── CredentialUnavailable - Credential not in the available state
    ├── ReferentialIntegrityViolation - Plan/location/credential mismatch
    ├── PurchaseValidationError - Non-positive amounts, bad durations
    └── ConcurrencyConflict - Lock timeout, deadlock, serialization failure

Usage:
    from billing.exceptions import InsufficientFunds

    if account.balance < amount:
        raise InsufficientFunds(account.id, required=amount, available=account.balance)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.exceptions import BaseApplicationError, ConflictError

if TYPE_CHECKING:
    import uuid
    from decimal import Decimal
    from typing import Any


class BillingError(BaseApplicationError):
    """
    Base exception for all billing operations.

    Example:
        try:
            PurchaseOrchestrator.purchase(...)
        except BillingError as e:
            return Response(e.to_dict(), status=400)
    """

    default_error_code: str = "BILLING_ERROR"


class AccountNotFound(BillingError):
    """
    Raised when a billing account cannot be found.

    Example:
        raise AccountNotFound(
            f"Account {account_id} not found",
            details={"account_id": str(account_id)},
        )
    """

    default_error_code: str = "ACCOUNT_NOT_FOUND"


class InsufficientFunds(BillingError):
    """
    Raised when an account balance is below the amount being debited.

    Attributes:
        account_id: The UUID of the account with insufficient funds
        required: The amount that was required
        available: The balance that was available
    """

    default_error_code: str = "INSUFFICIENT_FUNDS"

    def __init__(
        self,
        account_id: uuid.UUID,
        required: Decimal,
        available: Decimal,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.account_id = account_id
        self.required = required
        self.available = available

        message = f"Insufficient balance. Required: {required}, Available: {available}"

        full_details = {
            "account_id": str(account_id),
            "required": str(required),
            "available": str(available),
        }
        if details:
            full_details.update(details)

        super().__init__(message=message, error_code=error_code, details=full_details)


class CredentialUnavailable(BillingError):
    """
    Raised when a credential cannot be leased or transitioned.

    Attributes:
        credential_id: The credential that was asked for (None when the
            pool for a location/plan pair is exhausted)
        observed_status: The status seen under the row lock
    """

    default_error_code: str = "CREDENTIAL_UNAVAILABLE"

    def __init__(
        self,
        credential_id: uuid.UUID | None,
        observed_status: str | None,
        message: str | None = None,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.credential_id = credential_id
        self.observed_status = observed_status

        if message is None:
            message = f"Credential not available. Status: {observed_status}"

        full_details = {
            "credential_id": str(credential_id) if credential_id else None,
            "observed_status": observed_status,
        }
        if details:
            full_details.update(details)

        super().__init__(message=message, error_code=error_code, details=full_details)


class ReferentialIntegrityViolation(BillingError):
    """
    Raised when a purchase references rows that do not exist or do not
    belong together (a credential from another location or plan).
    """

    default_error_code: str = "REFERENTIAL_INTEGRITY_VIOLATION"


class PurchaseValidationError(BillingError):
    """Raised when purchase or funding input fails service-level validation."""

    default_error_code: str = "PURCHASE_VALIDATION_ERROR"


class ConcurrencyConflict(BillingError, ConflictError):
    """
    Raised when the database gives up on a lock wait.

    Covers lock timeouts, deadlocks and serialization failures. The
    transaction has been rolled back; callers may retry the whole purchase.
    """

    default_error_code: str = "CONCURRENCY_CONFLICT"
