"""
Purchase orchestrator: the single entry point for buying hotspot access.

A purchase debits the wallet, leases one credential and appends a
purchase record inside one transaction.atomic() block. Either all three
changes commit together or none of them do.

Lock order is fixed: the account row first, then the credential row. Two
buyers racing for the same credential serialize on the credential lock;
the loser sees it leased and gets CredentialUnavailable.

Usage:
    from billing.services import PurchaseOrchestrator

    result = PurchaseOrchestrator.purchase(
        account_id=account.id,
        plan_id=plan.id,
        location_id=location.id,
        credential_id=credential.id,
        amount=plan.price,
        duration_hours=plan.duration_hours,
        idempotency_key=request.headers.get("Idempotency-Key"),
    )
    result.to_dict()
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from django.conf import settings
from django.db import IntegrityError, OperationalError, connection
from django.utils import timezone

from billing.exceptions import (
    BillingError,
    ConcurrencyConflict,
    CredentialUnavailable,
    PurchaseValidationError,
    ReferentialIntegrityViolation,
)
from billing.ledger.services import AccountLedger
from billing.models import Location, Plan, PurchaseRecord
from billing.pool.services import CredentialPool
from billing.services.record_store import PurchaseRecordStore
from billing.state_machines import CredentialStatus, RecordKind, RecordStatus
from billing.types import as_uuid, expiry_after, hours_to_timedelta, parse_amount
from core.services import BaseService

if TYPE_CHECKING:
    from billing.ledger.models import Account


logger = logging.getLogger(__name__)

# lock_not_available, deadlock_detected, serialization_failure
LOCK_CONFLICT_SQLSTATES = frozenset({"55P03", "40P01", "40001"})


# =============================================================================
# Parameter and Result Types
# =============================================================================


@dataclass
class PurchaseParams:
    """
    Validated inputs for one purchase.

    Attributes:
        account_id: Buyer's account
        plan_id: Plan being bought
        location_id: Site the access is for
        credential_id: Credential to lease
        amount: Price to debit
        duration: Access window, already converted from hours
        idempotency_key: Optional client key for safe retries
    """

    account_id: uuid.UUID
    plan_id: uuid.UUID
    location_id: uuid.UUID
    credential_id: uuid.UUID
    amount: Decimal
    duration: timedelta
    idempotency_key: str | None = None

    @classmethod
    def build(
        cls,
        account_id: Any,
        plan_id: Any,
        location_id: Any,
        credential_id: Any,
        amount: Any,
        duration_hours: Any,
        idempotency_key: str | None = None,
    ) -> PurchaseParams:
        """
        Raises:
            PurchaseValidationError: If amount or duration is invalid, or the
                access window would end past the last representable date
            AccountNotFound: If account_id is not a UUID
            ReferentialIntegrityViolation: If another id is not a UUID
        """
        amount = parse_amount(amount)
        duration = hours_to_timedelta(duration_hours)
        expiry_after(timezone.now(), duration)

        ids = {}
        for name, value in (
            ("plan_id", plan_id),
            ("location_id", location_id),
            ("credential_id", credential_id),
        ):
            ids[name] = as_uuid(value)
            if ids[name] is None:
                raise ReferentialIntegrityViolation(
                    f"{name} is not a valid identifier",
                    details={name: str(value)},
                )

        account_uuid = as_uuid(account_id)
        if account_uuid is None:
            # AccountLedger.lock_account reports AccountNotFound for it
            account_uuid = account_id

        if idempotency_key is not None:
            idempotency_key = str(idempotency_key).strip() or None
            if idempotency_key and len(idempotency_key) > 255:
                raise PurchaseValidationError(
                    "idempotency_key must be at most 255 characters",
                )

        return cls(
            account_id=account_uuid,
            amount=amount,
            duration=duration,
            idempotency_key=idempotency_key,
            **ids,
        )


@dataclass(frozen=True)
class PurchaseResult:
    """
    Outcome of a successful purchase.

    username/password are the leased credential; they are not part of
    to_dict() and the API layer decides whether to expose them.
    """

    transaction_id: uuid.UUID
    account_id: uuid.UUID
    plan_id: uuid.UUID
    location_id: uuid.UUID
    credential_id: uuid.UUID
    amount: Decimal
    purchase_date: datetime
    expires_at: datetime
    username: str
    password: str
    replayed: bool = False

    @classmethod
    def from_record(cls, record: PurchaseRecord, replayed: bool = False) -> PurchaseResult:
        return cls(
            transaction_id=record.id,
            account_id=record.account_id,
            plan_id=record.plan_id,
            location_id=record.location_id,
            credential_id=record.credential_id,
            amount=record.amount,
            purchase_date=record.purchase_date,
            expires_at=record.expires_at,
            username=record.username,
            password=record.password,
            replayed=replayed,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": True,
            "transaction_id": str(self.transaction_id),
            "account_id": str(self.account_id),
            "plan_id": str(self.plan_id),
            "location_id": str(self.location_id),
            "credential_id": str(self.credential_id),
            "amount": str(self.amount),
            "expires_at": self.expires_at.isoformat(),
        }


# =============================================================================
# Purchase Orchestrator
# =============================================================================


class PurchaseOrchestrator(BaseService):
    """
    Composes AccountLedger, CredentialPool and PurchaseRecordStore into one
    all-or-nothing purchase.

    Errors are logged and re-raised, never retried here. Lock timeouts,
    deadlocks and serialization failures surface as ConcurrencyConflict.

    All methods are class methods - no instance state is maintained.
    """

    @classmethod
    def purchase(
        cls,
        account_id: Any,
        plan_id: Any,
        location_id: Any,
        credential_id: Any,
        amount: Any,
        duration_hours: Any,
        idempotency_key: str | None = None,
    ) -> PurchaseResult:
        """
        Debit, lease and record in a single transaction.

        Args:
            account_id: Buyer's account
            plan_id: Plan being bought
            location_id: Site the credential belongs to
            credential_id: Credential to lease
            amount: Positive price, at most two decimal places
            duration_hours: Positive hours, may be fractional
            idempotency_key: Optional; a repeat returns the first result

        Returns:
            PurchaseResult for the committed purchase

        Raises:
            PurchaseValidationError: Bad amount, duration or idempotency key
            AccountNotFound: Unknown account
            InsufficientFunds: Balance below amount
            ReferentialIntegrityViolation: Unknown plan, location or
                credential, or a credential outside (location, plan)
            CredentialUnavailable: Credential not available
            ConcurrencyConflict: The database gave up waiting for a lock
        """
        params = PurchaseParams.build(
            account_id=account_id,
            plan_id=plan_id,
            location_id=location_id,
            credential_id=credential_id,
            amount=amount,
            duration_hours=duration_hours,
            idempotency_key=idempotency_key,
        )
        log_context = {
            "account_id": str(params.account_id),
            "plan_id": str(params.plan_id),
            "location_id": str(params.location_id),
            "credential_id": str(params.credential_id),
            "amount": str(params.amount),
        }

        try:
            with cls.atomic():
                cls._bound_lock_wait()
                result = cls._purchase_locked(params)

        except BillingError as e:
            cls.get_logger().warning(
                f"Purchase rejected: {e.error_code}",
                extra={**log_context, "error_code": e.error_code},
            )
            raise

        except OperationalError as e:
            if not cls._is_lock_conflict(e):
                cls.get_logger().error(
                    f"Database error during purchase: {e}",
                    extra=log_context,
                    exc_info=True,
                )
                raise
            cls.get_logger().warning(
                "Purchase aborted on lock conflict",
                extra=log_context,
            )
            raise ConcurrencyConflict(
                "Purchase could not acquire its locks; retry",
                details={"account_id": str(params.account_id)},
            ) from e

        except IntegrityError as e:
            if params.idempotency_key:
                existing = PurchaseRecordStore.by_idempotency_key(params.idempotency_key)
                if existing is not None:
                    return cls._replay(existing, params)
            cls.get_logger().error(
                f"Integrity error during purchase: {e}",
                extra=log_context,
                exc_info=True,
            )
            raise ReferentialIntegrityViolation(
                "Purchase references rows that changed concurrently",
                details=log_context,
            ) from e

        except Exception as e:
            cls.get_logger().error(
                f"Unexpected error during purchase: {e}",
                extra=log_context,
                exc_info=True,
            )
            raise

        if not result.replayed:
            cls.get_logger().info(
                "Purchase completed",
                extra={
                    **log_context,
                    "transaction_id": str(result.transaction_id),
                    "expires_at": result.expires_at.isoformat(),
                },
            )
        return result

    @classmethod
    def _purchase_locked(cls, params: PurchaseParams) -> PurchaseResult:
        # 1-2: account lock and sufficiency
        account = AccountLedger.lock_account(params.account_id)

        if params.idempotency_key:
            existing = PurchaseRecordStore.by_idempotency_key(params.idempotency_key)
            if existing is not None:
                return cls._replay(existing, params)

        AccountLedger.ensure_sufficient(account, params.amount)

        # 3: references, then the credential lock
        cls._ensure_catalog_rows(params)
        credential = CredentialPool.lock_credential(params.credential_id)
        if credential.location_id != params.location_id or credential.plan_id != params.plan_id:
            raise ReferentialIntegrityViolation(
                "Credential does not belong to this location and plan",
                error_code="CREDENTIAL_SCOPE_MISMATCH",
                details={
                    "credential_id": str(credential.id),
                    "location_id": str(params.location_id),
                    "plan_id": str(params.plan_id),
                },
            )

        # 4: status under the lock
        if credential.status != CredentialStatus.AVAILABLE:
            raise CredentialUnavailable(credential.id, credential.status)

        # 5-6: exact expiry, then mutations
        now = timezone.now()
        expires_at = expiry_after(now, params.duration)
        AccountLedger.debit(account.id, params.amount)
        lease = CredentialPool.try_lease(credential.id, account.id, leased_at=now)

        # 7: record
        record = PurchaseRecordStore.append(
            account=account,
            plan_id=params.plan_id,
            location_id=params.location_id,
            credential_id=lease.credential_id,
            amount=params.amount,
            kind=RecordKind.PLAN_PURCHASE,
            status=RecordStatus.COMPLETED,
            username=lease.username,
            password=lease.password,
            purchase_date=now,
            expires_at=expires_at,
            idempotency_key=params.idempotency_key,
        )
        return PurchaseResult.from_record(record)

    @staticmethod
    def _ensure_catalog_rows(params: PurchaseParams) -> None:
        if not Plan.objects.filter(pk=params.plan_id).exists():
            raise ReferentialIntegrityViolation(
                f"Plan {params.plan_id} not found",
                error_code="PLAN_NOT_FOUND",
                details={"plan_id": str(params.plan_id)},
            )
        if not Location.objects.filter(pk=params.location_id).exists():
            raise ReferentialIntegrityViolation(
                f"Location {params.location_id} not found",
                error_code="LOCATION_NOT_FOUND",
                details={"location_id": str(params.location_id)},
            )

    @classmethod
    def _replay(cls, record: PurchaseRecord, params: PurchaseParams) -> PurchaseResult:
        if record.account_id != params.account_id:
            raise PurchaseValidationError(
                "idempotency_key was already used by another account",
                error_code="IDEMPOTENCY_KEY_REUSED",
            )
        cls.get_logger().info(
            "Replayed purchase for idempotency key",
            extra={
                "transaction_id": str(record.id),
                "account_id": str(record.account_id),
            },
        )
        return PurchaseResult.from_record(record, replayed=True)

    # -------------------------------------------------------------------------
    # Wallet funding
    # -------------------------------------------------------------------------

    @classmethod
    def fund_wallet(
        cls,
        account_id: Any,
        amount: Any,
        payment_reference: str,
        kind: str = RecordKind.WALLET_FUNDING,
        payment_method: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> PurchaseRecord:
        """
        Credit an externally confirmed payment to a wallet.

        Idempotent on payment_reference: a second call with the same
        reference returns the first record and credits nothing.

        Raises:
            PurchaseValidationError: Bad amount, kind or reference, or a
                reference already credited to another account
            AccountNotFound: Unknown account
            ConcurrencyConflict: The database gave up waiting for a lock
        """
        amount = parse_amount(amount)
        if kind not in RecordKind.funding_kinds():
            raise PurchaseValidationError(
                f"{kind} is not a funding kind",
                details={"kind": str(kind)},
            )
        payment_reference = (payment_reference or "").strip()
        if not payment_reference:
            raise PurchaseValidationError("payment_reference is required")

        try:
            with cls.atomic():
                cls._bound_lock_wait()
                account = AccountLedger.lock_account(account_id)

                existing = PurchaseRecordStore.by_payment_reference(payment_reference)
                if existing is not None:
                    return cls._existing_funding(existing, account)

                balance = AccountLedger.credit(account.id, amount)
                record = PurchaseRecordStore.append(
                    account=account,
                    amount=amount,
                    kind=kind,
                    status=RecordStatus.COMPLETED,
                    payment_reference=payment_reference,
                    payment_method=payment_method,
                    metadata=metadata or {},
                )
        except OperationalError as e:
            if not cls._is_lock_conflict(e):
                raise
            raise ConcurrencyConflict(
                "Funding could not acquire its locks; retry",
                details={"account_id": str(account_id)},
            ) from e

        cls.get_logger().info(
            "Wallet funded",
            extra={
                "account_id": str(account.id),
                "amount": str(amount),
                "balance": str(balance),
                "payment_reference": payment_reference,
            },
        )
        return record

    @staticmethod
    def _existing_funding(record: PurchaseRecord, account: Account) -> PurchaseRecord:
        if record.account_id != account.id:
            raise PurchaseValidationError(
                "payment_reference was already credited to another account",
                error_code="PAYMENT_REFERENCE_REUSED",
            )
        logger.info(
            "Funding already recorded for payment reference",
            extra={"record_id": str(record.id), "account_id": str(account.id)},
        )
        return record

    # -------------------------------------------------------------------------
    # Lock handling
    # -------------------------------------------------------------------------

    @staticmethod
    def _bound_lock_wait() -> None:
        """Cap how long this transaction waits on row locks (PostgreSQL)."""
        timeout_ms = getattr(settings, "BILLING_LOCK_TIMEOUT_MS", 0)
        if connection.vendor != "postgresql" or not timeout_ms:
            return
        with connection.cursor() as cursor:
            cursor.execute(
                "SELECT set_config('lock_timeout', %s, true)",
                [f"{int(timeout_ms)}ms"],
            )

    @staticmethod
    def _is_lock_conflict(error: OperationalError) -> bool:
        cause = error.__cause__
        sqlstate = getattr(cause, "sqlstate", None) or getattr(cause, "pgcode", None)
        if sqlstate in LOCK_CONFLICT_SQLSTATES:
            return True
        return "database is locked" in str(error) or "database table is locked" in str(error)
