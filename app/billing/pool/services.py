"""
Credential pool service.

CredentialPool is the only code that changes a credential's status. Every
mutation locks the credential row first and must run inside the caller's
transaction.atomic() block. Callers that also touch an account must lock
the account before the credential.

Usage:
    from billing.pool.services import CredentialPool

    with transaction.atomic():
        AccountLedger.lock_account(account_id)
        lease = CredentialPool.try_lease(credential_id, account_id)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.utils import timezone

from django_fsm import can_proceed

from billing.exceptions import CredentialUnavailable, ReferentialIntegrityViolation
from billing.pool.models import CredentialLease
from billing.state_machines import CredentialStatus
from billing.types import LeaseConfirmation, as_uuid
from core.services import BaseService

if TYPE_CHECKING:
    from datetime import datetime
    from typing import Any


class CredentialPool(BaseService):
    """
    Service class for leasing and administering credentials.

    Key features:
    - Row lock on the credential before any status change
    - django-fsm transitions guard which status changes are legal
    - CredentialUnavailable reports the status observed under the lock
    """

    @classmethod
    def lock_credential(cls, credential_id: Any) -> CredentialLease:
        """
        Take an exclusive row lock on the credential and return it.

        Raises:
            TransactionManagementError: If called outside transaction.atomic()
            ReferentialIntegrityViolation: If the credential doesn't exist
        """
        cls.require_atomic("CredentialPool.lock_credential")

        credential_uuid = as_uuid(credential_id)
        credential = None
        if credential_uuid is not None:
            credential = (
                CredentialLease.objects.select_for_update()
                .filter(pk=credential_uuid)
                .first()
            )
        if credential is None:
            raise ReferentialIntegrityViolation(
                f"Credential {credential_id} not found",
                error_code="CREDENTIAL_NOT_FOUND",
                details={"credential_id": str(credential_id)},
            )
        return credential

    @classmethod
    def try_lease(
        cls,
        credential_id: Any,
        owner_account_id: Any,
        leased_at: datetime | None = None,
    ) -> LeaseConfirmation:
        """
        Lease an available credential to owner.

        Args:
            credential_id: Credential to lease
            owner_account_id: Account receiving the lease (already locked by
                the caller)
            leased_at: Lease timestamp; defaults to now

        Raises:
            TransactionManagementError: If called outside transaction.atomic()
            ReferentialIntegrityViolation: If the credential doesn't exist
            CredentialUnavailable: If the credential is not available
        """
        credential = cls.lock_credential(credential_id)
        if credential.status != CredentialStatus.AVAILABLE:
            raise CredentialUnavailable(credential.id, credential.status)

        leased_at = leased_at or timezone.now()
        credential.lease(owner_id=owner_account_id, leased_at=leased_at)
        credential.save(update_fields=CredentialLease.TRANSITION_FIELDS)

        cls.get_logger().info(
            "Leased credential",
            extra={
                "credential_id": str(credential.id),
                "account_id": str(owner_account_id),
            },
        )
        return LeaseConfirmation(
            credential_id=credential.id,
            username=credential.username,
            password=credential.password,
            leased_at=leased_at,
        )

    @classmethod
    def _apply(cls, credential_id: Any, transition_name: str) -> CredentialLease:
        credential = cls.lock_credential(credential_id)
        method = getattr(credential, transition_name)
        if not can_proceed(method):
            raise CredentialUnavailable(
                credential.id,
                credential.status,
                message=f"Cannot {transition_name} credential in status {credential.status}",
            )

        previous = credential.status
        method()
        credential.save(update_fields=CredentialLease.TRANSITION_FIELDS)

        cls.get_logger().info(
            f"Credential {transition_name}",
            extra={
                "credential_id": str(credential.id),
                "from_status": previous,
                "to_status": credential.status,
            },
        )
        return credential

    @classmethod
    def release(cls, credential_id: Any) -> CredentialLease:
        """
        Return a leased credential to the pool.

        Raises:
            CredentialUnavailable: If the credential is not leased
        """
        return cls._apply(credential_id, "release")

    @classmethod
    def disable(cls, credential_id: Any) -> CredentialLease:
        """
        Take a credential out of circulation.

        Raises:
            CredentialUnavailable: If the credential is not available
        """
        return cls._apply(credential_id, "disable")

    @classmethod
    def enable(cls, credential_id: Any) -> CredentialLease:
        """
        Put a disabled credential back into the pool.

        Raises:
            CredentialUnavailable: If the credential is not disabled
        """
        return cls._apply(credential_id, "enable")

    @staticmethod
    def next_available(location_id: Any, plan_id: Any) -> CredentialLease | None:
        """
        Oldest available credential for a (location, plan) pair.

        Not locked: the caller still goes through try_lease, which re-checks
        the status under the row lock.
        """
        return (
            CredentialLease.objects.filter(
                location_id=location_id,
                plan_id=plan_id,
                status=CredentialStatus.AVAILABLE,
            )
            .order_by("created_at", "id")
            .first()
        )

    @staticmethod
    def available_count(location_id: Any, plan_id: Any) -> int:
        """Number of available credentials for a (location, plan) pair."""
        return CredentialLease.objects.filter(
            location_id=location_id,
            plan_id=plan_id,
            status=CredentialStatus.AVAILABLE,
        ).count()
