"""
Service-level authorization for billing rows and operations.

This module decides which accounts, catalog rows, credentials and purchase
records a caller may see or act on. It is distinct from the DRF permission
classes in permissions.py, which only handle HTTP-level checks such as
"is authenticated" and "has a billing account".

The gate runs before PurchaseOrchestrator, never inside it. The
orchestrator and the ledger/pool primitives it calls do not filter rows.

Policy:
    Row             | user                                  | admin
    ----------------+---------------------------------------+------
    Account         | read/update own, read referred        | all
    Plan, Location  | read if active                        | all
    CredentialLease | read if assigned to them or available | all
    PurchaseRecord  | read own, read referred accounts'     | all
    purchase        | own account only                      | any

    Callers without an account (anonymous or not yet provisioned) may only
    read active plans and locations. Anything not listed is denied.

Error Codes:
    PERMISSION_DENIED: Operation not allowed on this row
    NOT_ACCOUNT_OWNER: Purchase for an account other than the caller's

Usage:
    AuthorizationGate.ensure_can_purchase(request.user, account_id)
    records = AuthorizationGate.filter_queryset(
        request.user, Operation.READ, PurchaseRecord.objects.all()
    )
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable

from django.db import models
from django.db.models import Q

from billing.ledger.models import Account, Role
from billing.state_machines import CredentialStatus
from billing.types import as_uuid
from core.exceptions import PermissionDeniedError

if TYPE_CHECKING:
    from typing import Any

    from django.db.models import QuerySet

    from authentication.models import User


class Operation(models.TextChoices):
    """Kinds of access the gate decides on."""

    READ = "read", "Read"
    UPDATE = "update", "Update"
    MANAGE = "manage", "Manage"
    PURCHASE = "purchase", "Purchase"


# (role, operation, model_name) -> predicate(actor, row)
# role None is a caller without an account.
RowPredicate = Callable[["Account | None", "Any"], bool]
RowFilter = Callable[["Account | None"], Q]

ROW_POLICIES: dict[tuple[str | None, str, str], RowPredicate] = {
    (Role.USER, Operation.READ, "account"): (
        lambda actor, row: row.pk == actor.pk or row.referred_by_id == actor.pk
    ),
    (Role.USER, Operation.UPDATE, "account"): lambda actor, row: row.pk == actor.pk,
    (Role.USER, Operation.PURCHASE, "account"): lambda actor, row: row.pk == actor.pk,
    (Role.USER, Operation.READ, "plan"): lambda actor, row: row.is_active,
    (Role.USER, Operation.READ, "location"): lambda actor, row: row.is_active,
    (Role.USER, Operation.READ, "credentiallease"): (
        lambda actor, row: row.assigned_to_id == actor.pk
        or row.status == CredentialStatus.AVAILABLE
    ),
    (Role.USER, Operation.READ, "purchaserecord"): (
        lambda actor, row: row.account_id == actor.pk
        or Account.objects.filter(pk=row.account_id, referred_by_id=actor.pk).exists()
    ),
    (None, Operation.READ, "plan"): lambda actor, row: row.is_active,
    (None, Operation.READ, "location"): lambda actor, row: row.is_active,
}

QUERY_POLICIES: dict[tuple[str | None, str, str], RowFilter] = {
    (Role.USER, Operation.READ, "account"): (
        lambda actor: Q(pk=actor.pk) | Q(referred_by_id=actor.pk)
    ),
    (Role.USER, Operation.UPDATE, "account"): lambda actor: Q(pk=actor.pk),
    (Role.USER, Operation.PURCHASE, "account"): lambda actor: Q(pk=actor.pk),
    (Role.USER, Operation.READ, "plan"): lambda actor: Q(is_active=True),
    (Role.USER, Operation.READ, "location"): lambda actor: Q(is_active=True),
    (Role.USER, Operation.READ, "credentiallease"): (
        lambda actor: Q(assigned_to_id=actor.pk) | Q(status=CredentialStatus.AVAILABLE)
    ),
    (Role.USER, Operation.READ, "purchaserecord"): (
        lambda actor: Q(account_id=actor.pk) | Q(account__referred_by_id=actor.pk)
    ),
    (None, Operation.READ, "plan"): lambda actor: Q(is_active=True),
    (None, Operation.READ, "location"): lambda actor: Q(is_active=True),
}


class AuthorizationGate:
    """
    Stateless predicate over (role, operation, row).

    All methods are classmethods and can be called directly without
    instantiation. Admin accounts are allowed everything; every other
    combination must be listed in ROW_POLICIES / QUERY_POLICIES.
    """

    @classmethod
    def actor_account(cls, user: User | None) -> Account | None:
        """The caller's billing account, or None for anonymous/unprovisioned."""
        if user is None or not getattr(user, "is_authenticated", False):
            return None
        return Account.objects.filter(user_id=user.pk).first()

    @classmethod
    def role_of(cls, actor: Account | None) -> str | None:
        if actor is None:
            return None
        return Role.parse(actor.role)

    @classmethod
    def is_allowed(cls, user: User | None, operation: str, row: models.Model) -> bool:
        """
        Check whether the caller may perform operation on row.

        Args:
            user: Authenticated user (or None/AnonymousUser)
            operation: One of Operation
            row: Model instance being accessed

        Returns:
            True if allowed, False otherwise
        """
        actor = cls.actor_account(user)
        role = cls.role_of(actor)
        if role == Role.ADMIN:
            return True

        predicate = ROW_POLICIES.get((role, Operation(operation), row._meta.model_name))
        if predicate is None:
            return False
        return bool(predicate(actor, row))

    @classmethod
    def ensure_allowed(cls, user: User | None, operation: str, row: models.Model) -> None:
        """
        Raises:
            PermissionDeniedError: If is_allowed() is False
        """
        if not cls.is_allowed(user, operation, row):
            raise PermissionDeniedError(
                f"Not allowed to {operation} this {row._meta.verbose_name}",
                details={"operation": str(operation), "resource": row._meta.model_name},
            )

    @classmethod
    def filter_queryset(cls, user: User | None, operation: str, queryset: QuerySet) -> QuerySet:
        """
        Narrow queryset to the rows the caller may perform operation on.

        Unlisted combinations yield an empty queryset.
        """
        actor = cls.actor_account(user)
        role = cls.role_of(actor)
        if role == Role.ADMIN:
            return queryset

        row_filter = QUERY_POLICIES.get(
            (role, Operation(operation), queryset.model._meta.model_name)
        )
        if row_filter is None:
            return queryset.none()
        return queryset.filter(row_filter(actor))

    @classmethod
    def ensure_can_purchase(cls, user: User | None, account_id: Any) -> Account | None:
        """
        Check that the caller may buy for account_id.

        Users may only buy for themselves. Admins may buy for any id; an
        unknown id is left for the orchestrator to report.

        Returns:
            The caller's own account

        Raises:
            PermissionDeniedError: If the caller has no account or targets
                another account without being admin
        """
        actor = cls.actor_account(user)
        role = cls.role_of(actor)
        if actor is None:
            raise PermissionDeniedError(
                "A billing account is required to purchase",
                error_code="ACCOUNT_REQUIRED",
            )
        if role == Role.ADMIN:
            return actor
        if as_uuid(account_id) != actor.pk:
            raise PermissionDeniedError(
                "You may only purchase for your own account",
                error_code="NOT_ACCOUNT_OWNER",
                details={"account_id": str(account_id)},
            )
        return actor
