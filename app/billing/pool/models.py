"""
Credential pool models.

A CredentialLease is one pre-provisioned hotspot login scoped to a
(location, plan) pair. Buying a plan leases exactly one of them; the status
column is managed by django-fsm and only changes through the transitions
below.

Usage:
    from billing.pool.models import CredentialLease

    credential.lease(owner_id=account.id, leased_at=timezone.now())
    credential.save(update_fields=[...])
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.db import models

from django_fsm import FSMField, transition

from billing.state_machines import CredentialStatus
from core.models import BaseModel
from core.model_mixins import UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    import uuid
    from datetime import datetime


class CredentialLease(UUIDPrimaryKeyMixin, BaseModel):
    """
    One leasable hotspot credential.

    State Flow:
        AVAILABLE -> LEASED (purchase)
        LEASED -> AVAILABLE (administrative release)
        AVAILABLE/LEASED -> DISABLED -> AVAILABLE

    Fields:
        location: Site the credential works at (cascade on delete)
        plan: Plan the credential is provisioned for (cascade on delete)
        username, password: Hotspot login handed to the buyer
        status: Current FSM state
        assigned_to: Account currently holding the lease
        assigned_at: When the current lease started
    """

    # Fields touched by every transition; pass to save(update_fields=...)
    TRANSITION_FIELDS = ["status", "assigned_to", "assigned_at", "updated_at"]

    location = models.ForeignKey(
        "billing.Location",
        on_delete=models.CASCADE,
        related_name="credentials",
    )
    plan = models.ForeignKey(
        "billing.Plan",
        on_delete=models.CASCADE,
        related_name="credentials",
    )
    username = models.CharField(max_length=100)
    password = models.CharField(max_length=100)

    status = FSMField(
        default=CredentialStatus.AVAILABLE,
        choices=CredentialStatus.choices,
        db_index=True,
        help_text="Current state of the credential (managed by FSM)",
    )

    assigned_to = models.ForeignKey(
        "billing.Account",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="leased_credentials",
        help_text="Account currently holding this credential",
    )
    assigned_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["created_at"]
        verbose_name = "Credential"
        verbose_name_plural = "Credentials"
        constraints = [
            models.UniqueConstraint(
                fields=["location", "plan", "username"],
                name="billing_credential_unique_per_pool",
            ),
        ]
        indexes = [
            models.Index(
                fields=["location", "plan", "status"],
                name="billing_credential_pool_idx",
            ),
        ]

    def __str__(self) -> str:
        return f"CredentialLease({self.username}, {self.status})"

    # ==========================================================================
    # State Transitions (django-fsm)
    # ==========================================================================

    @transition(
        field=status,
        source=CredentialStatus.AVAILABLE,
        target=CredentialStatus.LEASED,
    )
    def lease(self, owner_id: uuid.UUID, leased_at: datetime):
        """
        Hand the credential to a buyer.

        Transition: AVAILABLE -> LEASED
        """
        self.assigned_to_id = owner_id
        self.assigned_at = leased_at

    @transition(
        field=status,
        source=CredentialStatus.LEASED,
        target=CredentialStatus.AVAILABLE,
    )
    def release(self):
        """
        Return a leased credential to the pool.

        Transition: LEASED -> AVAILABLE
        """
        self.assigned_to = None
        self.assigned_at = None

    @transition(
        field=status,
        source=CredentialStatus.AVAILABLE,
        target=CredentialStatus.DISABLED,
    )
    def disable(self):
        """
        Take an unleased credential out of circulation.

        A leased credential has to be released first.

        Transition: AVAILABLE -> DISABLED
        """
        pass

    @transition(
        field=status,
        source=CredentialStatus.DISABLED,
        target=CredentialStatus.AVAILABLE,
    )
    def enable(self):
        """
        Put a disabled credential back into the pool.

        Transition: DISABLED -> AVAILABLE
        """
        pass
