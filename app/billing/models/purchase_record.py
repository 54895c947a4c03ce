"""
PurchaseRecord model: the append-only log of wallet movements.

A record is written in the same transaction as the balance change it
documents. After that it is immutable apart from administrative
corrections made through PurchaseRecordStore.correct().

Usage:
    from billing.models import PurchaseRecord

    PurchaseRecord.objects.filter(account=account).order_by("-purchase_date")
"""

from __future__ import annotations

from django.db import models
from django.utils import timezone

from billing.state_machines import RecordKind, RecordStatus
from core.exceptions import ConflictError
from core.models import BaseModel
from core.model_mixins import MetadataMixin, UUIDPrimaryKeyMixin


class PurchaseRecord(UUIDPrimaryKeyMixin, MetadataMixin, BaseModel):
    """
    One completed purchase or wallet funding.

    Fields:
        account: Wallet the amount moved on (PROTECT: history is kept)
        plan, location, credential: What was bought; null for fundings
        amount: Amount debited (purchase) or credited (funding)
        kind: What the record documents
        status: Outcome
        username, password: Credential snapshot at purchase time
        purchase_date: When the purchase committed
        expires_at: End of the access window
        activation_date: When the buyer first connected (set by correction)
        payment_reference: External payment id for fundings
        payment_method: Free-text payment channel
        idempotency_key: Client-supplied key; replays return this record

    Note:
        save() on an existing record only accepts update_fields drawn from
        CORRECTABLE_FIELDS; delete() is refused.
    """

    CORRECTABLE_FIELDS = frozenset({"status", "metadata", "activation_date", "updated_at"})

    account = models.ForeignKey(
        "billing.Account",
        on_delete=models.PROTECT,
        related_name="purchase_records",
    )
    plan = models.ForeignKey(
        "billing.Plan",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="purchase_records",
    )
    location = models.ForeignKey(
        "billing.Location",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="purchase_records",
    )
    credential = models.ForeignKey(
        "billing.CredentialLease",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="purchase_records",
    )

    amount = models.DecimalField(max_digits=10, decimal_places=2)
    kind = models.CharField(
        max_length=20,
        choices=RecordKind.choices,
        default=RecordKind.PLAN_PURCHASE,
        db_index=True,
    )
    status = models.CharField(
        max_length=20,
        choices=RecordStatus.choices,
        default=RecordStatus.COMPLETED,
        db_index=True,
    )

    username = models.CharField(max_length=100, blank=True, default="")
    password = models.CharField(max_length=100, blank=True, default="")

    purchase_date = models.DateTimeField(default=timezone.now, db_index=True)
    expires_at = models.DateTimeField(null=True, blank=True)
    activation_date = models.DateTimeField(null=True, blank=True)

    payment_reference = models.CharField(
        max_length=255,
        null=True,
        blank=True,
        db_index=True,
        help_text="External payment id (fundings only)",
    )
    payment_method = models.CharField(max_length=50, null=True, blank=True)

    idempotency_key = models.CharField(
        max_length=255,
        null=True,
        blank=True,
        unique=True,
        help_text="Client-supplied key that makes a purchase safe to retry",
    )

    class Meta:
        ordering = ["-purchase_date"]
        verbose_name = "Purchase Record"
        verbose_name_plural = "Purchase Records"
        indexes = [
            models.Index(
                fields=["account", "purchase_date"],
                name="billing_record_acct_date_idx",
            ),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(amount__gt=0),
                name="billing_purchase_record_amount_positive",
            ),
        ]

    def __str__(self) -> str:
        return f"PurchaseRecord({self.id}, {self.kind}, {self.amount})"

    def save(self, *args, **kwargs):
        """
        Insert, or apply a correction limited to CORRECTABLE_FIELDS.

        Raises:
            ConflictError: On any other update of an existing record
        """
        if not self._state.adding:
            update_fields = kwargs.get("update_fields")
            if not update_fields or not set(update_fields) <= self.CORRECTABLE_FIELDS:
                raise ConflictError(
                    "Purchase records are append-only",
                    error_code="RECORD_IMMUTABLE",
                    details={"record_id": str(self.pk)},
                )
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ConflictError(
            "Purchase records cannot be deleted",
            error_code="RECORD_IMMUTABLE",
            details={"record_id": str(self.pk)},
        )
