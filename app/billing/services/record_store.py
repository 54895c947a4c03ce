"""
PurchaseRecordStore - reads and writes of the purchase log.

append() is called only by PurchaseOrchestrator, inside its transaction.
Everything else here is a read, except correct(), which is the single
administrative path for amending a committed record.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.conf import settings
from django.utils import timezone

from billing.exceptions import PurchaseValidationError
from billing.ledger.models import Account
from billing.models import PurchaseRecord
from billing.state_machines import RecordKind, RecordStatus
from billing.types import as_uuid
from core.exceptions import NotFoundError, PermissionDeniedError
from core.services import BaseService

if TYPE_CHECKING:
    from typing import Any


class PurchaseRecordStore(BaseService):
    """Append-only access to PurchaseRecord rows."""

    @classmethod
    def append(cls, **fields: Any) -> PurchaseRecord:
        """
        Insert one record inside the caller's transaction.

        Raises:
            TransactionManagementError: If called outside transaction.atomic()
        """
        cls.require_atomic("PurchaseRecordStore.append")
        return PurchaseRecord.objects.create(**fields)

    @staticmethod
    def get(record_id: Any) -> PurchaseRecord:
        """
        Raises:
            NotFoundError: If no record has this id
        """
        record_uuid = as_uuid(record_id)
        record = None
        if record_uuid is not None:
            record = PurchaseRecord.objects.filter(pk=record_uuid).first()
        if record is None:
            raise NotFoundError(
                f"Purchase record {record_id} not found",
                error_code="RECORD_NOT_FOUND",
                details={"record_id": str(record_id)},
            )
        return record

    @staticmethod
    def for_account(account_id: Any, limit: int = 100, offset: int = 0) -> list[PurchaseRecord]:
        """Records for an account, newest purchase first.

        limit is capped at settings.BILLING_HISTORY_MAX_LIMIT.
        """
        limit = max(0, min(limit, settings.BILLING_HISTORY_MAX_LIMIT))
        offset = max(0, offset)
        return list(
            PurchaseRecord.objects.filter(account_id=account_id)
            .select_related("plan", "location")
            .order_by("-purchase_date", "-created_at")[offset : offset + limit]
        )

    @staticmethod
    def by_idempotency_key(key: str) -> PurchaseRecord | None:
        return PurchaseRecord.objects.filter(idempotency_key=key).first()

    @staticmethod
    def by_payment_reference(reference: str) -> PurchaseRecord | None:
        return (
            PurchaseRecord.objects.filter(
                payment_reference=reference,
                kind__in=RecordKind.funding_kinds(),
            )
            .order_by("created_at")
            .first()
        )

    @classmethod
    def correct(cls, record_id: Any, actor: Account, **changes: Any) -> PurchaseRecord:
        """
        Amend a committed record.

        Only admins may correct, and only status, metadata and
        activation_date can change. Money and credential fields never do.

        Args:
            record_id: Record to amend
            actor: Account performing the correction
            **changes: Field values to set

        Raises:
            PermissionDeniedError: If actor is not an admin
            PurchaseValidationError: If changes touch other fields or carry
                an unknown status
            NotFoundError: If the record doesn't exist
        """
        if actor is None or not actor.is_admin:
            raise PermissionDeniedError(
                "Only admins may correct purchase records",
                error_code="ADMIN_REQUIRED",
            )

        allowed = PurchaseRecord.CORRECTABLE_FIELDS - {"updated_at"}
        illegal = set(changes) - allowed
        if not changes or illegal:
            raise PurchaseValidationError(
                "Only status, metadata and activation_date can be corrected",
                details={"fields": sorted(illegal)},
            )
        if "status" in changes and changes["status"] not in RecordStatus.values:
            raise PurchaseValidationError(
                f"Unknown status: {changes['status']}",
                details={"status": str(changes["status"])},
            )

        with cls.atomic():
            record = cls.get(record_id)
            record = PurchaseRecord.objects.select_for_update().get(pk=record.pk)
            previous = {field: getattr(record, field) for field in changes}
            for field, value in changes.items():
                setattr(record, field, value)

            corrections = list(record.get_metadata("corrections", []))
            corrections.append(
                {
                    "by": str(actor.id),
                    "at": timezone.now().isoformat(),
                    "fields": sorted(changes),
                }
            )
            record.set_metadata("corrections", corrections)
            record.save(update_fields=[*changes, "metadata", "updated_at"])

        cls.get_logger().info(
            "Corrected purchase record",
            extra={
                "record_id": str(record.id),
                "actor_id": str(actor.id),
                "previous": {k: str(v) for k, v in previous.items()},
            },
        )
        return record
