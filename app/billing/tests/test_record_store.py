"""
Tests for PurchaseRecordStore reads, appends and administrative corrections.
"""

import uuid
from datetime import timedelta
from decimal import Decimal

import pytest
from django.db import transaction
from django.test import override_settings
from django.utils import timezone

from billing.exceptions import PurchaseValidationError
from billing.services import PurchaseRecordStore
from billing.state_machines import RecordKind, RecordStatus
from billing.tests.factories import PurchaseRecordFactory
from core.exceptions import NotFoundError, PermissionDeniedError


class TestAppend:
    def test_append_inside_transaction(self, account, plan, location):
        with transaction.atomic():
            record = PurchaseRecordStore.append(
                account=account,
                plan=plan,
                location=location,
                amount=Decimal("300.00"),
            )

        assert PurchaseRecordStore.get(record.id) == record

    @pytest.mark.django_db(transaction=True)
    def test_append_outside_transaction_is_refused(self, account):
        with pytest.raises(transaction.TransactionManagementError):
            PurchaseRecordStore.append(account=account, amount=Decimal("1.00"))


class TestReads:
    def test_get_unknown(self, db):
        with pytest.raises(NotFoundError) as exc_info:
            PurchaseRecordStore.get(uuid.uuid4())

        assert exc_info.value.error_code == "RECORD_NOT_FOUND"

    def test_get_malformed_id(self, db):
        with pytest.raises(NotFoundError):
            PurchaseRecordStore.get("nope")

    def test_for_account_newest_first(self, account):
        now = timezone.now()
        old = PurchaseRecordFactory(account=account, purchase_date=now - timedelta(days=2))
        new = PurchaseRecordFactory(account=account, purchase_date=now)
        PurchaseRecordFactory()

        assert PurchaseRecordStore.for_account(account.id) == [new, old]

    def test_for_account_paginates(self, account):
        now = timezone.now()
        records = [
            PurchaseRecordFactory(account=account, purchase_date=now - timedelta(hours=i))
            for i in range(5)
        ]

        page = PurchaseRecordStore.for_account(account.id, limit=2, offset=2)

        assert page == records[2:4]

    @override_settings(BILLING_HISTORY_MAX_LIMIT=3)
    def test_for_account_limit_is_capped(self, account):
        for _ in range(5):
            PurchaseRecordFactory(account=account)

        assert len(PurchaseRecordStore.for_account(account.id, limit=50)) == 3

    def test_by_idempotency_key(self, db):
        record = PurchaseRecordFactory(idempotency_key="abc-123")

        assert PurchaseRecordStore.by_idempotency_key("abc-123") == record
        assert PurchaseRecordStore.by_idempotency_key("other") is None

    def test_by_payment_reference_only_matches_fundings(self, account):
        PurchaseRecordFactory(account=account, payment_reference="PAY-1")
        funding = PurchaseRecordFactory(
            account=account,
            plan=None,
            location=None,
            kind=RecordKind.WALLET_FUNDING,
            payment_reference="PAY-2",
        )

        assert PurchaseRecordStore.by_payment_reference("PAY-1") is None
        assert PurchaseRecordStore.by_payment_reference("PAY-2") == funding


class TestCorrect:
    """Tests for PurchaseRecordStore.correct()."""

    def test_admin_can_correct_status(self, admin_account):
        record = PurchaseRecordFactory()

        corrected = PurchaseRecordStore.correct(
            record.id, admin_account, status=RecordStatus.FAILED
        )

        corrected.refresh_from_db()
        assert corrected.status == RecordStatus.FAILED
        corrections = corrected.get_metadata("corrections")
        assert len(corrections) == 1
        assert corrections[0]["by"] == str(admin_account.id)
        assert corrections[0]["fields"] == ["status"]

    def test_admin_can_set_activation_date(self, admin_account):
        record = PurchaseRecordFactory()
        activated = timezone.now()

        PurchaseRecordStore.correct(record.id, admin_account, activation_date=activated)

        record.refresh_from_db()
        assert record.activation_date == activated

    def test_corrections_accumulate(self, admin_account):
        record = PurchaseRecordFactory()

        PurchaseRecordStore.correct(record.id, admin_account, status=RecordStatus.FAILED)
        PurchaseRecordStore.correct(record.id, admin_account, status=RecordStatus.COMPLETED)

        record.refresh_from_db()
        assert len(record.get_metadata("corrections")) == 2

    def test_non_admin_is_refused(self, account):
        record = PurchaseRecordFactory(account=account)

        with pytest.raises(PermissionDeniedError) as exc_info:
            PurchaseRecordStore.correct(record.id, account, status=RecordStatus.FAILED)

        assert exc_info.value.error_code == "ADMIN_REQUIRED"
        record.refresh_from_db()
        assert record.status == RecordStatus.COMPLETED

    def test_money_fields_cannot_be_corrected(self, admin_account):
        record = PurchaseRecordFactory()

        with pytest.raises(PurchaseValidationError) as exc_info:
            PurchaseRecordStore.correct(record.id, admin_account, amount=Decimal("1.00"))

        assert exc_info.value.details == {"fields": ["amount"]}

    def test_unknown_status_is_refused(self, admin_account):
        record = PurchaseRecordFactory()

        with pytest.raises(PurchaseValidationError):
            PurchaseRecordStore.correct(record.id, admin_account, status="refunded")

    def test_empty_correction_is_refused(self, admin_account):
        record = PurchaseRecordFactory()

        with pytest.raises(PurchaseValidationError):
            PurchaseRecordStore.correct(record.id, admin_account)

    def test_unknown_record(self, admin_account):
        with pytest.raises(NotFoundError):
            PurchaseRecordStore.correct(uuid.uuid4(), admin_account, status=RecordStatus.FAILED)
