"""
Factory Boy factories for billing test data.

Usage:
    from billing.tests.factories import (
        AccountFactory,
        CredentialLeaseFactory,
        LocationFactory,
        PlanFactory,
        PurchaseRecordFactory,
    )

    account = AccountFactory(balance=Decimal("1000.00"))
    credential = CredentialLeaseFactory(plan=plan, location=location)
"""

from datetime import timedelta
from decimal import Decimal

import factory
from django.utils import timezone

from authentication.tests.factories import UserFactory
from billing.models import Account, CredentialLease, Location, Plan, PurchaseRecord
from billing.state_machines import (
    CredentialStatus,
    PlanType,
    RecordKind,
    RecordStatus,
)


class AccountFactory(factory.django.DjangoModelFactory):
    """
    Factory for Account instances.

    Writes the balance directly. Production code only changes balances
    through AccountLedger.
    """

    class Meta:
        model = Account

    user = factory.SubFactory(UserFactory)
    balance = Decimal("0.00")
    referral_code = factory.Sequence(lambda n: f"{n + 0xA00000:06X}")
    role = "user"


class PlanFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Plan

    name = factory.Sequence(lambda n: f"Daily Plan {n}")
    duration_hours = 24
    price = Decimal("300.00")
    duration = "24 Hours"
    data_amount = "1GB"
    type = PlanType.DAILY
    is_active = True


class LocationFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Location

    name = factory.Sequence(lambda n: f"Campus Block {n}")
    wifi_name = factory.Sequence(lambda n: f"HOTSPOT-{n}")
    is_active = True


class CredentialLeaseFactory(factory.django.DjangoModelFactory):
    """Factory for CredentialLease instances. Available by default."""

    class Meta:
        model = CredentialLease

    location = factory.SubFactory(LocationFactory)
    plan = factory.SubFactory(PlanFactory)
    username = factory.Sequence(lambda n: f"hs-user-{n}")
    password = factory.Sequence(lambda n: f"pw-{n:04d}")
    status = CredentialStatus.AVAILABLE


class PurchaseRecordFactory(factory.django.DjangoModelFactory):
    """
    Factory for PurchaseRecord instances.

    Inserts a completed plan purchase without touching balances or
    credential status.
    """

    class Meta:
        model = PurchaseRecord

    account = factory.SubFactory(AccountFactory)
    plan = factory.SubFactory(PlanFactory)
    location = factory.SubFactory(LocationFactory)
    amount = Decimal("300.00")
    kind = RecordKind.PLAN_PURCHASE
    status = RecordStatus.COMPLETED
    username = factory.Sequence(lambda n: f"hs-user-{n}")
    password = "secret"
    purchase_date = factory.LazyFunction(timezone.now)
    expires_at = factory.LazyAttribute(lambda o: o.purchase_date + timedelta(hours=24))
