"""
State enums for billing models.

These are Django TextChoices for database storage and admin integration.

State Machines Overview:

CredentialLease Status:
    available → leased (purchase)
    leased → available (administrative release)
    available ↔ disabled (administrative)

PurchaseRecord Status:
    Written once by the purchase or funding path. Only administrative
    correction may move it afterwards.
"""

from django.db import models


class CredentialStatus(models.TextChoices):
    """
    Lifecycle of a pre-provisioned hotspot credential.

    Only AVAILABLE credentials can be leased. A LEASED credential stays
    leased after its purchase expires; nothing reclaims it automatically.

    State Flow:
        AVAILABLE → LEASED → AVAILABLE (release)
        AVAILABLE/LEASED → DISABLED → AVAILABLE (enable)
    """

    AVAILABLE = "available", "Available"
    LEASED = "leased", "Leased"
    DISABLED = "disabled", "Disabled"


class RecordKind(models.TextChoices):
    """What a purchase record documents."""

    PLAN_PURCHASE = "plan_purchase", "Plan Purchase"
    WALLET_TOPUP = "wallet_topup", "Wallet Top-up"
    WALLET_FUNDING = "wallet_funding", "Wallet Funding"

    @classmethod
    def funding_kinds(cls) -> list[str]:
        """Kinds that add money to a wallet."""
        return [cls.WALLET_TOPUP, cls.WALLET_FUNDING]


class RecordStatus(models.TextChoices):
    """
    Outcome recorded on a purchase record.

    The atomic purchase path only ever writes COMPLETED: a purchase that
    fails leaves no record at all. SUCCESS is kept for records imported
    from payment callbacks that report it.
    """

    PENDING = "pending", "Pending"
    COMPLETED = "completed", "Completed"
    FAILED = "failed", "Failed"
    SUCCESS = "success", "Success"


class PlanType(models.TextChoices):
    """Catalog grouping for plans."""

    THREE_HOUR = "3-hour", "3 Hours"
    DAILY = "daily", "Daily"
    WEEKLY = "weekly", "Weekly"
    MONTHLY = "monthly", "Monthly"
