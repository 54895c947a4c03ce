"""
Billing models package.

Models are defined across submodules and re-exported here so Django
registers all of them with the billing app.

Usage:
    from billing.models import Account, CredentialLease, Location, Plan, PurchaseRecord
"""

from billing.ledger.models import Account, Role
from billing.models.catalog import Location, Plan
from billing.models.purchase_record import PurchaseRecord
from billing.pool.models import CredentialLease

__all__ = [
    "Account",
    "CredentialLease",
    "Location",
    "Plan",
    "PurchaseRecord",
    "Role",
]
