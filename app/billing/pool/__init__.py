"""
Pool - finite sets of leasable hotspot credentials per (location, plan).

Public API:
    Models:
        CredentialLease - One pre-provisioned credential (FSM status)

    Service:
        CredentialPool - Lease, release, disable and enable under row locks

Usage:
    from billing.pool import CredentialPool, CredentialUnavailable

    with transaction.atomic():
        try:
            lease = CredentialPool.try_lease(credential_id, account.id)
        except CredentialUnavailable as e:
            print(f"Credential is {e.observed_status}")
"""

from billing.exceptions import CredentialUnavailable

from .models import CredentialLease
from .services import CredentialPool

__all__ = [
    "CredentialLease",
    "CredentialPool",
    "CredentialUnavailable",
]
