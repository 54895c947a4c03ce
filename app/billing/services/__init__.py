"""
Billing services.

Usage:
    from billing.services import PurchaseOrchestrator, PurchaseRecordStore
"""

from billing.services.purchase_orchestrator import (
    PurchaseOrchestrator,
    PurchaseParams,
    PurchaseResult,
)
from billing.services.record_store import PurchaseRecordStore

__all__ = [
    "PurchaseOrchestrator",
    "PurchaseParams",
    "PurchaseRecordStore",
    "PurchaseResult",
]
