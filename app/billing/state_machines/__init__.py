"""
State machine enums for billing models.

This module defines the status and kind enums used by billing models with
django-fsm.
"""

from billing.state_machines.states import (
    CredentialStatus,
    PlanType,
    RecordKind,
    RecordStatus,
)

__all__ = [
    "CredentialStatus",
    "PlanType",
    "RecordKind",
    "RecordStatus",
]
