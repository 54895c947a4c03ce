"""
Value helpers shared by the ledger, the pool and the orchestrator.

Money is handled as Decimal with two places, never float. Durations are
converted to timedelta through integral microseconds so that fractional
hours produce an exact expiry.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal, InvalidOperation
from typing import Any

from billing.exceptions import PurchaseValidationError

CENT = Decimal("0.01")
MICROSECONDS_PER_HOUR = Decimal(3_600_000_000)


def parse_amount(value: Any, field: str = "amount") -> Decimal:
    """
    Validate a monetary amount and return it quantized to two places.

    Raises:
        PurchaseValidationError: If the value is not a finite positive
            number or has more than two decimal places
    """
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise PurchaseValidationError(
            f"{field} must be a decimal number",
            details={field: str(value)},
        )

    if not amount.is_finite() or amount <= 0:
        raise PurchaseValidationError(
            f"{field} must be positive",
            details={field: str(value)},
        )

    if amount != amount.quantize(CENT):
        raise PurchaseValidationError(
            f"{field} must have at most two decimal places",
            details={field: str(value)},
        )

    return amount.quantize(CENT)


def hours_to_timedelta(hours: Any) -> timedelta:
    """
    Convert a positive number of hours to an exact timedelta.

    Accepts ints, Decimals and decimal strings. Floats go through str() so
    1.5 becomes Decimal("1.5"), not its binary approximation.

    Raises:
        PurchaseValidationError: If hours is not positive or does not map
            to a whole number of microseconds
    """
    try:
        value = Decimal(str(hours))
    except (InvalidOperation, TypeError, ValueError):
        raise PurchaseValidationError(
            "duration_hours must be a number",
            details={"duration_hours": str(hours)},
        )

    if not value.is_finite() or value <= 0:
        raise PurchaseValidationError(
            "duration_hours must be positive",
            details={"duration_hours": str(hours)},
        )

    microseconds = value * MICROSECONDS_PER_HOUR
    if microseconds != microseconds.to_integral_value():
        raise PurchaseValidationError(
            "duration_hours is not representable in whole microseconds",
            details={"duration_hours": str(hours)},
        )

    try:
        return timedelta(microseconds=int(microseconds))
    except OverflowError:
        raise PurchaseValidationError(
            "duration_hours is too large",
            details={"duration_hours": str(hours)},
        )


def expiry_after(start: datetime, duration: timedelta) -> datetime:
    """
    Return start + duration.

    Raises:
        PurchaseValidationError: If the result is past the last representable date
    """
    try:
        return start + duration
    except OverflowError:
        raise PurchaseValidationError(
            "duration_hours ends past the last representable date",
            details={"duration_hours": str(duration / timedelta(hours=1))},
        )


def as_uuid(value: Any) -> uuid.UUID | None:
    """Return value as a UUID, or None when it is not one."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError, AttributeError):
        return None


@dataclass(frozen=True)
class LeaseConfirmation:
    """
    Proof that a credential was leased inside the current transaction.

    Attributes:
        credential_id: Leased credential
        username: Hotspot login handed to the buyer
        password: Hotspot password handed to the buyer
        leased_at: Timestamp written to the credential row
    """

    credential_id: uuid.UUID
    username: str
    password: str
    leased_at: datetime
