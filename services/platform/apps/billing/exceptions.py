"""
Usage billing error kinds for Arrears Platform.

All of these signal a data or configuration inconsistency (bad catalog,
bad usage feed, malformed billing history). None are retriable locally;
callers decide whether to skip the subscription, alert, or abort the run.
"""

from __future__ import annotations

from decimal import Decimal


class UsageBillingError(Exception):
    """Base exception for usage in-arrear billing errors."""


class InvalidIntervalError(UsageBillingError):
    """Billing event sequence is empty, unsorted or otherwise malformed."""


class NoBlockForUnitError(UsageBillingError):
    """No tiered block prices the requested unit for the full quantity."""

    def __init__(self, unit: str, remaining: Decimal | None = None) -> None:
        self.unit = unit
        self.remaining = remaining
        if remaining is None:
            message = f"No tiered block defined for unit '{unit}'"
        else:
            message = f"Tiers for unit '{unit}' exhausted with {remaining} units left unpriced"
        super().__init__(message)


class NoPriceForCurrencyError(UsageBillingError):
    """Block price has no value for the requested currency."""

    def __init__(self, currency: str) -> None:
        self.currency = currency
        super().__init__(f"No price defined for currency '{currency}'")


class InvalidQuantityError(UsageBillingError):
    """Usage quantity is negative or too large to price."""

    def __init__(self, quantity: Decimal, reason: str | None = None) -> None:
        self.quantity = quantity
        self.reason = reason
        if reason is None:
            message = f"Usage quantity must be non-negative, got {quantity}"
        else:
            message = f"Usage quantity {quantity} cannot be priced: {reason}"
        super().__init__(message)
