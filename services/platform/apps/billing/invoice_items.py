"""
Invoice items read and produced by usage reconciliation.

Items are a tagged variant: ``item_type`` is the discriminant, and only
``InvoiceItemType.USAGE`` items carry a usage name. Items are immutable
once created; the core reads existing ones and creates new ones.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from django.utils import timezone


class InvoiceItemType(str, Enum):
    USAGE = "usage"
    FIXED = "fixed"
    RECURRING = "recurring"
    ADJUSTMENT = "adjustment"
    CREDIT = "credit"


@dataclass(frozen=True)
class InvoiceItem:
    """Single invoice item as held by the invoice item store."""

    item_type: InvoiceItemType
    invoice_id: str | None
    account_id: str
    bundle_id: str
    subscription_id: str
    plan_name: str
    phase_name: str
    start_date: date
    end_date: date | None
    amount: Decimal
    currency: str
    usage_name: str | None = None
    unit: str | None = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=timezone.now)

    @property
    def is_usage(self) -> bool:
        return self.item_type == InvoiceItemType.USAGE

    def covers(self, start: date, end: date) -> bool:
        """True when the item's [start_date, end_date) is exactly [start, end)"""
        return self.start_date == start and self.end_date == end

    def describe(self) -> str:
        label = self.usage_name or self.phase_name
        if self.end_date is None:
            return f"{label} ({self.start_date.isoformat()}): {self.amount} {self.currency}"
        return f"{label} ({self.start_date.isoformat()} - {self.end_date.isoformat()}): {self.amount} {self.currency}"


def usage_invoice_item(  # noqa: PLR0913
    *,
    invoice_id: str | None,
    account_id: str,
    bundle_id: str,
    subscription_id: str,
    plan_name: str,
    phase_name: str,
    usage_name: str,
    start_date: date,
    end_date: date,
    amount: Decimal,
    currency: str,
    unit: str | None = None,
) -> InvoiceItem:
    """Build a usage invoice item for an exact [start_date, end_date) range."""
    if end_date <= start_date:
        raise ValueError(f"Usage item range must not be empty: {start_date} - {end_date}")
    return InvoiceItem(
        item_type=InvoiceItemType.USAGE,
        invoice_id=invoice_id,
        account_id=account_id,
        bundle_id=bundle_id,
        subscription_id=subscription_id,
        plan_name=plan_name,
        phase_name=phase_name,
        usage_name=usage_name,
        unit=unit,
        start_date=start_date,
        end_date=end_date,
        amount=amount,
        currency=currency,
    )


def fixed_price_invoice_item(  # noqa: PLR0913
    *,
    invoice_id: str | None,
    account_id: str,
    bundle_id: str,
    subscription_id: str,
    plan_name: str,
    phase_name: str,
    start_date: date,
    amount: Decimal,
    currency: str,
) -> InvoiceItem:
    return InvoiceItem(
        item_type=InvoiceItemType.FIXED,
        invoice_id=invoice_id,
        account_id=account_id,
        bundle_id=bundle_id,
        subscription_id=subscription_id,
        plan_name=plan_name,
        phase_name=phase_name,
        start_date=start_date,
        end_date=None,
        amount=amount,
        currency=currency,
    )
