"""
Billing events: point-in-time subscription transitions that bound the
intervals reconciled by the usage billing core.
"""

from __future__ import annotations

import zoneinfo
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum

from .usage_catalog import UsageDefinition

MIN_BILL_CYCLE_DAY = 1
MAX_BILL_CYCLE_DAY = 31


class SubscriptionTransition(str, Enum):
    """Kind of subscription transition that produced a billing event."""

    CREATE = "create"
    CHANGE = "change"
    PHASE = "phase"
    CANCEL = "cancel"
    PAUSE = "pause"
    RESUME = "resume"


@dataclass(frozen=True)
class BillingEvent:
    """
    Immutable subscription transition supplied by the billing event source.

    ``usages`` lists the catalog usage sections active from this event on;
    a cancellation carries none.
    """

    effective_date: datetime
    bill_cycle_day_local: int
    time_zone: str
    currency: str
    account_id: str
    bundle_id: str
    subscription_id: str
    plan_name: str
    phase_name: str
    usages: tuple[UsageDefinition, ...] = field(default_factory=tuple)
    transition_type: SubscriptionTransition = SubscriptionTransition.CREATE

    def __post_init__(self) -> None:
        if self.effective_date.tzinfo is None:
            raise ValueError("Billing event effective_date must be timezone-aware")
        if not MIN_BILL_CYCLE_DAY <= self.bill_cycle_day_local <= MAX_BILL_CYCLE_DAY:
            raise ValueError(f"Bill cycle day out of range: {self.bill_cycle_day_local}")

    @property
    def tz(self) -> zoneinfo.ZoneInfo:
        return zoneinfo.ZoneInfo(self.time_zone)

    @property
    def effective_local_date(self) -> date:
        """Effective date seen from the account timezone"""
        return self.effective_date.astimezone(self.tz).date()

    def get_usage(self, usage_name: str) -> UsageDefinition | None:
        for usage in self.usages:
            if usage.name == usage_name:
                return usage
        return None
