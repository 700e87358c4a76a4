"""
Billing Services for Arrears Platform
Usage in-arrear reconciliation for consumable, tiered usage sections.

Includes:
- UsageReconciliationService: Result-returning entry point for billing runs
- SubscriptionUsageInArrear: per-subscription grouping into usage intervals
- UsageReconciler: per-interval missing item computation
- UsageAggregator: rolled-up usage per sub-period and unit
- Block pricing and billed-amount extraction helpers

This file serves as a re-export hub following feature-based organization.
"""

from __future__ import annotations

from .usage_aggregation import (
    InMemoryUsageLookup,
    RolledUpUsage,
    UsageAggregator,
    UsageLookup,
)
from .usage_intervals import (
    ContiguousUsageInterval,
    SubPeriod,
    build_sub_periods,
)
from .usage_pricing import (
    TierCharge,
    compute_tier_breakdown,
    compute_to_be_billed_amount,
)
from .usage_reconciliation import (
    SubscriptionUsageInArrear,
    UsageReconciler,
    UsageReconciliationService,
    compute_already_billed,
    compute_usage_intervals,
)

__all__ = [
    "ContiguousUsageInterval",
    "InMemoryUsageLookup",
    "RolledUpUsage",
    "SubPeriod",
    "SubscriptionUsageInArrear",
    "TierCharge",
    "UsageAggregator",
    "UsageLookup",
    "UsageReconciler",
    "UsageReconciliationService",
    "build_sub_periods",
    "compute_already_billed",
    "compute_tier_breakdown",
    "compute_to_be_billed_amount",
    "compute_usage_intervals",
]
