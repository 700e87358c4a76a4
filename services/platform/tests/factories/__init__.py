# ===============================================================================
# TEST FACTORIES - CENTRALIZED TEST DATA GENERATION
# ===============================================================================
"""
Factory module for generating usage billing test data.

Usage:
    from tests.factories import create_block, create_tier, create_usage, create_event

    usage = create_usage(create_tier(create_block("unit", 100, 10, 1)))
    event = create_event(date(2014, 3, 20), usage)
"""

from tests.factories.usage_factories import (
    ACCOUNT_ID,
    BCD,
    BUNDLE_ID,
    INVOICE_ID,
    PHASE_NAME,
    PLAN_NAME,
    SUBSCRIPTION_ID,
    BillingEventRequest,
    create_billing_event,
    create_block,
    create_event,
    create_fixed_item,
    create_rolled_up_usage,
    create_tier,
    create_usage,
    create_usage_item,
)

__all__ = [
    "ACCOUNT_ID",
    "BCD",
    "BUNDLE_ID",
    "INVOICE_ID",
    "PHASE_NAME",
    "PLAN_NAME",
    "SUBSCRIPTION_ID",
    "BillingEventRequest",
    "create_billing_event",
    "create_block",
    "create_event",
    "create_fixed_item",
    "create_rolled_up_usage",
    "create_tier",
    "create_usage",
    "create_usage_item",
]
