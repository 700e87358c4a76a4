"""
Centralized billing configuration for Arrears Platform.

All usage billing constants and configuration should be defined here
so settings are read and validated in one place.
"""

import logging
from enum import Enum

from django.conf import settings

logger = logging.getLogger(__name__)


class UsageItemGrouping(str, Enum):
    """How missing usage items are emitted when a usage prices several units."""

    MERGED = "merged"  # one item per sub-period, all units summed
    PER_UNIT = "per_unit"  # one item per sub-period and unit


# ===============================================================================
# HELPER: SAFE VALUE PARSING
# ===============================================================================

def _get_positive_int(setting_name: str, default: int) -> int:
    """Get a positive integer from settings with validation."""
    value = getattr(settings, setting_name, default)
    try:
        result = int(value)
    except (TypeError, ValueError):
        result = default
    return max(1, result)  # Ensure at least 1


# ===============================================================================
# CURRENCY DEFAULTS
# ===============================================================================

def get_default_currency() -> str:
    return getattr(settings, "BILLING_DEFAULT_CURRENCY", "RON") or "RON"


# ===============================================================================
# USAGE RECONCILIATION CONFIGURATION
# ===============================================================================

def get_usage_item_grouping() -> UsageItemGrouping:
    """Item grouping policy for usages with several units."""
    value = getattr(settings, "BILLING_USAGE_ITEM_GROUPING", UsageItemGrouping.MERGED.value)
    try:
        return UsageItemGrouping(value)
    except ValueError:
        logger.warning(f"⚠️ [Billing] Unknown BILLING_USAGE_ITEM_GROUPING {value!r}, using 'merged'")
        return UsageItemGrouping.MERGED


def get_max_sub_periods() -> int:
    """Upper bound on sub-periods built for one interval."""
    return _get_positive_int("BILLING_USAGE_MAX_SUB_PERIODS", 1200)
