"""
Rolled-up usage lookup and aggregation.

The usage collaborator is injected through the ``UsageLookup`` protocol;
``UsageAggregator`` turns its records into one quantity per
(sub-period, unit) pair, the shape the pricer consumes.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Protocol

from .exceptions import InvalidQuantityError
from .usage_intervals import SubPeriod

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RolledUpUsage:
    """Pre-aggregated usage for a subscription and unit over [start, end)"""

    subscription_id: str
    unit: str
    start: date
    end: date
    amount: Decimal


class UsageLookup(Protocol):
    """Rolled-up usage source, typically backed by the metering store."""

    def get_usage_for_subscription_and_unit(
        self,
        subscription_id: str,
        unit: str,
        start_date: date,
        end_date: date,
    ) -> list[RolledUpUsage]: ...


class InMemoryUsageLookup:
    """
    Usage lookup over a fixed list of rolled-up records.

    Returns the records for the subscription and unit whose range lies
    within the requested [start_date, end_date).
    """

    def __init__(self, records: Iterable[RolledUpUsage] = ()) -> None:
        self._records: list[RolledUpUsage] = list(records)

    def add(self, record: RolledUpUsage) -> None:
        self._records.append(record)

    def get_usage_for_subscription_and_unit(
        self,
        subscription_id: str,
        unit: str,
        start_date: date,
        end_date: date,
    ) -> list[RolledUpUsage]:
        return [
            record
            for record in self._records
            if record.subscription_id == subscription_id
            and record.unit == unit
            and record.start >= start_date
            and record.end <= end_date
        ]


class UsageAggregator:
    """Sums rolled-up usage for exactly one sub-period and unit."""

    def __init__(self, usage_lookup: UsageLookup) -> None:
        self._usage_lookup = usage_lookup

    def get_quantity(self, subscription_id: str, unit: str, sub_period: SubPeriod) -> Decimal:
        """
        Total metered quantity for ``unit`` over ``sub_period``.

        Raises:
            InvalidQuantityError: the usage feed produced a negative total
        """
        records = self._usage_lookup.get_usage_for_subscription_and_unit(
            subscription_id, unit, sub_period.start, sub_period.end
        )
        quantity = sum((record.amount for record in records), Decimal("0"))
        if quantity < 0:
            raise InvalidQuantityError(quantity)

        logger.debug(
            f"💰 [Usage] {len(records)} usage record(s) for subscription {subscription_id}, "
            f"unit {unit}, {sub_period}: {quantity}"
        )
        return quantity
