"""
Usage In-Arrear Reconciliation Service for Arrears Platform
Computes the usage invoice items still missing for a subscription.

This module handles:
- Already-billed extraction from existing invoice items (exact range match)
- Per sub-period reconciliation of metered usage against billed amounts
- Grouping a subscription's billing events into per-usage intervals
- A Result-returning facade for the outer billing run
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable, Sequence
from datetime import date
from decimal import Decimal

from django.utils import timezone

from apps.common.logging import clear_run_id, get_logger, get_run_id, set_run_id
from apps.common.types import Err, Ok, Result

from . import config as billing_config
from .billing_events import BillingEvent
from .config import UsageItemGrouping
from .exceptions import InvalidIntervalError, UsageBillingError
from .invoice_items import InvoiceItem, usage_invoice_item
from .usage_aggregation import UsageAggregator, UsageLookup
from .usage_catalog import UsageDefinition
from .usage_intervals import ContiguousUsageInterval, SubPeriod, check_events_ordered
from .usage_pricing import compute_to_be_billed_amount

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


# ===============================================================================
# BILLED-AMOUNT EXTRACTION
# ===============================================================================

def compute_already_billed(
    start: date,
    end: date,
    usage_name: str,
    existing_items: Iterable[InvoiceItem],
    unit: str | None = None,
) -> Decimal:
    """
    Amount already invoiced for ``usage_name`` over exactly [start, end).

    Items for any other range count for nothing, even when they overlap:
    usage is billed per exact sub-period, never by prorated overlap.
    """
    return sum(
        (
            item.amount
            for item in existing_items
            if item.is_usage
            and item.usage_name == usage_name
            and item.covers(start, end)
            and (unit is None or item.unit == unit)
        ),
        ZERO,
    )


# ===============================================================================
# PER-INTERVAL RECONCILIATION
# ===============================================================================

class UsageReconciler:
    """
    Reconciles one built usage interval against existing invoice items.

    Each sub-period is priced from its metered usage, the already-billed
    amount is subtracted, and a new usage item is emitted for any
    positive remainder. Over-billing (negative remainder) emits nothing.
    """

    def __init__(
        self,
        interval: ContiguousUsageInterval,
        aggregator: UsageAggregator,
        invoice_id: str | None = None,
        grouping: UsageItemGrouping | None = None,
    ) -> None:
        self.interval = interval
        self.aggregator = aggregator
        self.invoice_id = invoice_id
        self.grouping = grouping or billing_config.get_usage_item_grouping()
        self.log = get_logger(
            __name__,
            subscription_id=interval.subscription_id,
            usage_name=interval.usage.name,
        )

    def _usage_for(self, event: BillingEvent) -> UsageDefinition:
        # Tiers valid as of the governing event; catalog changes never apply retroactively
        return event.get_usage(self.interval.usage.name) or self.interval.usage

    def compute_to_be_billed(self, sub_period: SubPeriod, unit: str) -> Decimal:
        event = self.interval.governing_event(sub_period)
        quantity = self.aggregator.get_quantity(event.subscription_id, unit, sub_period)
        return compute_to_be_billed_amount(quantity, unit, self._usage_for(event).tiers, event.currency)

    def compute_missing_items(self, existing_items: Sequence[InvoiceItem]) -> list[InvoiceItem]:
        """
        New usage items covering the unbilled remainder, ordered by sub-period.

        Any billing error aborts the whole computation; no partial list is
        ever returned. Under per-unit grouping, items without a unit (written
        under merged grouping) are applied to the units in catalog order.
        """
        usage_name = self.interval.usage.name
        merged_items = [item for item in existing_items if item.unit is None]
        missing: list[InvoiceItem] = []

        for sub_period in self.interval.sub_periods:
            event = self.interval.governing_event(sub_period)
            units = self._usage_for(event).units

            if self.grouping == UsageItemGrouping.PER_UNIT:
                # Items written under merged grouping carry no unit; spread them over units in order
                merged_credit = compute_already_billed(sub_period.start, sub_period.end, usage_name, merged_items)
                for index, unit in enumerate(units):
                    to_be_billed = self.compute_to_be_billed(sub_period, unit)
                    already_billed = compute_already_billed(
                        sub_period.start, sub_period.end, usage_name, existing_items, unit=unit
                    )
                    if index == len(units) - 1:
                        applied = merged_credit
                    else:
                        applied = min(merged_credit, max(to_be_billed - already_billed, ZERO))
                    merged_credit -= applied
                    item = self._missing_item(event, sub_period, to_be_billed, already_billed + applied, unit)
                    if item is not None:
                        missing.append(item)
                continue

            to_be_billed = sum((self.compute_to_be_billed(sub_period, unit) for unit in units), ZERO)
            already_billed = compute_already_billed(sub_period.start, sub_period.end, usage_name, existing_items)
            item = self._missing_item(event, sub_period, to_be_billed, already_billed, None)
            if item is not None:
                missing.append(item)

        return missing

    def _missing_item(
        self,
        event: BillingEvent,
        sub_period: SubPeriod,
        to_be_billed: Decimal,
        already_billed: Decimal,
        unit: str | None,
    ) -> InvoiceItem | None:
        delta = to_be_billed - already_billed
        self.log.debug(
            f"💰 [Usage] {sub_period}: to be billed {to_be_billed}, already billed {already_billed}",
            unit=unit,
        )

        if delta < 0:
            self.log.warning(
                f"⚠️ [Usage] Over-billing detected for {sub_period}: billed {already_billed}, "
                f"usage prices to {to_be_billed}",
                unit=unit,
            )
        if delta <= 0:
            return None

        return usage_invoice_item(
            invoice_id=self.invoice_id,
            account_id=event.account_id,
            bundle_id=event.bundle_id,
            subscription_id=event.subscription_id,
            plan_name=event.plan_name,
            phase_name=event.phase_name,
            usage_name=self.interval.usage.name,
            unit=unit,
            start_date=sub_period.start,
            end_date=sub_period.end,
            amount=delta,
            currency=event.currency,
        )


# ===============================================================================
# SUBSCRIPTION-LEVEL GROUPING
# ===============================================================================

def compute_usage_intervals(
    billing_events: Sequence[BillingEvent],
    target_date: date,
) -> list[ContiguousUsageInterval]:
    """
    Split a subscription's billing history into per-usage contiguous intervals.

    A consumable in-arrear usage opens an interval at the first event that
    lists it and closes it at the first later event that does not (the
    closing event bounds a closed interval). Intervals still open after
    the last event are built open against ``target_date``.

    Events dated after ``target_date`` are not walked: a future cancellation
    or plan change leaves the interval open so the period still running on
    ``target_date`` is not billed early.
    """
    if not billing_events:
        raise InvalidIntervalError("At least one billing event is required to compute usage intervals")
    check_events_ordered(billing_events)

    tz = billing_events[0].tz
    elapsed = [event for event in billing_events if event.effective_date.astimezone(tz).date() <= target_date]
    if len(elapsed) < len(billing_events):
        logger.debug(
            f"💰 [Usage] Ignoring {len(billing_events) - len(elapsed)} billing event(s) after {target_date}"
        )

    intervals: list[ContiguousUsageInterval] = []
    open_events: dict[str, list[BillingEvent]] = {}
    open_usages: dict[str, UsageDefinition] = {}

    for event in elapsed:
        active = {usage.name: usage for usage in event.usages if usage.is_consumable_in_arrear}

        for usage_name in [name for name in open_events if name not in active]:
            events = [*open_events.pop(usage_name), event]
            intervals.append(
                ContiguousUsageInterval.build(open_usages.pop(usage_name), events, target_date, closed_interval=True)
            )

        for usage_name, usage in active.items():
            open_events.setdefault(usage_name, []).append(event)
            open_usages.setdefault(usage_name, usage)

    for usage_name, events in open_events.items():
        intervals.append(
            ContiguousUsageInterval.build(open_usages[usage_name], events, target_date, closed_interval=False)
        )

    return sorted(intervals, key=lambda interval: (interval.start_date, interval.usage.name))


class SubscriptionUsageInArrear:
    """
    All consumable in-arrear usage of one subscription up to a target date.
    """

    def __init__(
        self,
        billing_events: Sequence[BillingEvent],
        target_date: date,
        aggregator: UsageAggregator,
        invoice_id: str | None = None,
        grouping: UsageItemGrouping | None = None,
    ) -> None:
        self.target_date = target_date
        self.aggregator = aggregator
        self.invoice_id = invoice_id
        self.grouping = grouping
        self.intervals = compute_usage_intervals(billing_events, target_date)

    def compute_missing_usage_items(self, existing_items: Sequence[InvoiceItem]) -> list[InvoiceItem]:
        missing: list[InvoiceItem] = []
        for interval in self.intervals:
            reconciler = UsageReconciler(interval, self.aggregator, self.invoice_id, self.grouping)
            missing.extend(reconciler.compute_missing_items(existing_items))
        return missing


# ===============================================================================
# SERVICE FACADE
# ===============================================================================

class UsageReconciliationService:
    """
    Entry point used by the outer billing run.

    Responsible for:
    - Building usage intervals for a subscription's billing history
    - Computing missing usage items against an invoice item snapshot
    - Reporting billing errors as Err results instead of raising

    The caller persists returned items before the next run and serializes
    runs per subscription.
    """

    def __init__(self, usage_lookup: UsageLookup, grouping: UsageItemGrouping | None = None) -> None:
        self.aggregator = UsageAggregator(usage_lookup)
        self.grouping = grouping

    def reconcile_subscription(
        self,
        billing_events: Sequence[BillingEvent],
        existing_items: Sequence[InvoiceItem],
        target_date: date | None = None,
        invoice_id: str | None = None,
    ) -> Result[list[InvoiceItem], str]:
        """
        Compute the usage items missing for one subscription.

        ``target_date`` defaults to today in the platform timezone. When the
        caller has not set a billing run ID, one is generated for the
        duration of the call so its log lines can be correlated.
        """
        if target_date is None:
            target_date = timezone.localdate()
        subscription_id = billing_events[0].subscription_id if billing_events else None

        owns_run_id = get_run_id() is None
        if owns_run_id:
            set_run_id(f"usage-{uuid.uuid4().hex[:12]}")
        try:
            return self._reconcile(billing_events, existing_items, target_date, invoice_id, subscription_id)
        finally:
            if owns_run_id:
                clear_run_id()

    def _reconcile(
        self,
        billing_events: Sequence[BillingEvent],
        existing_items: Sequence[InvoiceItem],
        target_date: date,
        invoice_id: str | None,
        subscription_id: str | None,
    ) -> Result[list[InvoiceItem], str]:
        try:
            subscription_usage = SubscriptionUsageInArrear(
                billing_events, target_date, self.aggregator, invoice_id, self.grouping
            )
            items = subscription_usage.compute_missing_usage_items(existing_items)
        except UsageBillingError as e:
            logger.error(f"🔥 [Usage] Reconciliation failed for subscription {subscription_id}: {e}")
            return Err(str(e))

        total = sum((item.amount for item in items), ZERO)
        logger.info(
            f"✅ [Usage] Reconciled subscription {subscription_id} up to {target_date}: "
            f"{len(subscription_usage.intervals)} interval(s), {len(items)} missing item(s), total {total}",
            extra={"run_id": get_run_id()},
        )
        return Ok(items)
