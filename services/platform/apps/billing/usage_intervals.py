"""
Billing interval construction for usage billed in arrear.

Turns an ordered sequence of billing events into contiguous sub-periods
aligned on the billing cycle day (BCD). Every billing event date is a
boundary as well, so mid-cycle plan changes split the cycle they fall in.

Construction is two-phase: callers collect an immutable tuple of events,
then ``ContiguousUsageInterval.build`` computes the sub-periods once.
"""

from __future__ import annotations

import bisect
import calendar
import logging
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from datetime import date

from dateutil.relativedelta import relativedelta

from . import config as billing_config
from .billing_events import BillingEvent
from .exceptions import InvalidIntervalError
from .usage_catalog import BillingPeriod, UsageDefinition

logger = logging.getLogger(__name__)


@dataclass(frozen=True, order=True)
class SubPeriod:
    """Half-open [start, end) slice of a billing interval"""

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.end <= self.start:
            raise ValueError(f"Sub-period must not be empty: {self.start} - {self.end}")

    def __str__(self) -> str:
        return f"[{self.start.isoformat()}, {self.end.isoformat()})"


# ===============================================================================
# BCD DATE ARITHMETIC
# ===============================================================================

def aligned_date(year: int, month: int, bill_cycle_day: int) -> date:
    """BCD date in the given month, clamped to the month length."""
    _, days_in_month = calendar.monthrange(year, month)
    return date(year, month, min(bill_cycle_day, days_in_month))


def iter_aligned_dates(start: date, bill_cycle_day: int, months: int = 1) -> Iterator[date]:
    """
    Yield BCD-aligned dates on or after ``start``, ``months`` apart.

    The first date is the nearest aligned date >= start; later ones are
    computed from that month so that clamping in a short month does not
    drift the day for the months that follow.
    """
    first = aligned_date(start.year, start.month, bill_cycle_day)
    if first < start:
        following = start.replace(day=1) + relativedelta(months=1)
        first = aligned_date(following.year, following.month, bill_cycle_day)

    anchor_month = first.replace(day=1)
    step = 0
    while True:
        month = anchor_month + relativedelta(months=step * months)
        yield aligned_date(month.year, month.month, bill_cycle_day)
        step += 1


# ===============================================================================
# SUB-PERIOD BUILDER
# ===============================================================================

def check_events_ordered(billing_events: Sequence[BillingEvent]) -> None:
    for previous, current in zip(billing_events, billing_events[1:]):
        if current.effective_date < previous.effective_date:
            raise InvalidIntervalError(
                f"Billing events are not ordered: {current.effective_date.isoformat()} "
                f"comes after {previous.effective_date.isoformat()}"
            )


def _anchor_segments(
    billing_events: Sequence[BillingEvent],
    event_dates: Sequence[date],
) -> list[tuple[date, int]]:
    """(start date, BCD) pairs; a new segment starts whenever the BCD changes"""
    segments: list[tuple[date, int]] = []
    for event, event_date in zip(billing_events, event_dates):
        if not segments or segments[-1][1] != event.bill_cycle_day_local:
            segments.append((event_date, event.bill_cycle_day_local))
    return segments


def build_sub_periods(
    billing_events: Sequence[BillingEvent],
    target_date: date,
    closed_interval: bool,
    billing_period: BillingPeriod = BillingPeriod.MONTHLY,
) -> list[SubPeriod]:
    """
    Partition the interval bounded by ``billing_events`` into sub-periods.

    The interval runs from the first event to the last event when
    ``closed_interval`` is set, otherwise to ``target_date``; in the open
    case a trailing period that has not ended by ``target_date`` is left
    out so in-progress usage is never billed early.

    Raises:
        InvalidIntervalError: no events, events out of order, or more
            sub-periods than BILLING_USAGE_MAX_SUB_PERIODS allows
    """
    if not billing_events:
        raise InvalidIntervalError("At least one billing event is required to build an interval")
    check_events_ordered(billing_events)

    tz = billing_events[0].tz
    event_dates = [event.effective_date.astimezone(tz).date() for event in billing_events]
    start_date = event_dates[0]
    end_date = event_dates[-1] if closed_interval else target_date
    if end_date <= start_date:
        return []

    max_sub_periods = billing_config.get_max_sub_periods()
    boundaries = {event_date for event_date in event_dates if event_date <= end_date}

    segments = _anchor_segments(billing_events, event_dates)
    for index, (segment_start, bill_cycle_day) in enumerate(segments):
        if segment_start > end_date:
            break
        segment_end = segments[index + 1][0] if index + 1 < len(segments) else end_date
        for boundary in iter_aligned_dates(segment_start, bill_cycle_day, billing_period.months):
            if boundary > segment_end or boundary > end_date:
                break
            boundaries.add(boundary)
            if len(boundaries) > max_sub_periods + 1:
                raise InvalidIntervalError(
                    f"Interval {start_date} - {end_date} exceeds {max_sub_periods} sub-periods"
                )

    ordered = sorted(boundaries)
    return [SubPeriod(start=start, end=end) for start, end in zip(ordered, ordered[1:])]


# ===============================================================================
# CONTIGUOUS USAGE INTERVAL
# ===============================================================================

@dataclass(frozen=True)
class ContiguousUsageInterval:
    """
    Built interval for one usage section of one subscription.

    Holds the billing events that bound the interval and the sub-periods
    derived from them. Create with ``build``; instances never change.
    """

    usage: UsageDefinition
    billing_events: tuple[BillingEvent, ...]
    target_date: date
    closed_interval: bool
    sub_periods: tuple[SubPeriod, ...]

    @classmethod
    def build(
        cls,
        usage: UsageDefinition,
        billing_events: Sequence[BillingEvent],
        target_date: date,
        closed_interval: bool,
    ) -> ContiguousUsageInterval:
        events = tuple(billing_events)
        sub_periods = build_sub_periods(events, target_date, closed_interval, usage.billing_period)
        logger.debug(
            f"💰 [Usage] Built {len(sub_periods)} sub-period(s) for usage {usage.name} "
            f"({'closed' if closed_interval else 'open'}, target {target_date})"
        )
        return cls(
            usage=usage,
            billing_events=events,
            target_date=target_date,
            closed_interval=closed_interval,
            sub_periods=tuple(sub_periods),
        )

    @property
    def subscription_id(self) -> str:
        return self.billing_events[0].subscription_id

    @property
    def start_date(self) -> date:
        return self.billing_events[0].effective_local_date

    def governing_event(self, sub_period: SubPeriod) -> BillingEvent:
        """Latest billing event in effect at the start of ``sub_period``."""
        tz = self.billing_events[0].tz
        event_dates = [event.effective_date.astimezone(tz).date() for event in self.billing_events]
        index = bisect.bisect_right(event_dates, sub_period.start) - 1
        return self.billing_events[max(index, 0)]
