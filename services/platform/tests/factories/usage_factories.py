# ===============================================================================
# TEST FACTORIES FOR USAGE BILLING
# ===============================================================================

import zoneinfo
from dataclasses import dataclass, field
from datetime import date, datetime, time
from decimal import Decimal

from apps.billing import config as billing_config
from apps.billing.billing_events import BillingEvent, SubscriptionTransition
from apps.billing.invoice_items import InvoiceItem, fixed_price_invoice_item, usage_invoice_item
from apps.billing.usage_aggregation import RolledUpUsage
from apps.billing.usage_catalog import (
    BillingMode,
    BillingPeriod,
    InternationalPrice,
    Price,
    Tier,
    TieredBlock,
    UsageDefinition,
    UsageType,
)

ACCOUNT_ID = "acc-0001"
BUNDLE_ID = "bundle-0001"
SUBSCRIPTION_ID = "sub-0001"
INVOICE_ID = "inv-0001"
PLAN_NAME = "planName"
PHASE_NAME = "phaseName"
BCD = 15


def _decimal(value: int | str | Decimal | None) -> Decimal | None:
    if value is None:
        return None
    return Decimal(str(value))


def create_block(
    unit: str = "unit",
    size: int | str | Decimal = 100,
    max_blocks: int | str | Decimal | None = 10,
    price: int | str | Decimal = 1,
    currency: str | None = None,
) -> TieredBlock:
    """Create a tiered block priced in a single currency."""
    currency = currency or billing_config.get_default_currency()
    return TieredBlock(
        unit=unit,
        size=_decimal(size),
        max=_decimal(max_blocks),
        price=InternationalPrice(prices=(Price(currency=currency, value=_decimal(price)),)),
    )


def create_tier(*blocks: TieredBlock) -> Tier:
    return Tier(blocks=tuple(blocks))


def create_usage(
    *tiers: Tier,
    name: str = "foo",
    billing_period: BillingPeriod = BillingPeriod.MONTHLY,
    billing_mode: BillingMode = BillingMode.IN_ARREAR,
    usage_type: UsageType = UsageType.CONSUMABLE,
) -> UsageDefinition:
    """Create a usage section; defaults to consumable, in arrear, monthly."""
    return UsageDefinition(
        name=name,
        billing_mode=billing_mode,
        usage_type=usage_type,
        billing_period=billing_period,
        tiers=tuple(tiers),
    )


# ===============================================================================
# BILLING EVENT FACTORY PARAMETER OBJECTS
# ===============================================================================

@dataclass
class BillingEventRequest:
    """Parameter object for billing event creation"""
    effective_date: date
    usages: tuple[UsageDefinition, ...] = field(default_factory=tuple)
    bill_cycle_day: int = BCD
    time_zone: str = "UTC"
    currency: str | None = None
    plan_name: str = PLAN_NAME
    phase_name: str = PHASE_NAME
    subscription_id: str = SUBSCRIPTION_ID
    transition_type: SubscriptionTransition = SubscriptionTransition.CREATE


def create_billing_event(request: BillingEventRequest) -> BillingEvent:
    """Create a billing event effective at local midnight of the requested date."""
    effective = datetime.combine(request.effective_date, time.min, tzinfo=zoneinfo.ZoneInfo(request.time_zone))
    return BillingEvent(
        effective_date=effective,
        bill_cycle_day_local=request.bill_cycle_day,
        time_zone=request.time_zone,
        currency=request.currency or billing_config.get_default_currency(),
        account_id=ACCOUNT_ID,
        bundle_id=BUNDLE_ID,
        subscription_id=request.subscription_id,
        plan_name=request.plan_name,
        phase_name=request.phase_name,
        usages=request.usages,
        transition_type=request.transition_type,
    )


def create_event(effective_date: date, *usages: UsageDefinition, **kwargs) -> BillingEvent:
    """Shortcut for create_billing_event(BillingEventRequest(...))."""
    return create_billing_event(BillingEventRequest(effective_date=effective_date, usages=tuple(usages), **kwargs))


def create_usage_item(
    usage_name: str,
    start_date: date,
    end_date: date,
    amount: int | str | Decimal,
    currency: str | None = None,
    unit: str | None = None,
) -> InvoiceItem:
    return usage_invoice_item(
        invoice_id=INVOICE_ID,
        account_id=ACCOUNT_ID,
        bundle_id=BUNDLE_ID,
        subscription_id=SUBSCRIPTION_ID,
        plan_name=PLAN_NAME,
        phase_name=PHASE_NAME,
        usage_name=usage_name,
        unit=unit,
        start_date=start_date,
        end_date=end_date,
        amount=_decimal(amount),
        currency=currency or billing_config.get_default_currency(),
    )


def create_fixed_item(start_date: date, amount: int | str | Decimal, currency: str | None = None) -> InvoiceItem:
    return fixed_price_invoice_item(
        invoice_id=INVOICE_ID,
        account_id=ACCOUNT_ID,
        bundle_id=BUNDLE_ID,
        subscription_id=SUBSCRIPTION_ID,
        plan_name=PLAN_NAME,
        phase_name=PHASE_NAME,
        start_date=start_date,
        amount=_decimal(amount),
        currency=currency or billing_config.get_default_currency(),
    )


def create_rolled_up_usage(
    start: date,
    end: date,
    amount: int | str | Decimal,
    unit: str = "unit",
    subscription_id: str = SUBSCRIPTION_ID,
) -> RolledUpUsage:
    return RolledUpUsage(
        subscription_id=subscription_id,
        unit=unit,
        start=start,
        end=end,
        amount=_decimal(amount),
    )
