"""
Catalog value types for usage-based pricing.

A usage definition owns an ordered sequence of tiers; each tier holds
priced blocks keyed by unit. These objects are read-only for the
reconciliation core and are supplied by the catalog collaborator.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

from .exceptions import NoPriceForCurrencyError


class BillingMode(str, Enum):
    """When usage is invoiced relative to when it occurs."""

    IN_ADVANCE = "in_advance"
    IN_ARREAR = "in_arrear"


class UsageType(str, Enum):
    """Usage kinds known to the catalog."""

    CONSUMABLE = "consumable"
    CAPACITY = "capacity"


class BillingPeriod(str, Enum):
    """Recurring billing periods for usage, expressed in months."""

    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    BIANNUAL = "biannual"
    ANNUAL = "annual"

    @property
    def months(self) -> int:
        return _PERIOD_MONTHS[self]


_PERIOD_MONTHS = {
    BillingPeriod.MONTHLY: 1,
    BillingPeriod.QUARTERLY: 3,
    BillingPeriod.BIANNUAL: 6,
    BillingPeriod.ANNUAL: 12,
}


@dataclass(frozen=True)
class Price:
    """Block price in one currency"""

    currency: str
    value: Decimal


@dataclass(frozen=True)
class InternationalPrice:
    """Set of per-currency prices for a block"""

    prices: tuple[Price, ...] = ()

    def get_price(self, currency: str) -> Decimal:
        for price in self.prices:
            if price.currency == currency:
                return price.value
        raise NoPriceForCurrencyError(currency)


@dataclass(frozen=True)
class TieredBlock:
    """
    Priced block of usage within a tier.

    ``max`` is the maximum number of blocks the tier holds; ``None`` or
    zero means the tier is unbounded (only sensible as the terminal tier).
    """

    unit: str
    size: Decimal
    price: InternationalPrice
    max: Decimal | None = None

    def __post_init__(self) -> None:
        if self.size <= 0:
            raise ValueError(f"Block size must be positive for unit '{self.unit}': {self.size}")
        if self.max is not None and self.max < 0:
            raise ValueError(f"Block max must not be negative for unit '{self.unit}': {self.max}")

    @property
    def is_unbounded(self) -> bool:
        return self.max is None or self.max == 0

    @property
    def capacity(self) -> Decimal | None:
        """Usage quantity the tier absorbs for this unit, None when unbounded"""
        if self.is_unbounded:
            return None
        return self.size * self.max  # type: ignore[operator]


@dataclass(frozen=True)
class Tier:
    blocks: tuple[TieredBlock, ...] = ()

    def get_block(self, unit: str) -> TieredBlock | None:
        for block in self.blocks:
            if block.unit == unit:
                return block
        return None


@dataclass(frozen=True)
class UsageDefinition:
    """Catalog usage section attached to a plan phase."""

    name: str
    billing_mode: BillingMode = BillingMode.IN_ARREAR
    usage_type: UsageType = UsageType.CONSUMABLE
    billing_period: BillingPeriod = BillingPeriod.MONTHLY
    tiers: tuple[Tier, ...] = field(default_factory=tuple)

    @property
    def is_consumable_in_arrear(self) -> bool:
        return self.billing_mode == BillingMode.IN_ARREAR and self.usage_type == UsageType.CONSUMABLE

    @property
    def units(self) -> tuple[str, ...]:
        """Distinct units referenced by the tiers, in first-appearance order"""
        seen: list[str] = []
        for tier in self.tiers:
            for block in tier.blocks:
                if block.unit not in seen:
                    seen.append(block.unit)
        return tuple(seen)
