"""
Block pricing for consumable usage.

Converts a usage quantity for one unit into a monetary amount using the
catalog's ordered tiers. Usage fills the first tier that prices the unit
before spilling into the next. Partial blocks always round up to a whole
block; that ceiling is the only rounding applied.
"""

from __future__ import annotations

import decimal
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal

from .exceptions import InvalidQuantityError, NoBlockForUnitError
from .usage_catalog import Tier, TieredBlock

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


@dataclass(frozen=True)
class TierCharge:
    """Charge contributed by one tier for one unit"""

    tier_index: int
    unit: str
    quantity: Decimal
    blocks: Decimal
    unit_price: Decimal
    amount: Decimal


def _blocks_for(quantity: Decimal, block: TieredBlock) -> Decimal:
    try:
        blocks, remainder = divmod(quantity, block.size)
    except decimal.InvalidOperation as e:
        # Whole-block count exceeds the decimal context precision
        raise InvalidQuantityError(quantity, f"block count for unit '{block.unit}' overflows") from e
    if remainder > 0:
        blocks += 1
    return blocks


def compute_tier_breakdown(
    quantity: Decimal,
    unit: str,
    tiers: Sequence[Tier],
    currency: str,
) -> list[TierCharge]:
    """
    Allocate ``quantity`` across the tiers pricing ``unit``.

    Raises:
        InvalidQuantityError: quantity is negative or its block count overflows
        NoBlockForUnitError: no tier prices the unit, or quantity is left
            over once every bounded tier for the unit is saturated
        NoPriceForCurrencyError: a consumed block has no price in ``currency``
    """
    if quantity < 0:
        raise InvalidQuantityError(quantity)
    if quantity == 0:
        return []

    charges: list[TierCharge] = []
    remaining = quantity
    found_block = False

    for tier_index, tier in enumerate(tiers):
        block = tier.get_block(unit)
        if block is None:
            continue
        found_block = True

        capacity = block.capacity
        allocated = remaining if capacity is None else min(remaining, capacity)
        blocks = _blocks_for(allocated, block)
        unit_price = block.price.get_price(currency)

        charges.append(
            TierCharge(
                tier_index=tier_index,
                unit=unit,
                quantity=allocated,
                blocks=blocks,
                unit_price=unit_price,
                amount=blocks * unit_price,
            )
        )

        remaining -= allocated
        if remaining == 0:
            break

    if not found_block:
        raise NoBlockForUnitError(unit)
    if remaining > 0:
        raise NoBlockForUnitError(unit, remaining)

    return charges


def compute_to_be_billed_amount(
    quantity: Decimal,
    unit: str,
    tiers: Sequence[Tier],
    currency: str,
) -> Decimal:
    """Amount that should be billed for ``quantity`` units of ``unit``."""
    charges = compute_tier_breakdown(quantity, unit, tiers, currency)
    amount = sum((charge.amount for charge in charges), ZERO)
    logger.debug(f"💰 [Usage] Priced {quantity} {unit} over {len(charges)} tier(s): {amount} {currency}")
    return amount
