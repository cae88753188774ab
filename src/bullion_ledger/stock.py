"""Stock quantities derived from the trade history."""

from collections.abc import Iterable
from decimal import Decimal

from bullion_ledger.models import (
    ZERO,
    MetalType,
    SettlementDirection,
    Trade,
    TradeType,
)

GRAMS_PER_KILOGRAM = Decimal("1000")


def compute_stock(trades: Iterable[Trade]) -> dict[MetalType, Decimal]:
    """Compute grams on hand per metal.

    Buys add weight, sells remove it, and metal settlements move it in the
    settlement's direction. Cash/bank settlements and transfers do not touch
    stock. Results may be negative when more was sold than recorded bought.
    """
    levels: dict[MetalType, Decimal] = {metal: ZERO for metal in MetalType}

    for trade in trades:
        metal = trade.metal_type or MetalType.GOLD
        if trade.type is TradeType.BUY:
            levels[metal] += trade.weight
        elif trade.type is TradeType.SELL:
            levels[metal] -= trade.weight
        elif trade.type is TradeType.SETTLEMENT:
            if trade.settlement_type is None or not trade.settlement_type.is_metal:
                continue
            if trade.settlement_direction is SettlementDirection.RECEIVING:
                levels[metal] += trade.weight
            elif trade.settlement_direction is SettlementDirection.PAYING:
                levels[metal] -= trade.weight

    return levels


def grams_to_kilograms(grams: Decimal) -> Decimal:
    return grams / GRAMS_PER_KILOGRAM
