"""Display helpers for rupee amounts and metal weights."""

from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from bullion_ledger.models import MetalType, to_decimal

RUPEE = "₹"
LAKH = Decimal("100000")
CRORE = Decimal("10000000")

_WEIGHT_UNITS = {MetalType.GOLD: "g", MetalType.SILVER: "kg"}


def _group_indian(digits: str) -> str:
    """Insert Indian-style separators: last three digits, then pairs."""
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    pairs = []
    while len(head) > 2:
        pairs.insert(0, head[-2:])
        head = head[:-2]
    if head:
        pairs.insert(0, head)
    return ",".join(pairs + [tail])


def _fixed(value: Decimal, places: int) -> str:
    exponent = Decimal(1).scaleb(-places)
    return str(value.quantize(exponent, rounding=ROUND_HALF_UP))


def format_currency(amount: Any) -> str:
    """Format as whole rupees with Indian digit grouping (``₹1,23,457``)."""
    value = to_decimal(amount).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    return f"{sign}{RUPEE}{_group_indian(str(abs(value)))}"


def format_currency_in_cr(amount: Any) -> str:
    """Format in lakhs (``12.3 L``) below one crore, crores (``2.5 CR``) above."""
    value = to_decimal(amount)
    if value < CRORE:
        return f"{_fixed(value / LAKH, 1)} L"

    crores = value / CRORE
    if crores >= 100:
        return f"{_fixed(crores, 0)} CR"
    return f"{_fixed(crores, 1)} CR"


def format_weight(weight: Any, metal_type: MetalType | str) -> str:
    """Format a weight with two decimals and the metal's display unit."""
    unit = _WEIGHT_UNITS[MetalType(metal_type)]
    return f"{_fixed(to_decimal(weight), 2)} {unit}"
