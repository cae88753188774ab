"""Cleaning of locally stored trades before they are written to the backend.

Older clients kept trades in browser storage with a mix of field names
(``weight`` vs ``quantity``, ``pricePerUnit`` vs ``rate`` ...). These helpers
turn such dicts into rows the ``trades`` table accepts, or reject them.
"""

from decimal import Decimal
from typing import Any

import structlog

from bullion_ledger.models import ZERO, MetalType, TradeType, to_decimal

logger = structlog.get_logger(__name__)


def _first(raw: dict[str, Any], *keys: str) -> Any:
    """Return the first truthy value among ``keys``, else 0."""
    for key in keys:
        value = raw.get(key)
        if value:
            return value
    return 0


def normalize_ui_trade(raw: dict[str, Any]) -> dict[str, Any]:
    """Map UI-era field aliases to storage columns."""
    trade_type = raw.get("type")

    quantity = _first(raw, "weight", "quantity")
    rate = _first(raw, "pricePerUnit", "rate")
    if trade_type == TradeType.SETTLEMENT.value:
        amount = _first(
            raw, "totalAmount", "amountPaid", "amountReceived", "laborCharges"
        )
    elif trade_type == TradeType.TRANSFER.value:
        amount = _first(raw, "totalAmount", "transferCharges")
    else:
        amount = _first(raw, "totalAmount", "amount")

    return {
        "id": raw.get("id"),
        "type": trade_type,
        "metal_type": raw.get("metalType") or raw.get("metal_type"),
        "quantity": quantity,
        "rate": rate,
        "amount": amount,
        "party_name": (
            raw.get("merchantName")
            or raw.get("partyName")
            or raw.get("party_name")
            or "Unknown"
        ),
        "merchant_id": raw.get("merchantId") or raw.get("merchant_id"),
        "party_phone": raw.get("partyPhone") or None,
        "party_address": raw.get("partyAddress") or None,
        "notes": raw.get("notes") or None,
    }


def _non_negative(value: Any) -> Decimal:
    # Strings are not numbers here: legacy rows stored numbers natively.
    if isinstance(value, bool) or not isinstance(value, int | float | Decimal):
        return ZERO
    number = to_decimal(value)
    return number if number >= 0 else ZERO


def _plain(value: Decimal) -> str:
    return format(value.normalize(), "f")


def clean_trade(raw: dict[str, Any]) -> dict[str, Any] | None:
    """Validate a normalized trade row.

    Returns:
        A cleaned row, or None when the trade has no type, no party name,
        or (for buys and sells) neither a quantity nor an amount.
    """
    trade_type = raw.get("type")
    party_name = raw.get("party_name") or raw.get("merchant_name")
    if not trade_type or not party_name:
        logger.info(
            "trade_rejected",
            reason="missing_required_fields",
            trade_id=raw.get("id"),
            type=trade_type,
        )
        return None

    try:
        parsed_type = TradeType(trade_type)
    except ValueError:
        logger.info("trade_rejected", reason="unknown_type", trade_id=raw.get("id"))
        return None

    try:
        metal_type = MetalType(raw.get("metal_type") or MetalType.GOLD.value)
    except ValueError:
        metal_type = MetalType.GOLD

    quantity = _non_negative(raw.get("quantity"))
    rate = _non_negative(raw.get("rate"))
    amount = _non_negative(raw.get("amount"))

    if parsed_type in (TradeType.BUY, TradeType.SELL):
        if quantity == 0 and amount > 0 and rate > 0:
            quantity = amount / rate
        if amount == 0 and quantity > 0 and rate > 0:
            amount = quantity * rate
        if quantity == 0 and amount == 0:
            logger.info(
                "trade_rejected",
                reason="no_quantity_or_amount",
                trade_id=raw.get("id"),
                type=parsed_type.value,
            )
            return None

    return {
        "type": parsed_type.value,
        "metal_type": metal_type.value,
        "quantity": _plain(quantity),
        "rate": _plain(rate),
        "amount": _plain(amount),
        "merchant_id": raw.get("merchant_id") or None,
        "party_name": str(party_name),
        "party_phone": raw.get("party_phone") or None,
        "party_address": raw.get("party_address") or None,
        "notes": raw.get("notes") or None,
    }
