"""Typed records for trades, merchants, stock and income/expense entries.

Rows arrive from the hosted backend as loosely typed dicts (numbers may be
strings, missing, or null). Every ``from_record`` constructor here is the one
place where those values are coerced, so the calculators downstream can rely
on ``Decimal`` amounts.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

ZERO = Decimal("0")


class TradeType(str, Enum):
    """Kinds of trade recorded against a merchant."""

    BUY = "buy"
    SELL = "sell"
    TRANSFER = "transfer"
    SETTLEMENT = "settlement"


class MetalType(str, Enum):
    """Metals held in stock."""

    GOLD = "gold"
    SILVER = "silver"


class SettlementType(str, Enum):
    """How a settlement was paid."""

    CASH = "cash"
    BANK = "bank"
    GOLD = "gold"
    SILVER = "silver"

    @property
    def is_metal(self) -> bool:
        return self in (SettlementType.GOLD, SettlementType.SILVER)


class SettlementDirection(str, Enum):
    """Whether the business received or paid out a settlement."""

    RECEIVING = "receiving"
    PAYING = "paying"


class PaymentType(str, Enum):
    """Payment methods for income and expense entries."""

    CASH = "cash"
    BANK_TRANSFER = "bank_transfer"
    UPI = "upi"
    CHEQUE = "cheque"


def to_decimal(value: Any, default: Decimal = ZERO) -> Decimal:
    """Coerce a loosely typed number to ``Decimal``.

    ``None``, empty strings, booleans and anything unparseable fall back to
    ``default``. NaN and infinities are treated as unparseable.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            return default
    if not result.is_finite():
        return default
    return result


def to_optional_decimal(value: Any) -> Decimal | None:
    """Like :func:`to_decimal` but keeps absent values as ``None``."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    parsed = to_decimal(value, default=Decimal("NaN"))
    return None if parsed.is_nan() else parsed


def _optional_enum(enum_cls: type[Enum], value: Any) -> Any:
    if value is None or value == "":
        return None
    try:
        return enum_cls(value)
    except ValueError:
        return None


def _parse_datetime(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None


def _parse_date(value: Any) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    parsed = _parse_datetime(value)
    return parsed.date() if parsed else None


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value)
    return text or None


@dataclass(frozen=True)
class Trade:
    """A buy, sell, transfer or settlement attributed to one merchant."""

    id: str
    type: TradeType
    merchant_id: str | None
    total_amount: Decimal = ZERO
    amount_paid: Decimal | None = None
    amount_received: Decimal | None = None
    settlement_type: SettlementType | None = None
    settlement_direction: SettlementDirection | None = None
    merchant_name: str = ""
    metal_type: MetalType | None = None
    weight: Decimal = ZERO
    price_per_unit: Decimal = ZERO
    transfer_charges: Decimal = ZERO
    pickup_location: str | None = None
    drop_location: str | None = None
    notes: str = ""
    trade_date: date | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def effective_date(self) -> date | None:
        """Trade date when recorded, else the creation date."""
        if self.trade_date is not None:
            return self.trade_date
        return self.created_at.date() if self.created_at else None

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> Trade:
        """Build a trade from a ``trades`` table row.

        Raises:
            ValueError: If the row's ``type`` is not a known trade type.
        """
        trade_type = TradeType(record.get("type"))
        party_name = record.get("party_name") or record.get("merchant_name") or ""
        merchant_id = record.get("merchant_id") or party_name or None

        return cls(
            id=str(record.get("id", "")),
            type=trade_type,
            merchant_id=str(merchant_id) if merchant_id is not None else None,
            total_amount=to_decimal(record.get("amount", record.get("total_amount"))),
            amount_paid=to_optional_decimal(record.get("amount_paid")),
            amount_received=to_optional_decimal(record.get("amount_received")),
            settlement_type=_optional_enum(SettlementType, record.get("settlement_type")),
            settlement_direction=_optional_enum(
                SettlementDirection, record.get("settlement_direction")
            ),
            merchant_name=str(party_name),
            metal_type=_optional_enum(MetalType, record.get("metal_type")),
            weight=to_decimal(record.get("quantity", record.get("weight"))),
            price_per_unit=to_decimal(record.get("rate", record.get("price_per_unit"))),
            transfer_charges=to_decimal(record.get("transfer_charges")),
            pickup_location=_optional_str(record.get("pickup_location")),
            drop_location=_optional_str(record.get("drop_location")),
            notes=str(record.get("notes") or ""),
            trade_date=_parse_date(record.get("trade_date")),
            created_at=_parse_datetime(record.get("created_at")),
            updated_at=_parse_datetime(record.get("updated_at")),
        )

    def to_record(self) -> dict[str, Any]:
        """Serialize to the column layout of the ``trades`` table."""
        return {
            "type": self.type.value,
            "metal_type": (self.metal_type or MetalType.GOLD).value,
            "quantity": str(self.weight),
            "rate": str(self.price_per_unit),
            "amount": str(self.total_amount),
            "amount_paid": str(self.amount_paid) if self.amount_paid is not None else None,
            "amount_received": (
                str(self.amount_received) if self.amount_received is not None else None
            ),
            "merchant_id": self.merchant_id,
            "party_name": self.merchant_name or "Unknown",
            "settlement_type": self.settlement_type.value if self.settlement_type else None,
            "settlement_direction": (
                self.settlement_direction.value if self.settlement_direction else None
            ),
            "transfer_charges": str(self.transfer_charges) if self.transfer_charges else None,
            "pickup_location": self.pickup_location,
            "drop_location": self.drop_location,
            "notes": self.notes or None,
            "trade_date": self.trade_date.isoformat() if self.trade_date else None,
        }


@dataclass(frozen=True)
class Balance:
    """Net position between the business and one merchant."""

    due: Decimal = ZERO
    owe: Decimal = ZERO

    @property
    def is_settled(self) -> bool:
        return self.due == 0 and self.owe == 0


@dataclass(frozen=True)
class Merchant:
    """A counterparty the business buys from, sells to, or settles with."""

    id: str
    name: str
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    total_due: Decimal = ZERO
    total_owe: Decimal = ZERO
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> Merchant:
        return cls(
            id=str(record.get("id", "")),
            name=str(record.get("name") or ""),
            email=_optional_str(record.get("email")),
            phone=_optional_str(record.get("phone")),
            address=_optional_str(record.get("address")),
            total_due=to_decimal(record.get("total_due")),
            total_owe=to_decimal(record.get("total_owe")),
            created_at=_parse_datetime(record.get("created_at")),
            updated_at=_parse_datetime(record.get("updated_at")),
        )

    @property
    def balance(self) -> Balance:
        """Stored balance as last written to the merchant row."""
        return Balance(due=self.total_due, owe=self.total_owe)


@dataclass(frozen=True)
class StockLevel:
    """Quantity on hand for one metal (grams)."""

    id: str
    metal_type: MetalType
    quantity: Decimal = ZERO
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> StockLevel:
        """Build a stock level from a ``stock`` table row.

        Raises:
            ValueError: If ``metal_type`` is not gold or silver.
        """
        return cls(
            id=str(record.get("id", "")),
            metal_type=MetalType(record.get("metal_type")),
            quantity=to_decimal(record.get("quantity")),
            created_at=_parse_datetime(record.get("created_at")),
            updated_at=_parse_datetime(record.get("updated_at")),
        )


@dataclass(frozen=True)
class LedgerEntry:
    """An income or expense line; both tables share this shape."""

    id: str
    category: str
    description: str
    amount: Decimal
    date: date | None
    payment_type: PaymentType | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> LedgerEntry:
        return cls(
            id=str(record.get("id", "")),
            category=str(record.get("category") or ""),
            description=str(record.get("description") or ""),
            amount=to_decimal(record.get("amount")),
            date=_parse_date(record.get("date")),
            payment_type=_optional_enum(PaymentType, record.get("payment_type")),
            created_at=_parse_datetime(record.get("created_at")),
            updated_at=_parse_datetime(record.get("updated_at")),
        )

    def to_record(self) -> dict[str, Any]:
        return {
            "category": self.category,
            "description": self.description,
            "amount": str(self.amount),
            "date": self.date.isoformat() if self.date else None,
            "payment_type": (self.payment_type or PaymentType.CASH).value,
        }
