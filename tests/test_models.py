"""Tests for record parsing and numeric coercion."""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from bullion_ledger.models import (
    LedgerEntry,
    Merchant,
    MetalType,
    PaymentType,
    SettlementType,
    StockLevel,
    Trade,
    TradeType,
    to_decimal,
    to_optional_decimal,
)


class TestNumericCoercion:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("1500.50", Decimal("1500.50")),
            (1500, Decimal("1500")),
            (12.5, Decimal("12.5")),
            (Decimal("7"), Decimal("7")),
            (" 42 ", Decimal("42")),
        ],
    )
    def test_parses_numbers(self, raw, expected):
        assert to_decimal(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "abc", True, "NaN", "Infinity", [], {}])
    def test_falls_back_to_zero(self, raw):
        assert to_decimal(raw) == Decimal("0")

    def test_optional_keeps_absent_as_none(self):
        assert to_optional_decimal(None) is None
        assert to_optional_decimal("") is None
        assert to_optional_decimal("garbage") is None
        assert to_optional_decimal("0") == Decimal("0")
        assert to_optional_decimal(250) == Decimal("250")


class TestTradeFromRecord:
    def test_maps_table_columns(self, trade_rows):
        trade = Trade.from_record(trade_rows[0])

        assert trade.id == "t-100"
        assert trade.type is TradeType.SELL
        assert trade.merchant_id == "m-1"
        assert trade.merchant_name == "Shree Jewellers"
        assert trade.metal_type is MetalType.GOLD
        assert trade.weight == Decimal("12.5")
        assert trade.price_per_unit == Decimal("6200")
        assert trade.total_amount == Decimal("77500")
        assert trade.amount_received == Decimal("27500")
        assert trade.amount_paid is None
        assert trade.transfer_charges == Decimal("0")
        assert trade.created_at == datetime(2026, 3, 2, 10, 15, tzinfo=timezone.utc)

    def test_merchant_falls_back_to_party_name(self, trade_rows):
        trade = Trade.from_record(trade_rows[1])

        assert trade.merchant_id == "Kumar Bullion"
        assert trade.amount_paid == Decimal("100000")

    def test_loose_numbers_become_zero(self):
        trade = Trade.from_record(
            {"id": "x", "type": "sell", "merchant_id": "m", "amount": None, "quantity": "n/a"}
        )

        assert trade.total_amount == Decimal("0")
        assert trade.weight == Decimal("0")

    def test_unknown_optional_enums_become_none(self):
        trade = Trade.from_record(
            {"id": "x", "type": "settlement", "settlement_type": "barter", "metal_type": "copper"}
        )

        assert trade.settlement_type is None
        assert trade.metal_type is None

    def test_unknown_type_raises(self):
        with pytest.raises(ValueError):
            Trade.from_record({"id": "x", "type": "loan"})

    def test_effective_date_prefers_trade_date(self):
        trade = Trade.from_record(
            {
                "id": "x",
                "type": "buy",
                "trade_date": "2026-01-05",
                "created_at": "2026-02-01T00:00:00+00:00",
            }
        )
        assert trade.effective_date == date(2026, 1, 5)

    def test_to_record_round_trips_core_fields(self):
        trade = Trade(
            id="x",
            type=TradeType.SETTLEMENT,
            merchant_id="m-9",
            total_amount=Decimal("3000"),
            settlement_type=SettlementType.BANK,
            merchant_name="Patel & Sons",
        )

        record = trade.to_record()

        assert record["type"] == "settlement"
        assert record["amount"] == "3000"
        assert record["settlement_type"] == "bank"
        assert record["metal_type"] == "gold"
        assert record["party_name"] == "Patel & Sons"
        assert Trade.from_record({"id": "x", **record}).settlement_type is SettlementType.BANK


class TestOtherRecords:
    def test_merchant_balance(self):
        merchant = Merchant.from_record(
            {"id": "m-1", "name": "Shree", "total_due": "1200.00", "total_owe": None}
        )

        assert merchant.balance.due == Decimal("1200")
        assert merchant.balance.owe == Decimal("0")
        assert merchant.email is None

    def test_stock_level_requires_known_metal(self):
        assert StockLevel.from_record({"id": "s", "metal_type": "silver"}).metal_type is (
            MetalType.SILVER
        )
        with pytest.raises(ValueError):
            StockLevel.from_record({"id": "s", "metal_type": "platinum"})

    def test_ledger_entry(self):
        entry = LedgerEntry.from_record(
            {
                "id": "e-1",
                "category": "Rent",
                "description": "Shop rent",
                "amount": "25000",
                "date": "2026-03-01",
                "payment_type": "upi",
            }
        )

        assert entry.amount == Decimal("25000")
        assert entry.date == date(2026, 3, 1)
        assert entry.payment_type is PaymentType.UPI
        assert entry.to_record()["payment_type"] == "upi"
