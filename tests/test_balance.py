"""Tests for merchant balance computation."""

from decimal import Decimal
from itertools import permutations

import pytest

from bullion_ledger.balance import compute_all_balances, compute_balance
from bullion_ledger.models import Balance, SettlementType, Trade, TradeType
from factories import make_trade


class TestSingleTrades:
    """Each trade type on its own."""

    def test_no_trades_is_zero(self):
        assert compute_balance("m-1", []) == Balance(due=Decimal("0"), owe=Decimal("0"))

    def test_partly_paid_buy_creates_owe(self):
        trade = make_trade("buy", total_amount="1000", amount_paid=Decimal("600"))

        assert compute_balance("m-1", [trade]) == Balance(due=Decimal("0"), owe=Decimal("400"))

    def test_fully_paid_buy_is_settled(self):
        trade = make_trade("buy", total_amount="1000", amount_paid=Decimal("1000"))

        assert compute_balance("m-1", [trade]).is_settled

    def test_overpaid_buy_does_not_go_negative(self):
        trade = make_trade("buy", total_amount="1000", amount_paid=Decimal("1200"))

        assert compute_balance("m-1", [trade]) == Balance(due=Decimal("0"), owe=Decimal("0"))

    def test_buy_without_amount_paid_contributes_nothing(self):
        trade = make_trade("buy", total_amount="1000")

        assert compute_balance("m-1", [trade]).is_settled

    def test_buy_with_zero_payment_owes_full_amount(self):
        trade = make_trade("buy", total_amount="1000", amount_paid=Decimal("0"))

        assert compute_balance("m-1", [trade]).owe == Decimal("1000")

    def test_unpaid_sell_is_due(self):
        trade = make_trade("sell", total_amount="500", amount_received=Decimal("0"))

        assert compute_balance("m-1", [trade]) == Balance(due=Decimal("500"), owe=Decimal("0"))

    def test_fully_received_sell_is_settled(self):
        trade = make_trade("sell", total_amount="500", amount_received=Decimal("500"))

        assert compute_balance("m-1", [trade]) == Balance(due=Decimal("0"), owe=Decimal("0"))

    def test_over_received_sell_clamps_to_zero(self):
        trade = make_trade("sell", total_amount="500", amount_received=Decimal("800"))

        assert compute_balance("m-1", [trade]) == Balance(due=Decimal("0"), owe=Decimal("0"))

    @pytest.mark.parametrize("settlement_type", list(SettlementType))
    def test_settlement_reduces_due_for_any_type(self, settlement_type):
        trades = [
            make_trade("sell", total_amount="1000", trade_id="s"),
            make_trade(
                "settlement", total_amount="300", trade_id="x",
                settlement_type=settlement_type,
            ),
        ]

        assert compute_balance("m-1", trades) == Balance(due=Decimal("700"), owe=Decimal("0"))

    def test_untyped_settlement_leaves_due_unchanged(self):
        trades = [
            make_trade("sell", total_amount="1000", trade_id="s"),
            make_trade("settlement", total_amount="300", trade_id="x"),
        ]

        assert compute_balance("m-1", trades) == Balance(due=Decimal("1000"), owe=Decimal("0"))

    def test_unrecognised_settlement_type_from_row_is_ignored(self):
        trades = [
            make_trade("sell", total_amount="1000", trade_id="s"),
            Trade.from_record(
                {"id": "x", "type": "settlement", "amount": "300",
                 "merchant_id": "m-1", "settlement_type": "barter"}
            ),
        ]

        assert compute_balance("m-1", trades).due == Decimal("1000")


class TestNetting:
    """Netting of due against owe."""

    def test_due_larger_than_owe(self):
        trades = [
            make_trade("buy", total_amount="1000", amount_paid=Decimal("600"), trade_id="b"),
            make_trade("sell", total_amount="500", trade_id="s"),
        ]

        assert compute_balance("m-1", trades) == Balance(due=Decimal("100"), owe=Decimal("0"))

    def test_owe_larger_than_due(self):
        trades = [
            make_trade("buy", total_amount="1000", amount_paid=Decimal("0"), trade_id="b"),
            make_trade("sell", total_amount="250", trade_id="s"),
        ]

        assert compute_balance("m-1", trades) == Balance(due=Decimal("0"), owe=Decimal("750"))

    def test_equal_due_and_owe_cancel(self):
        trades = [
            make_trade("buy", total_amount="900", amount_paid=Decimal("500"), trade_id="b"),
            make_trade("sell", total_amount="400", trade_id="s"),
        ]

        assert compute_balance("m-1", trades).is_settled

    def test_settlement_without_sell_is_lost_not_credited(self):
        trades = [
            make_trade("buy", total_amount="1000", amount_paid=Decimal("0"), trade_id="b"),
            make_trade(
                "settlement", total_amount="300", trade_id="x",
                settlement_type=SettlementType.GOLD,
            ),
        ]

        assert compute_balance("m-1", trades) == Balance(due=Decimal("0"), owe=Decimal("1000"))

    def test_result_does_not_depend_on_order(self, mixed_trades):
        expected = compute_balance("m-2", mixed_trades)

        for ordering in permutations(mixed_trades):
            assert compute_balance("m-2", list(ordering)) == expected


class TestFilteringAndPurity:
    def test_other_merchants_are_ignored(self):
        trades = [
            make_trade("sell", "m-1", "500", "a"),
            make_trade("sell", "m-2", "9000", "b"),
        ]

        assert compute_balance("m-1", trades).due == Decimal("500")

    def test_unknown_merchant_is_zero(self, mixed_trades):
        assert compute_balance("nobody", mixed_trades).is_settled

    def test_transfers_never_change_balance(self, mixed_trades):
        without_transfers = [t for t in mixed_trades if t.type is not TradeType.TRANSFER]
        extra = make_trade(
            "transfer", "m-2", "99999", "t-extra",
            amount_paid=Decimal("1"), amount_received=Decimal("5000"),
        )

        for merchant_id in ("m-1", "m-2"):
            assert compute_balance(merchant_id, mixed_trades + [extra]) == compute_balance(
                merchant_id, without_transfers
            )

    def test_repeated_calls_are_identical(self, mixed_trades):
        snapshot = list(mixed_trades)

        first = compute_balance("m-2", mixed_trades)
        second = compute_balance("m-2", mixed_trades)

        assert first == second
        assert mixed_trades == snapshot

    def test_accepts_generators(self, mixed_trades):
        assert compute_balance("m-1", (t for t in mixed_trades)) == compute_balance(
            "m-1", mixed_trades
        )

    def test_invariants_hold_across_histories(self, mixed_trades):
        histories = [mixed_trades[:i] for i in range(len(mixed_trades) + 1)]
        for history in histories:
            for merchant_id in ("m-1", "m-2"):
                balance = compute_balance(merchant_id, history)
                assert balance.due >= 0 and balance.owe >= 0
                assert balance.due == 0 or balance.owe == 0


class TestComputeAllBalances:
    def test_returns_balance_per_merchant(self, mixed_trades):
        balances = compute_all_balances(mixed_trades)

        assert set(balances) == {"m-1", "m-2"}
        assert balances["m-1"] == Balance(due=Decimal("100"), owe=Decimal("0"))
        # 2000 - 500 received - 700 settled
        assert balances["m-2"] == Balance(due=Decimal("800"), owe=Decimal("0"))

    def test_skips_trades_without_merchant(self):
        trades = [make_trade("sell", None, "100")]

        assert compute_all_balances(trades) == {}
