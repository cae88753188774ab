"""Merchant balance computation.

A merchant's balance is rebuilt from the full trade history every time it is
needed. Each trade contributes to one of two accumulators:

- ``due``: what the merchant owes the business (sells, reduced by payments
  received and by settlements).
- ``owe``: what the business owes the merchant (unpaid remainder of buys).

Contributions are summed first and netted against each other once at the
end, because upstream ordering of trades is not guaranteed.
"""

from collections.abc import Hashable, Iterable

from bullion_ledger.models import ZERO, Balance, Trade, TradeType


def compute_balance(merchant_id: Hashable, trades: Iterable[Trade]) -> Balance:
    """Compute the net balance for one merchant.

    Trades belonging to other merchants are ignored. The function never
    raises and never mutates ``trades``.

    Args:
        merchant_id: Identifier compared against ``Trade.merchant_id``.
        trades: Any collection of trades, in any order.

    Returns:
        Balance where at most one of ``due``/``owe`` is positive and
        neither is negative.
    """
    due = ZERO
    owe = ZERO

    for trade in trades:
        if trade.merchant_id != merchant_id:
            continue

        total = trade.total_amount if trade.total_amount is not None else ZERO

        if trade.type is TradeType.BUY:
            if trade.amount_paid is not None and trade.total_amount is not None:
                remaining = total - trade.amount_paid
                if remaining > 0:
                    owe += remaining
        elif trade.type is TradeType.SELL:
            due += total
            if trade.amount_received is not None:
                due -= trade.amount_received
        elif trade.type is TradeType.SETTLEMENT and trade.settlement_type is not None:
            # Metal settlements carry their value in total_amount, same as cash.
            # Untyped settlements (e.g. migrated rows) are not counted.
            due -= total

    if due > 0 and owe > 0:
        if due >= owe:
            due -= owe
            owe = ZERO
        else:
            owe -= due
            due = ZERO

    return Balance(due=max(ZERO, due), owe=max(ZERO, owe))


def compute_all_balances(trades: Iterable[Trade]) -> dict[str, Balance]:
    """Compute balances for every merchant that appears in ``trades``."""
    trade_list = list(trades)
    merchant_ids = {t.merchant_id for t in trade_list if t.merchant_id is not None}
    return {
        merchant_id: compute_balance(merchant_id, trade_list)
        for merchant_id in sorted(merchant_ids)
    }
