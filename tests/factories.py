"""Record builders shared by the tests."""

from decimal import Decimal

from bullion_ledger.models import Trade, TradeType


def make_trade(
    trade_type: TradeType | str,
    merchant_id: str | None = "m-1",
    total_amount: str | Decimal = "0",
    trade_id: str = "t-1",
    **kwargs,
) -> Trade:
    """Build a Trade with sensible defaults for tests."""
    return Trade(
        id=trade_id,
        type=TradeType(trade_type),
        merchant_id=merchant_id,
        total_amount=Decimal(total_amount),
        **kwargs,
    )
