"""Command line entry point.

Usage:
    python -m bullion_ledger balances
    python -m bullion_ledger stock --save
    python -m bullion_ledger summary --from 2025-04-01 --to 2026-03-31
"""

import argparse
import asyncio
import sys
from datetime import date

import structlog

from bullion_ledger.analytics import summarize
from bullion_ledger.balance import compute_balance
from bullion_ledger.cache import DataCache
from bullion_ledger.clients import LedgerAPIClient, LedgerAPIError
from bullion_ledger.config import configure_logging, get_settings
from bullion_ledger.formatting import format_currency, format_currency_in_cr, format_weight
from bullion_ledger.models import MetalType, Trade
from bullion_ledger.services import (
    ExpenseService,
    IncomeService,
    MerchantService,
    StockService,
    TradeService,
)
from bullion_ledger.stock import compute_stock, grams_to_kilograms

logger = structlog.get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bullion-ledger",
        description="Bookkeeping reports for gold and silver traders",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    balances = sub.add_parser("balances", help="Show what each merchant owes or is owed")
    balances.add_argument(
        "--save",
        action="store_true",
        help="Write recomputed balances back to the merchant records",
    )

    stock = sub.add_parser("stock", help="Show stock computed from trades")
    stock.add_argument(
        "--save", action="store_true", help="Persist the recomputed stock levels"
    )

    summary = sub.add_parser("summary", help="Show profit summary")
    summary.add_argument("--from", dest="start", type=date.fromisoformat, default=None)
    summary.add_argument("--to", dest="end", type=date.fromisoformat, default=None)

    return parser


def _trade_service(client: LedgerAPIClient, cache: DataCache) -> TradeService:
    return TradeService(client, cache, cache_ttl=get_settings().trades_cache_ttl_seconds)


async def _load_trades(trades: TradeService) -> list[Trade]:
    result = await trades.list_trades()
    if not result.ok or result.data is None:
        raise LedgerAPIError(result.error or "Could not load trades")
    return result.data


async def show_balances(client: LedgerAPIClient, cache: DataCache, save: bool) -> None:
    trade_list = await _load_trades(_trade_service(client, cache))
    merchants_service = MerchantService(client, cache)
    result = await merchants_service.list_merchants()
    if not result.ok or result.data is None:
        raise LedgerAPIError(result.error or "Could not load merchants")
    merchants = result.data

    if save:
        refreshed = await merchants_service.refresh_balances(merchants, trade_list)
        if not refreshed.ok:
            raise LedgerAPIError(refreshed.error or "Could not save balances")

    for merchant in merchants:
        balance = compute_balance(merchant.id, trade_list)
        print(
            f"{merchant.name:<30} due {format_currency(balance.due):>14}"
            f"  owe {format_currency(balance.owe):>14}"
        )


async def show_stock(client: LedgerAPIClient, cache: DataCache, save: bool) -> None:
    trade_list = await _load_trades(_trade_service(client, cache))
    levels = compute_stock(trade_list)

    if save:
        saved = await StockService(client, cache).recalculate(trade_list)
        if not saved.ok:
            raise LedgerAPIError(saved.error or "Could not save stock")

    print(f"Gold   {format_weight(levels[MetalType.GOLD], MetalType.GOLD)}")
    print(
        f"Silver {format_weight(grams_to_kilograms(levels[MetalType.SILVER]), MetalType.SILVER)}"
    )


async def show_summary(
    client: LedgerAPIClient, cache: DataCache, start: date | None, end: date | None
) -> None:
    trade_list = await _load_trades(_trade_service(client, cache))
    expenses = await ExpenseService(client, cache).list_entries()
    income = await IncomeService(client, cache).list_entries()
    for result in (expenses, income):
        if not result.ok:
            raise LedgerAPIError(result.error or "Could not load entries")

    summary = summarize(trade_list, expenses.data or [], income.data or [], start, end)
    print(f"Sales            {format_currency_in_cr(summary.total_sales)}")
    print(f"Purchases        {format_currency_in_cr(summary.total_purchases)}")
    print(f"Transfer charges {format_currency(summary.total_transfer_charges)}")
    print(f"Expenses         {format_currency(summary.total_expenses)}")
    print(f"Income           {format_currency(summary.total_income)}")
    print(f"Gross profit     {format_currency(summary.gross_profit)}")
    print(f"Net profit       {format_currency(summary.net_profit)}")
    print()
    for month in summary.monthly:
        print(f"{month.label:<10} {format_currency(month.profit):>14}")


async def main(argv: list[str] | None = None) -> int:
    configure_logging()
    args = build_parser().parse_args(argv)
    cache = DataCache(default_ttl=get_settings().cache_ttl_seconds)

    try:
        async with LedgerAPIClient() as client:
            if args.command == "balances":
                await show_balances(client, cache, args.save)
            elif args.command == "stock":
                await show_stock(client, cache, args.save)
            elif args.command == "summary":
                await show_summary(client, cache, args.start, args.end)
    except LedgerAPIError as e:
        logger.error("command_failed", command=args.command, error=str(e))
        return 1
    return 0


def run() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
