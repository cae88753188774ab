"""Profit summaries and dashboard figures."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from bullion_ledger.models import ZERO, LedgerEntry, MetalType, Trade, TradeType
from bullion_ledger.stock import grams_to_kilograms

MONTHS_IN_SUMMARY = 12


@dataclass(frozen=True)
class MonthlyFigures:
    """Totals for one calendar month."""

    year: int
    month: int
    sales: Decimal = ZERO
    purchases: Decimal = ZERO
    transfer_charges: Decimal = ZERO
    expenses: Decimal = ZERO
    income: Decimal = ZERO

    @property
    def label(self) -> str:
        return date(self.year, self.month, 1).strftime("%b %Y")

    @property
    def profit(self) -> Decimal:
        return self.sales - self.purchases + self.transfer_charges - self.expenses + self.income


@dataclass(frozen=True)
class AnalyticsSummary:
    """Aggregate figures over a (possibly filtered) period."""

    total_purchases: Decimal
    total_sales: Decimal
    total_transfer_charges: Decimal
    total_expenses: Decimal
    total_income: Decimal
    monthly: list[MonthlyFigures] = field(default_factory=list)
    type_counts: dict[TradeType, int] = field(default_factory=dict)
    metal_counts: dict[MetalType, int] = field(default_factory=dict)

    @property
    def gross_profit(self) -> Decimal:
        return self.total_sales - self.total_purchases + self.total_transfer_charges

    @property
    def net_profit(self) -> Decimal:
        return self.gross_profit - self.total_expenses + self.total_income


@dataclass(frozen=True)
class DashboardStats:
    """Headline numbers shown on the dashboard."""

    total_trades: int
    total_revenue: Decimal
    total_purchases: Decimal
    gold_stock_grams: Decimal
    silver_stock_kilograms: Decimal


def _in_range(day: date | None, start: date, end: date) -> bool:
    return day is not None and start <= day <= end


def _sum_trades(trades: Iterable[Trade], trade_type: TradeType) -> Decimal:
    return sum((t.total_amount for t in trades if t.type is trade_type), ZERO)


def _sum_transfer_charges(trades: Iterable[Trade]) -> Decimal:
    return sum(
        (t.transfer_charges for t in trades if t.type is TradeType.TRANSFER), ZERO
    )


def _sum_entries(entries: Iterable[LedgerEntry]) -> Decimal:
    return sum((e.amount for e in entries), ZERO)


def _previous_months(today: date, count: int) -> list[tuple[int, int]]:
    """Return (year, month) pairs, oldest first, ending with today's month."""
    months: list[tuple[int, int]] = []
    year, month = today.year, today.month
    for _ in range(count):
        months.append((year, month))
        month -= 1
        if month == 0:
            month = 12
            year -= 1
    months.reverse()
    return months


def monthly_breakdown(
    trades: list[Trade],
    expenses: list[LedgerEntry],
    income: list[LedgerEntry],
    today: date,
    months: int = MONTHS_IN_SUMMARY,
) -> list[MonthlyFigures]:
    """Compute per-month figures for the ``months`` months ending at ``today``."""
    rows: list[MonthlyFigures] = []
    for year, month in _previous_months(today, months):

        def in_month(day: date | None, y: int = year, m: int = month) -> bool:
            return day is not None and day.year == y and day.month == m

        month_trades = [t for t in trades if in_month(t.effective_date)]
        rows.append(
            MonthlyFigures(
                year=year,
                month=month,
                sales=_sum_trades(month_trades, TradeType.SELL),
                purchases=_sum_trades(month_trades, TradeType.BUY),
                transfer_charges=_sum_transfer_charges(month_trades),
                expenses=_sum_entries(e for e in expenses if in_month(e.date)),
                income=_sum_entries(i for i in income if in_month(i.date)),
            )
        )
    return rows


def summarize(
    trades: Iterable[Trade],
    expenses: Iterable[LedgerEntry] = (),
    income: Iterable[LedgerEntry] = (),
    start: date | None = None,
    end: date | None = None,
    today: date | None = None,
) -> AnalyticsSummary:
    """Summarize trading, expense and income activity.

    When both ``start`` and ``end`` are given, totals and the monthly
    breakdown only consider records dated inside the inclusive range. Type
    and metal counts always cover every trade passed in.
    """
    all_trades = list(trades)
    period_trades = all_trades
    period_expenses = list(expenses)
    period_income = list(income)

    if start is not None and end is not None:
        period_trades = [t for t in all_trades if _in_range(t.effective_date, start, end)]
        period_expenses = [e for e in period_expenses if _in_range(e.date, start, end)]
        period_income = [i for i in period_income if _in_range(i.date, start, end)]

    type_counts = Counter(t.type for t in all_trades)
    metal_counts = Counter(t.metal_type for t in all_trades if t.metal_type is not None)

    return AnalyticsSummary(
        total_purchases=_sum_trades(period_trades, TradeType.BUY),
        total_sales=_sum_trades(period_trades, TradeType.SELL),
        total_transfer_charges=_sum_transfer_charges(period_trades),
        total_expenses=_sum_entries(period_expenses),
        total_income=_sum_entries(period_income),
        monthly=monthly_breakdown(
            period_trades, period_expenses, period_income, today or date.today()
        ),
        type_counts={trade_type: type_counts.get(trade_type, 0) for trade_type in TradeType},
        metal_counts={metal: metal_counts.get(metal, 0) for metal in MetalType},
    )


def dashboard_stats(
    trades: Iterable[Trade], stock: Mapping[MetalType, Decimal]
) -> DashboardStats:
    trade_list = list(trades)
    return DashboardStats(
        total_trades=len(trade_list),
        total_revenue=_sum_trades(trade_list, TradeType.SELL),
        total_purchases=_sum_trades(trade_list, TradeType.BUY),
        gold_stock_grams=stock.get(MetalType.GOLD, ZERO),
        silver_stock_kilograms=grams_to_kilograms(stock.get(MetalType.SILVER, ZERO)),
    )
