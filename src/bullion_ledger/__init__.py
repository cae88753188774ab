"""Bullion Ledger - bookkeeping for gold and silver traders."""

__version__ = "0.1.0"

from bullion_ledger.analytics import AnalyticsSummary, dashboard_stats, summarize
from bullion_ledger.balance import compute_all_balances, compute_balance
from bullion_ledger.cache import DataCache
from bullion_ledger.clients import LedgerAPIClient, LedgerAPIError
from bullion_ledger.config import configure_logging, get_settings
from bullion_ledger.formatting import format_currency, format_currency_in_cr, format_weight
from bullion_ledger.models import (
    Balance,
    LedgerEntry,
    Merchant,
    MetalType,
    SettlementDirection,
    SettlementType,
    StockLevel,
    Trade,
    TradeType,
)
from bullion_ledger.stock import compute_stock

__all__ = [
    # Version
    "__version__",
    # Records
    "Trade",
    "TradeType",
    "MetalType",
    "SettlementType",
    "SettlementDirection",
    "Merchant",
    "StockLevel",
    "LedgerEntry",
    "Balance",
    # Calculations
    "compute_balance",
    "compute_all_balances",
    "compute_stock",
    "summarize",
    "dashboard_stats",
    "AnalyticsSummary",
    # Display
    "format_currency",
    "format_currency_in_cr",
    "format_weight",
    # Backend
    "LedgerAPIClient",
    "LedgerAPIError",
    "DataCache",
    # Config
    "get_settings",
    "configure_logging",
]
