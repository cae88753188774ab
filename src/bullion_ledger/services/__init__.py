"""Data-access services returning result-or-error values."""

from bullion_ledger.services.base import BaseService, ServiceResult
from bullion_ledger.services.entries import EntryService, ExpenseService, IncomeService
from bullion_ledger.services.merchants import MerchantService
from bullion_ledger.services.stock import StockService
from bullion_ledger.services.trades import MigrationReport, TradeService

__all__ = [
    "BaseService",
    "ServiceResult",
    "TradeService",
    "MigrationReport",
    "MerchantService",
    "StockService",
    "EntryService",
    "IncomeService",
    "ExpenseService",
]
