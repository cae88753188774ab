"""Clients for the hosted ledger backend."""

from bullion_ledger.clients.ledger_api import (
    AuthenticationError,
    LedgerAPIClient,
    LedgerAPIError,
    RateLimitError,
)

__all__ = [
    "LedgerAPIClient",
    "LedgerAPIError",
    "AuthenticationError",
    "RateLimitError",
]
