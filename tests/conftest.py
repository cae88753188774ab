"""Pytest configuration and fixtures."""

import os
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

# Set test environment variables before importing settings
os.environ.setdefault("LEDGER_API_KEY", "anon-test-key")
os.environ.setdefault("LEDGER_EMAIL", "owner@example.com")
os.environ.setdefault("LEDGER_PASSWORD", "testpassword")

from bullion_ledger.config import configure_logging  # noqa: E402
from bullion_ledger.models import (  # noqa: E402
    MetalType,
    SettlementDirection,
    SettlementType,
)
from factories import make_trade  # noqa: E402


@pytest.fixture(autouse=True, scope="session")
def structured_logging():
    """Send structlog events through stdlib logging on stderr, as the CLI does."""
    configure_logging(level="DEBUG", format="console")


@pytest.fixture
def mixed_trades():
    """A small history across two merchants and both metals."""
    return [
        make_trade(
            "buy", "m-1", "1000", "t-1",
            amount_paid=Decimal("600"), metal_type=MetalType.GOLD, weight=Decimal("10"),
        ),
        make_trade(
            "sell", "m-1", "500", "t-2",
            metal_type=MetalType.GOLD, weight=Decimal("4"),
        ),
        make_trade(
            "sell", "m-2", "2000", "t-3",
            amount_received=Decimal("500"), metal_type=MetalType.SILVER,
            weight=Decimal("3000"),
        ),
        make_trade(
            "settlement", "m-2", "700", "t-4",
            settlement_type=SettlementType.SILVER,
            settlement_direction=SettlementDirection.RECEIVING,
            metal_type=MetalType.SILVER, weight=Decimal("1000"),
        ),
        make_trade(
            "transfer", "m-2", "0", "t-5",
            transfer_charges=Decimal("150"), metal_type=MetalType.GOLD,
            weight=Decimal("50"),
        ),
    ]


@pytest.fixture
def mock_login_response():
    """Mock successful password-grant token response."""
    return {
        "access_token": "access-token-123",
        "refresh_token": "refresh-token-123",
        "token_type": "bearer",
        "expires_in": 3600,
        "user": {
            "id": "11111111-1111-1111-1111-111111111111",
            "email": "owner@example.com",
        },
    }


@pytest.fixture
def trade_rows():
    """Rows as returned by the trades table."""
    return [
        {
            "id": "t-100",
            "user_id": "11111111-1111-1111-1111-111111111111",
            "user_email": "owner@example.com",
            "type": "sell",
            "metal_type": "gold",
            "quantity": "12.5",
            "rate": "6200",
            "amount": "77500",
            "merchant_id": "m-1",
            "party_name": "Shree Jewellers",
            "amount_received": "27500",
            "settlement_type": None,
            "settlement_direction": None,
            "transfer_charges": None,
            "notes": None,
            "created_at": "2026-03-02T10:15:00Z",
            "updated_at": "2026-03-02T10:15:00Z",
        },
        {
            "id": "t-101",
            "type": "buy",
            "metal_type": "silver",
            "quantity": 2000,
            "rate": 80,
            "amount": 160000,
            "merchant_id": None,
            "party_name": "Kumar Bullion",
            "amount_paid": 100000,
            "created_at": "2026-03-01T09:00:00Z",
        },
    ]


@pytest.fixture
def api():
    """A client double with async table methods and a signed-in user."""
    user = {"id": "u-1", "email": "owner@example.com"}
    client = MagicMock()
    client.current_user = user
    client.get_user = AsyncMock(return_value=user)
    client.select = AsyncMock(return_value=[])
    client.insert = AsyncMock(return_value={})
    client.update = AsyncMock(return_value=[])
    client.delete = AsyncMock(return_value=None)
    return client
