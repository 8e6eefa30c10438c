"""
Pytest configuration for test suite.

Puts the backend directory on sys.path and provides shared fixtures.
"""
import sys
from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest

# Add the backend directory to sys.path for imports
backend_dir = Path(__file__).parent.parent
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

from fintrack.models.position import AssetType  # noqa: E402
from fintrack.models.transaction import TransactionType  # noqa: E402
from fintrack.schemas.position import Position  # noqa: E402
from fintrack.schemas.transaction import Transaction  # noqa: E402


def pytest_configure(config):
    """Register custom markers dynamically."""
    config.addinivalue_line(
        "markers", "integration: tests that exercise the HTTP application"
    )
    config.addinivalue_line(
        "markers", "unit: unit tests of pure services"
    )


@pytest.fixture
def tsmc_position():
    """1000 shares of 2330 bought at 600, now at 650."""
    return Position(
        symbol="2330",
        name="台積電",
        shares=Decimal("1000"),
        avg_cost=Decimal("600"),
        current_price=Decimal("650"),
        is_etf=False,
    )


@pytest.fixture
def cash_asset():
    return Position(asset_type=AssetType.CASH, name="Savings", amount=Decimal("50000"))


@pytest.fixture
def dividend_entry():
    def _make(item, amount, booked=date(2024, 3, 1), note=None, entry_type=TransactionType.DIVIDEND):
        return Transaction(date=booked, amount=amount, item=item, note=note, type=entry_type)
    return _make
