"""
Tests for portfolio aggregation service.

Covers the dashboard summary, daily snapshots and trade statistics.
"""
import pytest
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

from fintrack.models.transaction import TradeSide
from fintrack.schemas.portfolio import StockSnapshot
from fintrack.schemas.position import Position
from fintrack.schemas.transaction import StockTransaction
from fintrack.services.portfolio_aggregator import PortfolioAggregator

pytestmark = pytest.mark.unit

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
TODAY = date(2024, 6, 1)


@pytest.fixture
def holdings(tsmc_position, cash_asset):
    """Two fresh stock positions plus a cash asset."""
    tsmc = tsmc_position.model_copy(update={
        "dividend_per_share": Decimal("10"),
        "last_updated": NOW - timedelta(days=1),
    })
    etf = Position(
        symbol="0050",
        shares=1000,
        avg_cost=100,
        current_price=120,
        dividend_per_share="2.5",
        last_updated=NOW - timedelta(days=2),
    )
    return [tsmc, cash_asset, etf]


class TestSummarizePortfolio:
    """Test the dashboard summary."""

    def test_totals(self, holdings):
        summary = PortfolioAggregator.summarize_portfolio(holdings, today=TODAY, now=NOW)

        assert summary.total_market_value == Decimal("770000")
        assert summary.total_cost == Decimal("700278")
        assert summary.total_pl == Decimal("69722")
        assert summary.total_pl_percent == pytest.approx(9.9563, abs=1e-3)

    def test_allocation_only_covers_stocks(self, holdings):
        summary = PortfolioAggregator.summarize_portfolio(holdings, today=TODAY, now=NOW)

        assert [entry.name for entry in summary.allocation] == ["2330", "0050"]
        assert summary.allocation[0].value == Decimal("650000")
        assert summary.allocation[0].roi == pytest.approx(7.9222, abs=1e-3)

    def test_allocation_without_symbol(self):
        positions = [Position(name="Unlisted", shares=10, avg_cost=10, current_price=12)]

        summary = PortfolioAggregator.summarize_portfolio(positions, today=TODAY, now=NOW)

        assert summary.allocation[0].name == "N/A"

    def test_dividend_overview(self, holdings, dividend_entry):
        ledger = [
            dividend_entry("2330 股利", 3000, booked=date(2024, 1, 10)),
            dividend_entry("2330 股利", 2000, booked=date(2023, 7, 10)),
        ]

        summary = PortfolioAggregator.summarize_portfolio(holdings, ledger, today=TODAY, now=NOW)

        assert summary.dividends.realized_dividends == Decimal("3000")
        assert summary.dividends.estimated_annual_dividend == Decimal("12500")

    def test_fresh_prices(self, holdings):
        summary = PortfolioAggregator.summarize_portfolio(holdings, today=TODAY, now=NOW)
        assert summary.has_stale_prices is False

    def test_stale_prices(self, holdings):
        holdings[0] = holdings[0].model_copy(update={"last_updated": NOW - timedelta(days=30)})

        summary = PortfolioAggregator.summarize_portfolio(holdings, today=TODAY, now=NOW)

        assert summary.has_stale_prices is True

    def test_custom_stale_threshold(self, holdings):
        summary = PortfolioAggregator.summarize_portfolio(
            holdings, today=TODAY, now=NOW, stale_after_days=1
        )
        assert summary.has_stale_prices is True

    def test_empty_portfolio(self):
        summary = PortfolioAggregator.summarize_portfolio([], today=TODAY, now=NOW)

        assert summary.total_market_value == 0
        assert summary.total_pl_percent == 0.0
        assert summary.allocation == []
        assert summary.has_stale_prices is False


class TestSnapshots:
    """Test daily snapshots and snapshot history."""

    def test_take_snapshot(self, holdings):
        unlisted = Position(name="Unlisted", shares=10, avg_cost=10, current_price=12)

        snapshot = PortfolioAggregator.take_stock_snapshot(holdings + [unlisted], today=TODAY)

        assert snapshot.date == TODAY
        assert snapshot.total_market_value == Decimal("770000")
        assert snapshot.total_unrealized_pl == Decimal("47552") + Decimal("19794")
        assert [p.symbol for p in snapshot.positions] == ["2330", "0050"]

    def test_upsert_replaces_same_date(self):
        old = StockSnapshot(date=TODAY, total_market_value=Decimal("1"), total_unrealized_pl=Decimal("0"))
        earlier = StockSnapshot(date=TODAY - timedelta(days=1), total_market_value=Decimal("2"), total_unrealized_pl=Decimal("0"))
        new = StockSnapshot(date=TODAY, total_market_value=Decimal("3"), total_unrealized_pl=Decimal("0"))

        history = PortfolioAggregator.upsert_snapshot([old, earlier], new)

        assert [s.date for s in history] == [TODAY - timedelta(days=1), TODAY]
        assert history[-1].total_market_value == Decimal("3")

    def test_upsert_trims_to_retention(self):
        history = [
            StockSnapshot(date=TODAY - timedelta(days=n), total_market_value=Decimal(n), total_unrealized_pl=Decimal("0"))
            for n in range(1, 6)
        ]
        new = StockSnapshot(date=TODAY, total_market_value=Decimal("0"), total_unrealized_pl=Decimal("0"))

        result = PortfolioAggregator.upsert_snapshot(history, new, retention=3)

        assert [s.date for s in result] == [TODAY - timedelta(days=2), TODAY - timedelta(days=1), TODAY]


class TestTradeStatistics:
    """Test trade filtering and statistics."""

    @pytest.fixture
    def trades(self):
        return [
            StockTransaction(date=date(2024, 1, 15), symbol="2330", side=TradeSide.BUY,
                             shares=1000, price=600, fees=239, amount=-600239),
            StockTransaction(date=date(2024, 4, 20), symbol="2330", side=TradeSide.SELL,
                             shares=500, price=650, fees=1104, realized_profit=24500, amount=323896),
            StockTransaction(date=date(2024, 5, 2), symbol="0050", side=TradeSide.BUY,
                             shares=100, price=150, fees=20, amount=-15020),
        ]

    def test_statistics(self, trades):
        stats = PortfolioAggregator.compute_trade_statistics(trades)

        assert stats.realized_profit == Decimal("24500")
        assert stats.net_cash_flow == Decimal("-291363")
        assert stats.total_fees == Decimal("1363")
        assert stats.trade_count == 3
        assert stats.range_label == "所有紀錄"

    def test_realized_profit_ignores_buy_rows(self):
        buy = StockTransaction(date=date(2024, 1, 15), symbol="2330", side=TradeSide.BUY, realized_profit=999)
        assert PortfolioAggregator.compute_trade_statistics([buy]).realized_profit == 0

    def test_range_label(self, trades):
        stats = PortfolioAggregator.compute_trade_statistics(
            trades, start=date(2024, 4, 1), end=date(2024, 6, 30)
        )
        assert stats.range_label == "2024/04/01 ~ 2024/06/30"

    def test_filter_by_date_window(self, trades):
        filtered = PortfolioAggregator.filter_stock_transactions(
            trades, start=date(2024, 4, 1), end=date(2024, 4, 30)
        )
        assert [t.date for t in filtered] == [date(2024, 4, 20)]

    def test_filter_bounds_are_inclusive(self, trades):
        filtered = PortfolioAggregator.filter_stock_transactions(
            trades, start=date(2024, 1, 15), end=date(2024, 5, 2)
        )
        assert len(filtered) == 3

    def test_filter_by_symbol(self, trades):
        filtered = PortfolioAggregator.filter_stock_transactions(trades, query="0050")
        assert [t.symbol for t in filtered] == ["0050"]

    def test_filter_by_name(self, trades):
        filtered = PortfolioAggregator.filter_stock_transactions(
            trades, query=" 台積 ", name_map={"2330": "台積電", "0050": "元大台灣50"}
        )
        assert {t.symbol for t in filtered} == {"2330"}
        assert len(filtered) == 2

    def test_filter_is_case_insensitive(self):
        trade = StockTransaction(date=date(2024, 1, 15), symbol="AAPL", side=TradeSide.BUY)
        assert PortfolioAggregator.filter_stock_transactions([trade], query="aapl") == [trade]
