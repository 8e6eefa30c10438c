"""
Portfolio aggregation service - dashboard figures over caller-supplied data.

Key responsibilities:
- Portfolio totals, allocation and dividend overview for stock positions
- Daily stock snapshots and bounded snapshot history
- Trade statistics over a filtered set of brokerage trades
"""
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional
import logging

from fintrack.models.position import AssetType
from fintrack.models.transaction import DividendMatchMode, TradeSide
from fintrack.schemas.portfolio import (
    AllocationEntry,
    DividendSummary,
    PortfolioSummary,
    SnapshotPosition,
    StockSnapshot,
    TradeStatistics,
)
from fintrack.schemas.position import Position
from fintrack.schemas.transaction import StockTransaction, Transaction
from fintrack.services.calculations import FinancialCalculations
from fintrack.services.dividends import estimated_annual_dividend, realized_dividends_for_year
from fintrack.services.fee_schedule import FeeSchedule
from fintrack.utils.numbers import ZERO, safe_percentage
from fintrack.utils.time_utils import get_date_range_description, is_stale

logger = logging.getLogger(__name__)

DEFAULT_STALE_AFTER_DAYS = 14
DEFAULT_SNAPSHOT_RETENTION = 365


def _stock_positions(positions: Iterable[Position]) -> List[Position]:
    return [p for p in positions if p.asset_type == AssetType.STOCK]


class PortfolioAggregator:
    """Aggregations for the investment dashboard."""

    @staticmethod
    def position_is_stale(
        position: Position,
        now: Optional[datetime] = None,
        threshold_days: int = DEFAULT_STALE_AFTER_DAYS
    ) -> bool:
        """Whether the position's price was never refreshed or is older than threshold_days."""
        return is_stale(position.last_updated, now=now, threshold_days=threshold_days)

    @staticmethod
    def summarize_portfolio(
        positions: List[Position],
        transactions: Optional[List[Transaction]] = None,
        fee_discount_rate: Any = None,
        fee_schedule: Optional[FeeSchedule] = None,
        dividend_match: DividendMatchMode = DividendMatchMode.SUBSTRING,
        today: Optional[date] = None,
        now: Optional[datetime] = None,
        stale_after_days: int = DEFAULT_STALE_AFTER_DAYS
    ) -> PortfolioSummary:
        """
        Compute the dashboard summary over all STOCK positions.

        total_pl is market value minus total cost; selling costs are not
        deducted here, unlike the per-position net profit.

        Args:
            positions: All assets; non-stock assets are ignored
            transactions: Ledger entries used for dividend figures
            fee_discount_rate: Commission discount passed to the calculator
            fee_schedule: Fee and tax policy passed to the calculator
            dividend_match: Dividend attribution mode
            today: Reference date for the current-year dividends
            now: Reference time for price staleness
            stale_after_days: Staleness threshold

        Returns:
            PortfolioSummary
        """
        if today is None:
            today = date.today()
        transactions = transactions or []

        stocks = _stock_positions(positions)

        total_market_value = ZERO
        total_cost = ZERO
        estimated_dividends = ZERO
        allocation = []
        for position in stocks:
            performance = FinancialCalculations.calculate_stock_performance(
                position,
                transactions,
                fee_discount_rate=fee_discount_rate,
                fee_schedule=fee_schedule,
                dividend_match=dividend_match,
            )
            total_market_value += performance.market_value
            total_cost += performance.total_cost
            estimated_dividends += estimated_annual_dividend(position)
            allocation.append(AllocationEntry(
                name=position.symbol or "N/A",
                value=performance.market_value,
                roi=performance.roi,
            ))

        total_pl = total_market_value - total_cost
        has_stale_prices = any(
            PortfolioAggregator.position_is_stale(p, now=now, threshold_days=stale_after_days)
            for p in stocks
        )

        logger.debug(
            f"Summarized {len(stocks)} stock positions: value {total_market_value}, "
            f"cost {total_cost}, stale prices: {has_stale_prices}"
        )

        return PortfolioSummary(
            total_market_value=total_market_value,
            total_cost=total_cost,
            total_pl=total_pl,
            total_pl_percent=safe_percentage(total_pl, total_cost),
            allocation=allocation,
            dividends=DividendSummary(
                realized_dividends=realized_dividends_for_year(transactions, today.year),
                estimated_annual_dividend=estimated_dividends,
            ),
            has_stale_prices=has_stale_prices,
        )

    @staticmethod
    def take_stock_snapshot(
        positions: List[Position],
        transactions: Optional[List[Transaction]] = None,
        fee_discount_rate: Any = None,
        fee_schedule: Optional[FeeSchedule] = None,
        dividend_match: DividendMatchMode = DividendMatchMode.SUBSTRING,
        today: Optional[date] = None
    ) -> StockSnapshot:
        """
        Record today's value of every STOCK position that has a symbol.

        Returns:
            StockSnapshot dated today
        """
        if today is None:
            today = date.today()

        total_market_value = ZERO
        total_unrealized_pl = ZERO
        snapshot_positions = []
        for position in _stock_positions(positions):
            if not position.symbol:
                continue

            performance = FinancialCalculations.calculate_stock_performance(
                position,
                transactions,
                fee_discount_rate=fee_discount_rate,
                fee_schedule=fee_schedule,
                dividend_match=dividend_match,
            )
            total_market_value += performance.market_value
            total_unrealized_pl += performance.net_profit
            snapshot_positions.append(SnapshotPosition(
                symbol=position.symbol,
                market_value=performance.market_value,
            ))

        return StockSnapshot(
            date=today,
            total_market_value=total_market_value,
            total_unrealized_pl=total_unrealized_pl,
            positions=snapshot_positions,
        )

    @staticmethod
    def upsert_snapshot(
        history: List[StockSnapshot],
        snapshot: StockSnapshot,
        retention: int = DEFAULT_SNAPSHOT_RETENTION
    ) -> List[StockSnapshot]:
        """
        Insert snapshot into history, replacing any entry with the same date.

        The result is sorted by date ascending and keeps only the newest
        `retention` entries.
        """
        kept = [s for s in history if s.date != snapshot.date]
        kept.append(snapshot)
        kept.sort(key=lambda s: s.date)

        if retention > 0 and len(kept) > retention:
            logger.info(f"Trimming {len(kept) - retention} snapshots beyond retention of {retention}")
            kept = kept[-retention:]

        return kept

    @staticmethod
    def filter_stock_transactions(
        transactions: List[StockTransaction],
        start: Optional[date] = None,
        end: Optional[date] = None,
        query: Optional[str] = None,
        name_map: Optional[Dict[str, str]] = None
    ) -> List[StockTransaction]:
        """
        Select trades inside an inclusive date window matching a search term.

        The search term is matched case-insensitively against the symbol and
        against the display name found in name_map.
        """
        term = (query or "").strip().lower()
        name_map = name_map or {}

        filtered = []
        for transaction in transactions:
            if start is not None and transaction.date < start:
                continue
            if end is not None and transaction.date > end:
                continue
            if term:
                name = name_map.get(transaction.symbol, "")
                if term not in transaction.symbol.lower() and term not in name.lower():
                    continue
            filtered.append(transaction)

        return filtered

    @staticmethod
    def compute_trade_statistics(
        transactions: List[StockTransaction],
        start: Optional[date] = None,
        end: Optional[date] = None
    ) -> TradeStatistics:
        """
        Aggregate realized profit, cash flow and fees over trades.

        start and end only label the result; filter beforehand with
        filter_stock_transactions.
        """
        realized_profit = sum(
            (t.realized_profit for t in transactions if t.side == TradeSide.SELL),
            ZERO,
        )
        net_cash_flow = sum((t.amount for t in transactions), ZERO)
        total_fees = sum((t.fees for t in transactions), ZERO)

        return TradeStatistics(
            realized_profit=realized_profit,
            net_cash_flow=net_cash_flow,
            total_fees=total_fees,
            trade_count=len(transactions),
            range_label=get_date_range_description(start, end),
        )


summarize_portfolio = PortfolioAggregator.summarize_portfolio
take_stock_snapshot = PortfolioAggregator.take_stock_snapshot
upsert_snapshot = PortfolioAggregator.upsert_snapshot
compute_trade_statistics = PortfolioAggregator.compute_trade_statistics
filter_stock_transactions = PortfolioAggregator.filter_stock_transactions
