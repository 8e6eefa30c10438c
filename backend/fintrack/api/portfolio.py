"""Portfolio API endpoints."""
from fastapi import APIRouter, Depends, HTTPException
from typing import List
import logging

from fintrack.api.deps import fee_discount_or_default, get_dividend_match_mode, get_fee_schedule
from fintrack.config import settings
from fintrack.models.transaction import DividendMatchMode
from fintrack.schemas.portfolio import PortfolioSummary, StockSnapshot, TradeStatistics
from fintrack.schemas.requests import PortfolioRequest, SnapshotRequest, TradeStatisticsRequest
from fintrack.services.fee_schedule import FeeSchedule
from fintrack.services.portfolio_aggregator import PortfolioAggregator
from fintrack.utils.time_utils import resolve_time_range

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["portfolio"])


@router.post("/portfolio/summary", response_model=PortfolioSummary)
async def portfolio_summary(
    request: PortfolioRequest,
    fee_schedule: FeeSchedule = Depends(get_fee_schedule),
    dividend_match: DividendMatchMode = Depends(get_dividend_match_mode)
):
    """
    Get the investment dashboard summary.

    Returns total value, cost, P&L, allocation and dividend overview of the
    supplied stock positions.
    """
    return PortfolioAggregator.summarize_portfolio(
        request.positions,
        request.transactions,
        fee_discount_rate=fee_discount_or_default(request.fee_discount_rate),
        fee_schedule=fee_schedule,
        dividend_match=dividend_match,
        stale_after_days=settings.stale_after_days,
    )


@router.post("/portfolio/snapshot", response_model=List[StockSnapshot])
async def record_snapshot(
    request: SnapshotRequest,
    fee_schedule: FeeSchedule = Depends(get_fee_schedule),
    dividend_match: DividendMatchMode = Depends(get_dividend_match_mode)
):
    """Take today's stock snapshot and return the updated history."""
    snapshot = PortfolioAggregator.take_stock_snapshot(
        request.positions,
        request.transactions,
        fee_discount_rate=fee_discount_or_default(request.fee_discount_rate),
        fee_schedule=fee_schedule,
        dividend_match=dividend_match,
    )
    history = PortfolioAggregator.upsert_snapshot(
        request.history,
        snapshot,
        retention=settings.snapshot_retention_days,
    )
    logger.info(f"Recorded snapshot for {snapshot.date}, history size {len(history)}")
    return history


@router.post("/stock-transactions/statistics", response_model=TradeStatistics)
async def trade_statistics(request: TradeStatisticsRequest):
    """
    Get realized profit, cash flow and fees of trades in a reporting period.

    Period fields of the request body:
    - range: MONTH, QUARTER, HALF_YEAR, YEAR, CUSTOM or ALL
    - start / end: bounds used with CUSTOM
    """
    try:
        start, end = resolve_time_range(request.range, custom_start=request.start, custom_end=request.end)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    filtered = PortfolioAggregator.filter_stock_transactions(
        request.transactions,
        start=start,
        end=end,
        query=request.query,
        name_map=request.name_map,
    )
    return PortfolioAggregator.compute_trade_statistics(filtered, start=start, end=end)
