"""Position performance API endpoint."""
from fastapi import APIRouter, Depends
import logging

from fintrack.api.deps import fee_discount_or_default, get_dividend_match_mode, get_fee_schedule
from fintrack.models.transaction import DividendMatchMode
from fintrack.schemas.portfolio import PerformanceResult
from fintrack.schemas.requests import PerformanceRequest
from fintrack.services.calculations import FinancialCalculations
from fintrack.services.fee_schedule import FeeSchedule

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/performance", tags=["performance"])


@router.post("", response_model=PerformanceResult)
async def calculate_performance(
    request: PerformanceRequest,
    fee_schedule: FeeSchedule = Depends(get_fee_schedule),
    dividend_match: DividendMatchMode = Depends(get_dividend_match_mode)
):
    """
    Calculate the performance of one position as if sold at its current price.

    Fees and taxes follow the configured schedule; dividends are attributed
    from the supplied ledger entries.
    """
    result = FinancialCalculations.calculate_stock_performance(
        request.position,
        request.transactions,
        fee_discount_rate=fee_discount_or_default(request.fee_discount_rate),
        fee_schedule=fee_schedule,
        dividend_match=dividend_match,
    )
    logger.debug(f"Performance for {request.position.symbol}: ROI {result.roi:.2f}%")
    return result
