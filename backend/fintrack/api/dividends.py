"""Dividend metadata API endpoint."""
from decimal import Decimal
from fastapi import APIRouter, Depends

from fintrack.api.deps import get_max_dividend_yield
from fintrack.schemas.position import Position
from fintrack.schemas.requests import DividendInfoRequest
from fintrack.services.dividends import apply_dividend_info

router = APIRouter(prefix="/api/positions", tags=["dividends"])


@router.post("/dividend-info", response_model=Position)
async def attach_dividend_info(
    request: DividendInfoRequest,
    max_yield: Decimal = Depends(get_max_dividend_yield)
):
    """
    Attach looked-up dividend data to a position.

    Data implying a yield above the configured ceiling is discarded: the
    position comes back with a dividend of 0 and frequency "N/A".
    """
    return apply_dividend_info(
        request.position,
        request.dividend_per_share,
        dividend_frequency=request.dividend_frequency,
        ex_date=request.ex_date,
        max_yield=max_yield,
    )
