"""Performance and portfolio schemas."""
from pydantic import BaseModel, Field
from decimal import Decimal
from typing import List
from datetime import date as date_type


class PerformanceResult(BaseModel):
    """Mark-to-market performance of a single position."""
    total_cost: Decimal = Field(..., description="avg_cost * shares plus the notional buy fee")
    market_value: Decimal = Field(..., description="current_price * shares")
    estimated_return: Decimal = Field(..., description="Market value less sell fee and transaction tax")
    net_profit: Decimal = Field(..., description="estimated_return - total_cost")
    roi: float = Field(..., description="net_profit / total_cost * 100, or 0 without a cost basis")
    buy_fee: Decimal = Field(..., description="Commission on entry")
    sell_fee: Decimal = Field(..., description="Commission on a sale at the current price")
    tax: Decimal = Field(..., description="Transaction tax on a sale at the current price")
    total_dividends: Decimal = Field(..., description="Dividend income attributed to the symbol")

    @classmethod
    def zero(cls, total_dividends: Decimal = Decimal("0")) -> "PerformanceResult":
        """Result for a position without shares or without a cost basis."""
        nothing = Decimal("0")
        return cls(
            total_cost=nothing,
            market_value=nothing,
            estimated_return=nothing,
            net_profit=nothing,
            roi=0.0,
            buy_fee=nothing,
            sell_fee=nothing,
            tax=nothing,
            total_dividends=total_dividends,
        )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "total_cost": "600239",
                    "market_value": "650000",
                    "estimated_return": "647791",
                    "net_profit": "47552",
                    "roi": 7.922,
                    "buy_fee": "239",
                    "sell_fee": "259",
                    "tax": "1950",
                    "total_dividends": "0"
                }
            ]
        }
    }


class AllocationEntry(BaseModel):
    """One slice of the allocation chart."""
    name: str = Field(..., description="Symbol, or N/A when the position has none")
    value: Decimal = Field(..., description="Market value")
    roi: float = Field(..., description="Position ROI percentage")


class DividendSummary(BaseModel):
    """Dividend income overview."""
    realized_dividends: Decimal = Field(..., description="Dividends booked in the current year")
    estimated_annual_dividend: Decimal = Field(..., description="shares * dividend_per_share over all positions")


class PortfolioSummary(BaseModel):
    """Schema for the investment dashboard header."""
    total_market_value: Decimal = Field(..., description="Sum of position market values")
    total_cost: Decimal = Field(..., description="Sum of position total costs")
    total_pl: Decimal = Field(..., description="total_market_value - total_cost")
    total_pl_percent: float = Field(..., description="total_pl / total_cost * 100")
    allocation: List[AllocationEntry] = Field(default_factory=list)
    dividends: DividendSummary
    has_stale_prices: bool = Field(default=False, description="Whether any position price is stale")


class SnapshotPosition(BaseModel):
    """Per-symbol value inside a daily snapshot."""
    symbol: str
    market_value: Decimal


class StockSnapshot(BaseModel):
    """Daily stock portfolio snapshot."""
    date: date_type = Field(..., description="Snapshot date")
    total_market_value: Decimal = Field(..., description="Sum of market values")
    total_unrealized_pl: Decimal = Field(..., description="Sum of position net profits")
    positions: List[SnapshotPosition] = Field(default_factory=list)


class TradeStatistics(BaseModel):
    """Aggregate figures over a set of brokerage trades."""
    realized_profit: Decimal = Field(..., description="Sum of broker-reported profit on SELL rows")
    net_cash_flow: Decimal = Field(..., description="Sum of signed trade amounts")
    total_fees: Decimal = Field(..., description="Sum of fees and taxes")
    trade_count: int = Field(..., description="Number of trades")
    range_label: str = Field(default="所有紀錄", description="Display label of the reporting period")
