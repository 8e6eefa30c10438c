"""Request and response bodies of the stateless API endpoints."""
from pydantic import BaseModel, Field, field_validator
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional

from fintrack.schemas.portfolio import StockSnapshot
from fintrack.schemas.position import Position, InventoryRecord
from fintrack.schemas.transaction import Transaction, StockTransaction, ImportSummary
from fintrack.utils.numbers import to_decimal


class PerformanceRequest(BaseModel):
    """Schema for a single position performance calculation."""
    position: Position
    transactions: List[Transaction] = Field(default_factory=list, description="Ledger entries scanned for dividends")
    fee_discount_rate: Optional[float] = Field(None, description="Commission discount; configured default when omitted")


class PortfolioRequest(BaseModel):
    """Schema for portfolio-wide aggregations."""
    positions: List[Position] = Field(default_factory=list)
    transactions: List[Transaction] = Field(default_factory=list)
    fee_discount_rate: Optional[float] = None


class SnapshotRequest(PortfolioRequest):
    """Portfolio plus the snapshot history to update."""
    history: List[StockSnapshot] = Field(default_factory=list)


class TradeStatisticsRequest(BaseModel):
    """Schema for trade statistics over a reporting period."""
    transactions: List[StockTransaction] = Field(default_factory=list)
    range: str = Field(default="ALL", description="MONTH, QUARTER, HALF_YEAR, YEAR, CUSTOM or ALL")
    start: Optional[date] = Field(None, description="Start date for CUSTOM")
    end: Optional[date] = Field(None, description="End date for CUSTOM")
    query: Optional[str] = Field(None, description="Symbol or name search term")
    name_map: Dict[str, str] = Field(default_factory=dict, description="Symbol to display name")


class TransactionMergeRequest(BaseModel):
    existing: List[StockTransaction] = Field(default_factory=list)
    incoming: List[StockTransaction] = Field(default_factory=list)


class TransactionMergeResponse(BaseModel):
    transactions: List[StockTransaction]
    summary: ImportSummary


class InventoryMergeRequest(BaseModel):
    positions: List[Position] = Field(default_factory=list)
    records: List[InventoryRecord] = Field(default_factory=list)


class InventoryMergeResponse(BaseModel):
    positions: List[Position]
    summary: ImportSummary


class DividendInfoRequest(BaseModel):
    """Looked-up dividend data to screen and attach to a position."""
    position: Position
    dividend_per_share: Decimal = Field(..., description="Trailing twelve month cash dividend per share")
    dividend_frequency: Optional[str] = Field(None, description="e.g. Quarterly, Annual")
    ex_date: Optional[date] = Field(None, description="Ex-dividend date")

    @field_validator("dividend_per_share", mode="before")
    @classmethod
    def coerce_number(cls, v):
        """Store non-numeric input as zero."""
        return to_decimal(v)
