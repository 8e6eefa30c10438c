"""Transaction schemas."""
from pydantic import BaseModel, Field, field_validator
from datetime import date as date_type
from decimal import Decimal
from typing import Optional, List
import uuid

from fintrack.models.transaction import TransactionType, TradeSide
from fintrack.schemas.position import InventoryRecord
from fintrack.utils.numbers import to_decimal


def _new_id() -> str:
    return str(uuid.uuid4())


class Transaction(BaseModel):
    """
    Cash-flow ledger entry (expense, income or dividend).

    Dividends are linked to a position only through the free text in item and
    note; there is no foreign key.
    """
    id: str = Field(default_factory=_new_id, description="Entry identifier")
    date: date_type = Field(..., description="Booking date")
    amount: Decimal = Field(default=Decimal("0"), description="Amount in home currency")
    category: str = Field(default="", description="Ledger category")
    item: str = Field(default="", description="Short description, e.g. '2330 股利'")
    note: Optional[str] = Field(None, description="Free-text note")
    type: TransactionType = Field(..., description="EXPENSE, INCOME or DIVIDEND")

    @field_validator("amount", mode="before")
    @classmethod
    def coerce_amount(cls, v):
        """Store non-numeric amounts as zero."""
        return to_decimal(v)


class StockTransaction(BaseModel):
    """Brokerage trade record."""
    id: str = Field(default_factory=_new_id, description="Record identifier")
    date: date_type = Field(..., description="Trade date")
    symbol: str = Field(..., min_length=1, description="Ticker")
    side: TradeSide = Field(..., description="BUY or SELL")
    trade_type: str = Field(default="", description="Broker trade kind, e.g. 普通 or 盤中零股")
    shares: Decimal = Field(default=Decimal("0"), description="Shares traded")
    price: Decimal = Field(default=Decimal("0"), description="Price per share")
    fees: Decimal = Field(default=Decimal("0"), description="Commission + transaction tax + supplementary levy")
    realized_profit: Decimal = Field(default=Decimal("0"), description="Broker-computed profit, SELL rows only")
    amount: Decimal = Field(default=Decimal("0"), description="Signed cash-flow effect")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "date": "2024-01-15",
                    "symbol": "2330",
                    "side": "BUY",
                    "trade_type": "普通",
                    "shares": "1000",
                    "price": "600",
                    "fees": "239",
                    "realized_profit": "0",
                    "amount": "-600239"
                }
            ]
        }
    }


class TransactionParseResult(BaseModel):
    """Result of parsing a trade history CSV."""
    transactions: List[StockTransaction] = Field(default_factory=list)
    error: Optional[str] = Field(None, description="Header-level failure; no records are returned when set")
    skipped: int = Field(default=0, description="Data rows that could not be parsed")


class InventoryParseResult(BaseModel):
    """Result of parsing an inventory CSV."""
    assets: List[InventoryRecord] = Field(default_factory=list)
    error: Optional[str] = Field(None, description="Header-level failure; no records are returned when set")
    skipped: int = Field(default=0, description="Data rows that could not be parsed")


class ImportSummary(BaseModel):
    """Schema for import merge summary response."""
    total_parsed: int = Field(..., description="Number of records offered for import")
    imported: int = Field(default=0, description="Number of new records added")
    updated: int = Field(default=0, description="Number of existing records updated")
    duplicates: int = Field(default=0, description="Number of duplicate records skipped")
    message: str = Field(..., description="Import summary message")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "total_parsed": 12,
                    "imported": 10,
                    "updated": 0,
                    "duplicates": 2,
                    "message": "成功匯入 10 筆新交易紀錄"
                }
            ]
        }
    }
