"""Position schemas."""
from pydantic import BaseModel, Field, field_validator
from datetime import date, datetime
from decimal import Decimal
from typing import Optional
import uuid

from fintrack.models.position import AssetType
from fintrack.utils.numbers import to_decimal


class Position(BaseModel):
    """
    A holding of one ticker, as maintained by the asset management flows.

    Numeric fields are lenient: values that are not numbers are stored as zero
    instead of being rejected, so a partially filled asset still renders.
    """
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), description="Asset identifier")
    asset_type: AssetType = Field(default=AssetType.STOCK, description="Asset class")
    symbol: Optional[str] = Field(None, description="Exchange ticker, e.g. 2330 or 0050")
    name: str = Field(default="", description="Display name")
    shares: Optional[Decimal] = Field(None, description="Quantity held")
    avg_cost: Optional[Decimal] = Field(None, description="Weighted average acquisition price per share")
    current_price: Optional[Decimal] = Field(None, description="Latest known market price per share")
    amount: Optional[Decimal] = Field(None, description="Value in home currency")
    is_etf: Optional[bool] = Field(None, description="Explicit ETF classification; None falls back to the symbol prefix")
    dividend_per_share: Optional[Decimal] = Field(None, description="Trailing twelve month cash dividend per share")
    dividend_frequency: Optional[str] = Field(None, description="e.g. Quarterly, Annual")
    ex_date: Optional[date] = Field(None, description="Ex-dividend date")
    payment_date: Optional[date] = Field(None, description="Dividend payment date")
    last_updated: Optional[datetime] = Field(None, description="Last price or metadata refresh")

    @field_validator("shares", "avg_cost", "current_price", "amount", "dividend_per_share", mode="before")
    @classmethod
    def coerce_number(cls, v):
        """Store non-numeric input as zero."""
        if v is None:
            return None
        return to_decimal(v)

    @field_validator("symbol")
    @classmethod
    def strip_symbol(cls, v):
        """Trim surrounding whitespace from the ticker."""
        if v is None:
            return v
        return v.strip() or None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "symbol": "2330",
                    "name": "台積電",
                    "shares": "1000",
                    "avg_cost": "600",
                    "current_price": "650",
                    "is_etf": False,
                    "dividend_per_share": "14.5",
                    "dividend_frequency": "Quarterly"
                }
            ]
        }
    }


class InventoryRecord(BaseModel):
    """Position fragment parsed from a brokerage inventory CSV."""
    symbol: str = Field(..., description="Ticker with any exchange suffix removed")
    name: str = Field(default="", description="Name as exported by the broker")
    shares: Decimal = Field(default=Decimal("0"), description="Total shares held")
    avg_cost: Decimal = Field(default=Decimal("0"), description="Average cost per share")
    current_price: Decimal = Field(default=Decimal("0"), description="Price at export time")
