"""
Pydantic schemas for API request/response validation.
"""
from fintrack.schemas.position import Position, InventoryRecord
from fintrack.schemas.transaction import (
    Transaction,
    StockTransaction,
    TransactionParseResult,
    InventoryParseResult,
    ImportSummary
)
from fintrack.schemas.portfolio import (
    PerformanceResult,
    AllocationEntry,
    DividendSummary,
    PortfolioSummary,
    SnapshotPosition,
    StockSnapshot,
    TradeStatistics
)

__all__ = [
    "Position",
    "InventoryRecord",
    "Transaction",
    "StockTransaction",
    "TransactionParseResult",
    "InventoryParseResult",
    "ImportSummary",
    "PerformanceResult",
    "AllocationEntry",
    "DividendSummary",
    "PortfolioSummary",
    "SnapshotPosition",
    "StockSnapshot",
    "TradeStatistics",
]
