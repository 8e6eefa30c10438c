"""
Models package - Import all domain enumerations for easy access.
"""
from fintrack.models.position import AssetType
from fintrack.models.transaction import TransactionType, TradeSide, DividendMatchMode

__all__ = [
    "AssetType",
    "TransactionType",
    "TradeSide",
    "DividendMatchMode",
]
