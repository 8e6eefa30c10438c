"""
Position enumerations - Asset classes held in the tracker.
"""
import enum


class AssetType(str, enum.Enum):
    """Asset type enumeration."""
    CASH = "CASH"
    STOCK = "STOCK"
    FUND = "FUND"
    REAL_ESTATE = "REAL_ESTATE"
    CRYPTO = "CRYPTO"
    DEBT = "DEBT"
    OTHER = "OTHER"
