"""
Transaction enumerations - Ledger entry kinds and brokerage trade sides.
"""
import enum


class TransactionType(str, enum.Enum):
    """Cash-flow ledger entry type."""
    EXPENSE = "EXPENSE"
    INCOME = "INCOME"
    DIVIDEND = "DIVIDEND"


class TradeSide(str, enum.Enum):
    """Brokerage trade side."""
    BUY = "BUY"
    SELL = "SELL"


class DividendMatchMode(str, enum.Enum):
    """
    How dividend ledger entries are attributed to a position.

    SUBSTRING: the symbol appears anywhere in the entry's item or note.
    STRICT: the symbol appears as a whole token, not inside a longer code.
    """
    SUBSTRING = "substring"
    STRICT = "strict"
