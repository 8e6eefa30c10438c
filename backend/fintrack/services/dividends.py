"""
Dividend attribution and dividend metadata checks.

Dividend ledger entries carry no reference to a position. They are attributed
by looking for the position's symbol in the entry's item and note text.
"""
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional, Tuple
import logging
import re

from fintrack.models.transaction import DividendMatchMode, TransactionType
from fintrack.schemas.position import Position
from fintrack.schemas.transaction import Transaction
from fintrack.utils.numbers import ZERO, to_decimal

logger = logging.getLogger(__name__)

DEFAULT_MAX_DIVIDEND_YIELD = Decimal("0.20")


def _contains_token(text: str, symbol: str) -> bool:
    # ASCII-only boundaries so "2330股利" still matches 2330 while "1050" does not match 50
    pattern = rf"(?<![0-9A-Za-z]){re.escape(symbol)}(?![0-9A-Za-z])"
    return re.search(pattern, text) is not None


def matches_symbol(
    transaction: Transaction,
    symbol: str,
    mode: DividendMatchMode = DividendMatchMode.SUBSTRING
) -> bool:
    """
    Check whether a ledger entry mentions symbol in its item or note.

    Args:
        transaction: Ledger entry
        symbol: Position ticker
        mode: SUBSTRING matches anywhere; STRICT requires a whole token

    Returns:
        True if the entry is attributed to the symbol
    """
    if not symbol:
        return False

    texts = [transaction.item or "", transaction.note or ""]

    if mode == DividendMatchMode.STRICT:
        return any(_contains_token(text, symbol) for text in texts)

    return any(symbol in text for text in texts)


def sum_attributed_dividends(
    transactions: Optional[Iterable[Transaction]],
    symbol: Optional[str],
    mode: DividendMatchMode = DividendMatchMode.SUBSTRING
) -> Decimal:
    """
    Sum DIVIDEND entries attributed to symbol.

    Entries are neither ordered nor deduplicated; the caller owns the ledger.
    """
    if not symbol or not transactions:
        return ZERO

    total = ZERO
    for transaction in transactions:
        if transaction.type != TransactionType.DIVIDEND:
            continue
        if matches_symbol(transaction, symbol, mode):
            total += to_decimal(transaction.amount)

    return total


def estimated_annual_dividend(position: Position) -> Decimal:
    """Expected yearly cash dividend: shares * trailing dividend per share."""
    shares = to_decimal(position.shares)
    dividend_per_share = to_decimal(position.dividend_per_share)

    if not shares or not dividend_per_share:
        return ZERO

    return shares * dividend_per_share


def realized_dividends_for_year(transactions: Iterable[Transaction], year: int) -> Decimal:
    """Sum of all DIVIDEND entries booked in the given calendar year."""
    return sum(
        (
            to_decimal(t.amount)
            for t in transactions
            if t.type == TransactionType.DIVIDEND and t.date.year == year
        ),
        ZERO,
    )


def is_plausible_yield(
    dividend_per_share: Decimal,
    current_price: Optional[Decimal],
    max_yield: Decimal = DEFAULT_MAX_DIVIDEND_YIELD
) -> bool:
    """
    Check a looked-up dividend against the current price.

    A yield above max_yield almost always means the lookup returned the wrong
    security or a cumulative figure. Without a price nothing can be checked.
    """
    price = to_decimal(current_price)
    if price <= 0:
        return True

    return to_decimal(dividend_per_share) / price <= max_yield


def validate_dividend_yield(
    dividend_per_share: Decimal,
    current_price: Optional[Decimal],
    dividend_frequency: Optional[str] = None,
    max_yield: Decimal = DEFAULT_MAX_DIVIDEND_YIELD
) -> Tuple[Decimal, Optional[str]]:
    """
    Screen looked-up dividend data.

    Returns:
        (dividend_per_share, dividend_frequency) unchanged when plausible,
        otherwise (0, "N/A")
    """
    if is_plausible_yield(dividend_per_share, current_price, max_yield):
        return to_decimal(dividend_per_share), dividend_frequency
    return ZERO, "N/A"


def apply_dividend_info(
    position: Position,
    dividend_per_share: Decimal,
    dividend_frequency: Optional[str] = None,
    ex_date: Optional[date] = None,
    max_yield: Decimal = DEFAULT_MAX_DIVIDEND_YIELD
) -> Position:
    """
    Return a copy of position carrying new dividend metadata.

    Implausible data resets the dividend to 0 with frequency "N/A" and leaves
    the ex-dividend date untouched.
    """
    if not is_plausible_yield(dividend_per_share, position.current_price, max_yield):
        logger.warning(
            f"Discarding dividend data for {position.symbol}: "
            f"{dividend_per_share} per share on price {position.current_price} "
            f"exceeds the {max_yield:.0%} yield ceiling"
        )
        ex_date = None

    dividend_per_share, dividend_frequency = validate_dividend_yield(
        dividend_per_share, position.current_price, dividend_frequency, max_yield
    )

    update = {"dividend_per_share": dividend_per_share}
    if dividend_frequency is not None:
        update["dividend_frequency"] = dividend_frequency
    if ex_date is not None:
        update["ex_date"] = ex_date

    return position.model_copy(update=update)
