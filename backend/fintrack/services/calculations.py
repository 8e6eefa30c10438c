"""
Financial calculations service.

Implements mark-to-market stock performance under a brokerage fee and
transaction tax schedule.
"""
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Optional
import logging

from fintrack.models.transaction import DividendMatchMode
from fintrack.schemas.portfolio import PerformanceResult
from fintrack.schemas.position import Position
from fintrack.schemas.transaction import Transaction
from fintrack.services.dividends import sum_attributed_dividends
from fintrack.services.fee_schedule import FeeSchedule, resolve_fee_schedule
from fintrack.utils.numbers import to_decimal, safe_percentage

logger = logging.getLogger(__name__)

# 2.8-fold discount, the common negotiated online brokerage rate
DEFAULT_FEE_DISCOUNT = Decimal("0.28")


def resolve_fee_discount(fee_discount_rate: Any) -> Decimal:
    """
    Normalize a configured fee discount.

    None or anything that is not a finite number falls back to
    DEFAULT_FEE_DISCOUNT. Zero is a valid discount (commission-free broker).
    """
    if fee_discount_rate is None or isinstance(fee_discount_rate, bool):
        return DEFAULT_FEE_DISCOUNT

    try:
        discount = Decimal(str(fee_discount_rate).strip())
    except (InvalidOperation, ValueError):
        logger.debug(f"Ignoring non-numeric fee discount {fee_discount_rate!r}")
        return DEFAULT_FEE_DISCOUNT

    return discount if discount.is_finite() else DEFAULT_FEE_DISCOUNT


class FinancialCalculations:
    """Financial calculations for position metrics."""

    @staticmethod
    def calculate_stock_performance(
        position: Position,
        transactions: Optional[Iterable[Transaction]] = None,
        fee_discount_rate: Any = None,
        fee_schedule: Optional[FeeSchedule] = None,
        dividend_match: DividendMatchMode = DividendMatchMode.SUBSTRING
    ) -> PerformanceResult:
        """
        Calculate the performance of a position as if sold at the current price.

        Steps:
        - total_cost = avg_cost * shares + buy fee
        - market_value = current_price * shares
        - estimated_return = market_value - sell fee - transaction tax
        - net_profit = estimated_return - total_cost
        - roi = net_profit / total_cost * 100

        Fees are max(floor(price * shares * commission_rate * discount), minimum_fee),
        computed independently for the buy and the sell side. Tax is
        floor(market_value * tax_rate) with the ETF or equity rate.

        A position with no shares or no average cost yields an all-zero result
        that still carries the attributed dividends. Non-numeric inputs count as
        zero; the function never raises.

        Args:
            position: Position snapshot
            transactions: Ledger entries scanned for dividends of this symbol
            fee_discount_rate: Multiplier on the commission rate (default 0.28)
            fee_schedule: Fee and tax policy (default Taiwan schedule)
            dividend_match: How dividend entries are attributed to the symbol

        Returns:
            PerformanceResult
        """
        shares = to_decimal(position.shares)
        avg_cost = to_decimal(position.avg_cost)
        current_price = to_decimal(position.current_price)

        total_dividends = sum_attributed_dividends(transactions, position.symbol, dividend_match)

        if shares == 0 or avg_cost == 0:
            return PerformanceResult.zero(total_dividends)

        schedule = resolve_fee_schedule(fee_schedule)
        discount = resolve_fee_discount(fee_discount_rate)
        tax_rate = schedule.tax_policy.rate_for(position)

        buy_fee = schedule.fee(avg_cost, shares, discount)
        total_cost = avg_cost * shares + buy_fee

        market_value = current_price * shares
        sell_fee = schedule.fee(current_price, shares, discount)
        tax = schedule.tax(market_value, tax_rate)

        estimated_return = market_value - sell_fee - tax
        net_profit = estimated_return - total_cost
        roi = safe_percentage(net_profit, total_cost)

        return PerformanceResult(
            total_cost=total_cost,
            market_value=market_value,
            estimated_return=estimated_return,
            net_profit=net_profit,
            roi=roi,
            buy_fee=buy_fee,
            sell_fee=sell_fee,
            tax=tax,
            total_dividends=total_dividends,
        )


calculate_stock_performance = FinancialCalculations.calculate_stock_performance
