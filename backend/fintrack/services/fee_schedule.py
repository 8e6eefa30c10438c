"""
Brokerage fee and transaction tax policy tables.

Defaults follow the Taiwan stock exchange schedule: 0.1425% commission with a
20 dollar minimum, 0.3% transaction tax on equities and 0.1% on ETFs.
Other markets are supported by building a different FeeSchedule.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional, Tuple
import logging

from fintrack.schemas.position import Position
from fintrack.utils.numbers import floor_decimal, to_decimal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TaxPolicy:
    """
    Transaction tax rates keyed by instrument class.

    The classification is binary: an explicit is_etf flag on the position wins,
    otherwise a symbol starting with one of etf_symbol_prefixes is an ETF.
    """
    etf_rate: Decimal = Decimal("0.001")
    equity_rate: Decimal = Decimal("0.003")
    etf_symbol_prefixes: Tuple[str, ...] = ("00",)

    def is_etf(self, position: Position) -> bool:
        if isinstance(position.is_etf, bool):
            return position.is_etf

        symbol = position.symbol or ""
        return any(symbol.startswith(prefix) for prefix in self.etf_symbol_prefixes if prefix)

    def rate_for(self, position: Position) -> Decimal:
        return self.etf_rate if self.is_etf(position) else self.equity_rate


@dataclass(frozen=True)
class FeeSchedule:
    """Commission schedule plus the tax policy applied on sale."""
    commission_rate: Decimal = Decimal("0.001425")
    minimum_fee: Decimal = Decimal("20")
    tax_policy: TaxPolicy = field(default_factory=TaxPolicy)

    def fee(self, price: Decimal, shares: Decimal, discount: Decimal) -> Decimal:
        """
        Commission for trading shares at price.

        The computed commission is floored to a whole currency unit before the
        minimum fee is applied, so the result is never below minimum_fee.
        """
        computed = floor_decimal(price * shares * self.commission_rate * discount)
        return max(computed, self.minimum_fee)

    def tax(self, market_value: Decimal, rate: Decimal) -> Decimal:
        """Transaction tax, floored to a whole currency unit."""
        return floor_decimal(market_value * rate)

    @classmethod
    def from_settings(cls, settings) -> "FeeSchedule":
        """
        Build a schedule from application settings.

        Args:
            settings: Object exposing commission_rate, minimum_fee, etf_tax_rate,
                equity_tax_rate and etf_symbol_prefixes

        Returns:
            FeeSchedule instance
        """
        schedule = cls(
            commission_rate=to_decimal(settings.commission_rate),
            minimum_fee=to_decimal(settings.minimum_fee),
            tax_policy=TaxPolicy(
                etf_rate=to_decimal(settings.etf_tax_rate),
                equity_rate=to_decimal(settings.equity_tax_rate),
                etf_symbol_prefixes=tuple(settings.etf_symbol_prefixes),
            ),
        )
        logger.debug(f"Loaded fee schedule from settings: {schedule}")
        return schedule


TAIWAN_FEE_SCHEDULE = FeeSchedule()


def resolve_fee_schedule(fee_schedule: Optional[FeeSchedule]) -> FeeSchedule:
    """Return fee_schedule, or the Taiwan defaults when None."""
    return fee_schedule if fee_schedule is not None else TAIWAN_FEE_SCHEDULE
