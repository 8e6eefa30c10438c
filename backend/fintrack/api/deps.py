"""Shared endpoint dependencies built from application settings."""
from decimal import Decimal
from typing import Optional

from fintrack.config import settings
from fintrack.models.transaction import DividendMatchMode
from fintrack.services.calculations import resolve_fee_discount
from fintrack.services.csv_formats import CSV_FORMATS, CSVFormat
from fintrack.services.fee_schedule import FeeSchedule


def get_fee_schedule() -> FeeSchedule:
    return FeeSchedule.from_settings(settings)


def get_dividend_match_mode() -> DividendMatchMode:
    return DividendMatchMode(settings.dividend_match_mode)


def fee_discount_or_default(fee_discount_rate: Optional[float]) -> Decimal:
    """Request discount when given, otherwise the configured one."""
    if fee_discount_rate is None:
        return resolve_fee_discount(settings.fee_discount_rate)
    return resolve_fee_discount(fee_discount_rate)


def transaction_format(name: Optional[str]) -> CSVFormat:
    """
    Raises:
        UnknownCSVFormatError: If the format is not registered
    """
    return CSV_FORMATS.transaction_format(name or settings.default_csv_format)


def inventory_format(name: Optional[str]) -> CSVFormat:
    """
    Raises:
        UnknownCSVFormatError: If the format is not registered
    """
    return CSV_FORMATS.inventory_format(name or settings.default_csv_format)


def get_max_dividend_yield() -> Decimal:
    return Decimal(str(settings.max_dividend_yield))
