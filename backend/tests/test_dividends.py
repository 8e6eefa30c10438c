"""
Tests for dividend attribution and dividend metadata checks.
"""
from datetime import date
from decimal import Decimal

import logging
import pytest

from fintrack.models.transaction import DividendMatchMode, TransactionType
from fintrack.schemas.position import Position
from fintrack.services.dividends import (
    apply_dividend_info,
    estimated_annual_dividend,
    is_plausible_yield,
    matches_symbol,
    realized_dividends_for_year,
    sum_attributed_dividends,
    validate_dividend_yield,
)

pytestmark = pytest.mark.unit


class TestMatchesSymbol:
    """Test attribution of ledger entries to a ticker."""

    def test_substring_in_item(self, dividend_entry):
        assert matches_symbol(dividend_entry("2330股利", 100), "2330") is True

    def test_substring_in_note(self, dividend_entry):
        assert matches_symbol(dividend_entry("股利", 100, note="台積電 2330"), "2330") is True

    def test_substring_matches_inside_longer_code(self, dividend_entry):
        assert matches_symbol(dividend_entry("12330 股利", 100), "2330") is True

    def test_strict_requires_token(self, dividend_entry):
        entry = dividend_entry("12330 股利", 100)
        assert matches_symbol(entry, "2330", DividendMatchMode.STRICT) is False

    def test_strict_accepts_adjacent_cjk(self, dividend_entry):
        entry = dividend_entry("2330股利", 100)
        assert matches_symbol(entry, "2330", DividendMatchMode.STRICT) is True

    def test_empty_symbol_never_matches(self, dividend_entry):
        assert matches_symbol(dividend_entry("股利", 100), "") is False


class TestSumAttributedDividends:
    """Test summing attributed dividend income."""

    def test_only_dividend_entries_count(self, dividend_entry):
        ledger = [
            dividend_entry("0050 配息", 1200),
            dividend_entry("0050 配息", 800),
            dividend_entry("0050 手續費", 50, entry_type=TransactionType.EXPENSE),
        ]
        assert sum_attributed_dividends(ledger, "0050") == Decimal("2000")

    def test_no_ledger(self):
        assert sum_attributed_dividends(None, "0050") == 0
        assert sum_attributed_dividends([], "0050") == 0

    def test_no_symbol(self, dividend_entry):
        assert sum_attributed_dividends([dividend_entry("股利", 100)], None) == 0


class TestDividendEstimates:
    """Test estimated and realized dividend figures."""

    def test_estimated_annual_dividend(self):
        position = Position(symbol="2330", shares=1000, dividend_per_share="14.5")
        assert estimated_annual_dividend(position) == Decimal("14500")

    def test_estimated_annual_dividend_without_data(self):
        assert estimated_annual_dividend(Position(symbol="2330", shares=1000)) == 0

    def test_realized_dividends_for_year(self, dividend_entry):
        ledger = [
            dividend_entry("2330 股利", 3000, booked=date(2024, 1, 10)),
            dividend_entry("0050 股利", 1000, booked=date(2024, 7, 10)),
            dividend_entry("2330 股利", 2500, booked=date(2023, 10, 10)),
            dividend_entry("薪水", 50000, booked=date(2024, 1, 5), entry_type=TransactionType.INCOME),
        ]
        assert realized_dividends_for_year(ledger, 2024) == Decimal("4000")
        assert realized_dividends_for_year(ledger, 2022) == 0


class TestYieldValidation:
    """Test the dividend yield ceiling."""

    def test_plausible_yield(self):
        assert is_plausible_yield(Decimal("5"), Decimal("100")) is True

    def test_yield_at_ceiling_is_plausible(self):
        assert is_plausible_yield(Decimal("20"), Decimal("100")) is True

    def test_implausible_yield(self):
        assert is_plausible_yield(Decimal("30"), Decimal("100")) is False

    def test_no_price_cannot_be_checked(self):
        assert is_plausible_yield(Decimal("30"), None) is True

    def test_validate_rejects_high_yield(self):
        assert validate_dividend_yield(Decimal("30"), Decimal("100"), "Annual") == (Decimal("0"), "N/A")

    def test_validate_keeps_plausible_data(self):
        assert validate_dividend_yield(Decimal("5"), Decimal("100"), "Annual") == (Decimal("5"), "Annual")

    def test_custom_ceiling(self):
        assert validate_dividend_yield(Decimal("5"), Decimal("100"), max_yield=Decimal("0.04")) == (Decimal("0"), "N/A")


class TestApplyDividendInfo:
    """Test enrichment of positions with dividend metadata."""

    def test_applies_plausible_data(self):
        position = Position(symbol="2330", current_price=600)

        updated = apply_dividend_info(position, Decimal("14.5"), "Quarterly", date(2024, 6, 13))

        assert updated.dividend_per_share == Decimal("14.5")
        assert updated.dividend_frequency == "Quarterly"
        assert updated.ex_date == date(2024, 6, 13)
        assert position.dividend_per_share is None

    def test_discards_implausible_data(self, caplog):
        position = Position(symbol="2330", current_price=100, ex_date=date(2024, 1, 1))

        with caplog.at_level(logging.WARNING):
            updated = apply_dividend_info(position, Decimal("50"), "Annual", date(2024, 6, 13))

        assert updated.dividend_per_share == 0
        assert updated.dividend_frequency == "N/A"
        assert updated.ex_date == date(2024, 1, 1)
        assert "Discarding dividend data for 2330" in caplog.text
