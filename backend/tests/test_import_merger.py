"""
Tests for merging imported records into existing collections.
"""
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from fintrack.models.position import AssetType
from fintrack.models.transaction import TradeSide
from fintrack.schemas.position import InventoryRecord, Position
from fintrack.schemas.transaction import StockTransaction
from fintrack.services.import_merger import ImportMerger

pytestmark = pytest.mark.unit


def make_trade(day, symbol="2330", shares="1000", price="600", side=TradeSide.BUY, **kwargs):
    return StockTransaction(
        date=day,
        symbol=symbol,
        shares=Decimal(shares),
        price=Decimal(price),
        side=side,
        **kwargs
    )


class TestTransactionSignature:
    """Test trade identity for duplicate detection."""

    def test_signature_format(self):
        trade = make_trade(date(2024, 1, 15))
        assert ImportMerger.transaction_signature(trade) == "2024-01-15-2330-1000-600-BUY"

    def test_equivalent_numbers_share_signature(self):
        a = make_trade(date(2024, 1, 15), shares="1000", price="600")
        b = make_trade(date(2024, 1, 15), shares="1000.00", price="600.0")
        assert ImportMerger.transaction_signature(a) == ImportMerger.transaction_signature(b)

    def test_id_is_not_part_of_signature(self):
        a = make_trade(date(2024, 1, 15), id="a")
        b = make_trade(date(2024, 1, 15), id="b")
        assert ImportMerger.transaction_signature(a) == ImportMerger.transaction_signature(b)


class TestMergeStockTransactions:
    """Test merging parsed trades into the trade list."""

    def test_duplicates_are_dropped(self):
        existing = [make_trade(date(2024, 1, 15))]
        incoming = [
            make_trade(date(2024, 1, 15)),
            make_trade(date(2024, 3, 1), side=TradeSide.SELL, price="650"),
        ]

        merged, new, duplicates = ImportMerger.merge_stock_transactions(existing, incoming)

        assert len(new) == 1
        assert new[0].side == TradeSide.SELL
        assert len(duplicates) == 1
        assert [t.date for t in merged] == [date(2024, 3, 1), date(2024, 1, 15)]

    def test_identical_fills_in_one_batch_are_kept(self):
        incoming = [make_trade(date(2024, 1, 15)), make_trade(date(2024, 1, 15))]

        merged, new, duplicates = ImportMerger.merge_stock_transactions([], incoming)

        assert len(new) == 2
        assert duplicates == []
        assert len(merged) == 2

    def test_merged_list_is_sorted_newest_first(self):
        existing = [make_trade(date(2024, 2, 1)), make_trade(date(2023, 12, 1))]
        incoming = [make_trade(date(2024, 1, 1))]

        merged, _, _ = ImportMerger.merge_stock_transactions(existing, incoming)

        assert [t.date for t in merged] == [date(2024, 2, 1), date(2024, 1, 1), date(2023, 12, 1)]

    def test_import_summary_messages(self):
        summary = ImportMerger.transaction_import_summary(12, 10, 2)
        assert summary.message == "成功匯入 10 筆新交易紀錄"
        assert summary.total_parsed == 12
        assert summary.duplicates == 2

        empty = ImportMerger.transaction_import_summary(3, 0, 3)
        assert empty.message == "沒有新的交易紀錄可供匯入"


class TestNormalizeSymbolKey:
    """Test ticker matching keys."""

    @pytest.mark.parametrize("symbol,expected", [
        ("0050", "50"),
        ("50", "50"),
        ("50.0", "50"),
        (" 2330 ", "2330"),
        ("00632r", "00632R"),
        ("aapl", "AAPL"),
        ("", ""),
        (None, ""),
    ])
    def test_normalize(self, symbol, expected):
        assert ImportMerger.normalize_symbol_key(symbol) == expected


class TestMergeInventory:
    """Test synchronizing positions with an inventory export."""

    NOW = datetime(2024, 6, 1, 9, 0, tzinfo=timezone.utc)

    def test_updates_existing_and_creates_new(self, cash_asset):
        etf = Position(symbol="50", name="元大台灣50", shares=500, avg_cost=100, current_price=110)
        records = [
            InventoryRecord(symbol="0050", name="元大台灣50", shares=Decimal("2000"),
                            avg_cost=Decimal("120"), current_price=Decimal("135")),
            InventoryRecord(symbol="2454", name="聯發科", shares=Decimal("100"),
                            avg_cost=Decimal("900"), current_price=Decimal("1000")),
        ]

        positions, created, updated = ImportMerger.merge_inventory([cash_asset, etf], records, now=self.NOW)

        assert created == 1
        assert updated == 1
        assert positions[0] is cash_asset

        by_symbol = {p.symbol: p for p in positions if p.asset_type == AssetType.STOCK}
        assert by_symbol["50"].id == etf.id
        assert by_symbol["50"].shares == Decimal("2000")
        assert by_symbol["50"].avg_cost == Decimal("120")
        assert by_symbol["50"].amount == Decimal("270000")
        assert by_symbol["50"].last_updated == self.NOW

        new_position = by_symbol["2454"]
        assert new_position.asset_type == AssetType.STOCK
        assert new_position.name == "聯發科"
        assert new_position.id not in {etf.id, cash_asset.id}
        assert new_position.last_updated == self.NOW

    def test_new_position_without_name_uses_symbol(self):
        records = [InventoryRecord(symbol="2330", shares=Decimal("1"))]

        positions, created, _ = ImportMerger.merge_inventory([], records, now=self.NOW)

        assert created == 1
        assert positions[0].name == "2330"

    def test_stock_without_symbol_is_kept(self):
        manual = Position(name="Unlisted shares", shares=10)

        positions, _, _ = ImportMerger.merge_inventory([manual], [], now=self.NOW)

        assert positions == [manual]

    def test_input_positions_are_not_mutated(self):
        original = Position(symbol="2330", shares=1000, avg_cost=600, current_price=650)
        records = [InventoryRecord(symbol="2330", shares=Decimal("2000"))]

        ImportMerger.merge_inventory([original], records, now=self.NOW)

        assert original.shares == Decimal("1000")

    def test_inventory_summary_message(self):
        summary = ImportMerger.inventory_import_summary(5, 2, 3)
        assert summary.message == "庫存同步完成：新增 2 筆，更新 3 筆"
        assert summary.imported == 2
        assert summary.updated == 3


class TestDeduplicateById:
    """Test collapsing records that share an id."""

    def test_last_record_wins(self):
        first = make_trade(date(2024, 1, 15), id="t1", price="600")
        other = make_trade(date(2024, 1, 16), id="t2")
        replacement = make_trade(date(2024, 1, 15), id="t1", price="601")

        result = ImportMerger.deduplicate_by_id([first, other, replacement])

        assert [t.id for t in result] == ["t1", "t2"]
        assert result[0].price == Decimal("601")
