"""
Import merging service.

Folds freshly parsed CSV records into the caller's existing collections:
trades are deduplicated by signature, inventory rows update or create stock
positions.
"""
from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, List, Optional, Tuple
import logging
import re
import uuid

from fintrack.models.position import AssetType
from fintrack.schemas.position import Position, InventoryRecord
from fintrack.schemas.transaction import StockTransaction, ImportSummary

logger = logging.getLogger(__name__)

_NUMERIC_SYMBOL = re.compile(r"^\d+(?:\.0*)?$")


def _canonical_number(value: Decimal) -> str:
    # 1000, 1000.0 and 1E+3 share one representation
    return format(value.normalize(), "f")


class ImportMerger:
    """Merge parsed brokerage records into existing collections."""

    @staticmethod
    def transaction_signature(transaction: StockTransaction) -> str:
        """
        Identity of a trade for duplicate detection.

        Signature: date-symbol-shares-price-side

        Args:
            transaction: Trade record

        Returns:
            Signature string
        """
        return (
            f"{transaction.date.isoformat()}-"
            f"{transaction.symbol}-"
            f"{_canonical_number(transaction.shares)}-"
            f"{_canonical_number(transaction.price)}-"
            f"{transaction.side.value}"
        )

    @staticmethod
    def merge_stock_transactions(
        existing: List[StockTransaction],
        incoming: List[StockTransaction]
    ) -> Tuple[List[StockTransaction], List[StockTransaction], List[StockTransaction]]:
        """
        Add incoming trades that are not already present.

        Only existing records are used for duplicate detection; identical rows
        inside one export are separate fills and are all kept.

        Args:
            existing: Trades already recorded
            incoming: Freshly parsed trades

        Returns:
            Tuple of (merged list sorted by date descending, new trades, duplicates)
        """
        existing_signatures = {ImportMerger.transaction_signature(t) for t in existing}

        new_transactions = []
        duplicates = []
        for transaction in incoming:
            if ImportMerger.transaction_signature(transaction) in existing_signatures:
                duplicates.append(transaction)
                logger.debug(
                    f"Duplicate trade skipped: {transaction.symbol} {transaction.side.value} "
                    f"on {transaction.date}"
                )
            else:
                new_transactions.append(transaction)

        merged = sorted(existing + new_transactions, key=lambda t: t.date, reverse=True)

        logger.info(
            f"Trade merge complete: {len(new_transactions)} new, {len(duplicates)} duplicates"
        )
        return merged, new_transactions, duplicates

    @staticmethod
    def transaction_import_summary(incoming: int, imported: int, duplicates: int) -> ImportSummary:
        if imported:
            message = f"成功匯入 {imported} 筆新交易紀錄"
        else:
            message = "沒有新的交易紀錄可供匯入"
        return ImportSummary(
            total_parsed=incoming,
            imported=imported,
            duplicates=duplicates,
            message=message,
        )

    @staticmethod
    def normalize_symbol_key(symbol: Optional[str]) -> str:
        """
        Matching key for a ticker.

        Purely numeric codes compare by value so "0050", "50" and "50.0" match;
        anything else compares trimmed and upper-cased.

        Examples:
            >>> ImportMerger.normalize_symbol_key("0050")
            '50'
            >>> ImportMerger.normalize_symbol_key(" 00632r ")
            '00632R'
        """
        if not symbol:
            return ""

        cleaned = symbol.strip()
        if _NUMERIC_SYMBOL.match(cleaned):
            return str(int(cleaned.split(".")[0]))

        return cleaned.upper()

    @staticmethod
    def merge_inventory(
        existing: List[Position],
        records: List[InventoryRecord],
        now: Optional[datetime] = None
    ) -> Tuple[List[Position], int, int]:
        """
        Synchronize stock positions with a broker inventory export.

        Matching positions get name, shares, average cost, current price and
        value overwritten; unmatched rows become new stock positions. Non-stock
        assets are returned unchanged, ahead of the stock positions.

        Args:
            existing: All current assets
            records: Parsed inventory rows
            now: Refresh timestamp (defaults to current UTC time)

        Returns:
            Tuple of (assets, created count, updated count)
        """
        if now is None:
            now = datetime.now(timezone.utc)

        other_assets = []
        unkeyed_stocks = []
        stock_map: Dict[str, Position] = {}
        for asset in existing:
            if asset.asset_type != AssetType.STOCK:
                other_assets.append(asset)
                continue

            key = ImportMerger.normalize_symbol_key(asset.symbol)
            if key:
                stock_map[key] = asset
            else:
                unkeyed_stocks.append(asset)

        created = 0
        updated = 0
        for record in records:
            key = ImportMerger.normalize_symbol_key(record.symbol)
            if not key:
                continue

            current = stock_map.get(key)
            if current is not None:
                stock_map[key] = current.model_copy(update={
                    "name": record.name or current.name,
                    "shares": record.shares,
                    "avg_cost": record.avg_cost,
                    "current_price": record.current_price,
                    "amount": record.shares * record.current_price,
                    "last_updated": now,
                })
                updated += 1
            else:
                stock_map[key] = Position(
                    id=str(uuid.uuid4()),
                    asset_type=AssetType.STOCK,
                    symbol=record.symbol,
                    name=record.name or record.symbol,
                    shares=record.shares,
                    avg_cost=record.avg_cost,
                    current_price=record.current_price,
                    amount=record.shares * record.current_price,
                    last_updated=now,
                )
                created += 1

        logger.info(f"Inventory sync complete: {created} created, {updated} updated")
        return other_assets + unkeyed_stocks + list(stock_map.values()), created, updated

    @staticmethod
    def inventory_import_summary(incoming: int, created: int, updated: int) -> ImportSummary:
        return ImportSummary(
            total_parsed=incoming,
            imported=created,
            updated=updated,
            message=f"庫存同步完成：新增 {created} 筆，更新 {updated} 筆",
        )

    @staticmethod
    def deduplicate_by_id(transactions: List[StockTransaction]) -> List[StockTransaction]:
        """
        Collapse records sharing an id, keeping the last occurrence.

        Used when restoring a backup that may contain the same trade twice.
        """
        by_id: Dict[str, StockTransaction] = {}
        for transaction in transactions:
            by_id[transaction.id] = transaction
        return list(by_id.values())
