"""
Column keyword tables for brokerage CSV exports.

A broker export is described by which header keywords identify each logical
field. Headers are matched by substring, keywords are tried in order and the
first header containing a keyword wins. New export formats are added by
registering another CSVFormat, without touching the parser.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple
import re


class UnknownCSVFormatError(KeyError):
    """Raised when a CSV format name is not registered."""


@dataclass(frozen=True)
class ColumnSpec:
    """Header keywords for one logical field."""
    key: str
    keywords: Tuple[str, ...]
    required: bool = False
    label: Optional[str] = None

    @property
    def display_name(self) -> str:
        """Name used when reporting the column as missing."""
        return self.label or self.keywords[0]


@dataclass(frozen=True)
class CSVFormat:
    """A brokerage export layout."""
    name: str
    columns: Tuple[ColumnSpec, ...]
    skip_markers: Tuple[str, ...] = ("小計", "總計")
    date_pattern: str = r"^\d{4}[/-]?\d{2}[/-]?\d{2}"
    description: str = ""

    def resolve_columns(self, headers: List[str]) -> Dict[str, int]:
        """
        Map each logical field to the index of its header, -1 when absent.

        Args:
            headers: Header names, already stripped of quotes

        Returns:
            Dictionary of field name to column index
        """
        column_map = {}
        for spec in self.columns:
            column_map[spec.key] = self._find_column(headers, spec.keywords)
        return column_map

    def missing_required(self, column_map: Dict[str, int]) -> List[str]:
        """Display names of required fields whose column was not found."""
        return [
            spec.display_name
            for spec in self.columns
            if spec.required and column_map.get(spec.key, -1) == -1
        ]

    def is_skip_line(self, line: str) -> bool:
        """Whether a raw data line is a subtotal or grand-total row."""
        return any(marker in line for marker in self.skip_markers)

    def matches_date(self, value: str) -> bool:
        return re.match(self.date_pattern, value) is not None

    @staticmethod
    def _find_column(headers: List[str], keywords: Tuple[str, ...]) -> int:
        for keyword in keywords:
            for index, header in enumerate(headers):
                if keyword in header:
                    return index
        return -1


TW_BROKER_TRANSACTIONS = CSVFormat(
    name="tw_broker",
    description="Taiwan brokerage trade history export (證券對帳單)",
    columns=(
        ColumnSpec("date", ("成交日期",), required=True),
        ColumnSpec("symbol", ("股票代號",), required=True),
        ColumnSpec("side", ("買賣別", "買賣"), required=True),
        ColumnSpec("shares", ("成交數量", "股數", "成交股數"), required=True),
        ColumnSpec("price", ("成交價", "成交單價", "成交價格"), required=True),
        ColumnSpec("amount", ("應收付帳款", "收付金額", "發生金額"), required=True),
        ColumnSpec("realized_profit", ("損益",)),
        ColumnSpec("fee", ("手續費",)),
        ColumnSpec("tax", ("交易稅",)),
        ColumnSpec("levy", ("二代健保", "補充保費")),
        ColumnSpec("trade_type", ("交易種類",)),
    ),
)

TW_BROKER_INVENTORY = CSVFormat(
    name="tw_broker",
    description="Taiwan brokerage inventory export (庫存明細)",
    columns=(
        ColumnSpec("symbol", ("股票代號",), required=True),
        ColumnSpec("name", ("股票名稱",), required=True),
        ColumnSpec("shares", ("合計庫存數量",), required=True),
        ColumnSpec("avg_cost", ("成本均價",), required=True),
        ColumnSpec("current_price", ("現價",), required=True),
    ),
)


@dataclass
class CSVFormatRegistry:
    """Trade and inventory layouts, keyed by format name."""
    transaction_formats: Dict[str, CSVFormat] = field(default_factory=dict)
    inventory_formats: Dict[str, CSVFormat] = field(default_factory=dict)

    def register(self, transactions: Optional[CSVFormat] = None, inventory: Optional[CSVFormat] = None) -> None:
        if transactions is not None:
            self.transaction_formats[transactions.name] = transactions
        if inventory is not None:
            self.inventory_formats[inventory.name] = inventory

    def transaction_format(self, name: str) -> CSVFormat:
        try:
            return self.transaction_formats[name]
        except KeyError:
            raise UnknownCSVFormatError(
                f"Unknown transaction CSV format '{name}'. "
                f"Supported: {', '.join(sorted(self.transaction_formats))}"
            )

    def inventory_format(self, name: str) -> CSVFormat:
        try:
            return self.inventory_formats[name]
        except KeyError:
            raise UnknownCSVFormatError(
                f"Unknown inventory CSV format '{name}'. "
                f"Supported: {', '.join(sorted(self.inventory_formats))}"
            )


CSV_FORMATS = CSVFormatRegistry()
CSV_FORMATS.register(transactions=TW_BROKER_TRANSACTIONS, inventory=TW_BROKER_INVENTORY)
