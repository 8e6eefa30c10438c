"""
CSV Parser for Taiwan brokerage exports (trade history and inventory).

Broker exports differ in column order and naming, so columns are located by
header keywords (see csv_formats). Parsing is strict at the header level and
best-effort per row: a malformed row is logged and skipped, never fatal.
"""
from io import StringIO
from typing import Callable, Dict, Iterable, List, Optional, Tuple
import pandas as pd
import logging
import warnings

from fintrack.models.transaction import TradeSide
from fintrack.schemas.position import InventoryRecord
from fintrack.schemas.transaction import (
    StockTransaction,
    TransactionParseResult,
    InventoryParseResult,
)
from fintrack.services.csv_formats import CSVFormat, TW_BROKER_TRANSACTIONS, TW_BROKER_INVENTORY
from fintrack.utils.numbers import ZERO, clean_number
from fintrack.utils.time_utils import parse_date_string

logger = logging.getLogger(__name__)

DEFAULT_ENCODINGS = ("utf-8-sig", "big5", "cp950")

EMPTY_CSV_ERROR = "CSV 檔案是空的或缺少標題列 (Header)。"


class CSVDecodeError(ValueError):
    """Raised when uploaded CSV bytes match none of the candidate encodings."""


class EmptyCSVError(ValueError):
    """Raised when a CSV has no header line plus data line."""


class MissingColumnsError(ValueError):
    """Raised when required columns are absent from the header."""

    def __init__(self, missing: List[str]):
        self.missing = missing
        super().__init__(f"Missing required columns: {', '.join(missing)}")


def decode_csv_bytes(content: bytes, encodings: Optional[Iterable[str]] = None) -> str:
    """
    Decode an uploaded CSV file.

    Taiwan broker exports are usually Big5; files re-saved by spreadsheets are
    UTF-8, sometimes with a BOM.

    Args:
        content: Raw file bytes
        encodings: Candidate encodings, tried in order

    Returns:
        Decoded text

    Raises:
        CSVDecodeError: If no candidate encoding can decode the bytes
    """
    candidates = list(encodings) if encodings else list(DEFAULT_ENCODINGS)

    for encoding in candidates:
        try:
            text = content.decode(encoding)
            logger.debug(f"Decoded CSV upload as {encoding}")
            return text
        except (UnicodeDecodeError, LookupError):
            continue

    raise CSVDecodeError(
        f"Unable to decode CSV file. Tried encodings: {', '.join(candidates)}"
    )


class BrokerCSVParser:
    """
    Parser for brokerage CSV exports.

    Processing order:
    1. Split into trimmed, non-empty lines (header + at least one data line)
    2. Locate columns by header keywords; missing required columns abort
    3. Drop subtotal / grand-total lines
    4. Split data lines with a quote-aware reader (numbers such as "1,000"
       arrive quoted)
    5. Convert each row, skipping rows that fail
    """

    @staticmethod
    def split_lines(text: str) -> List[str]:
        """Trimmed, non-empty lines of text."""
        if not text:
            return []
        return [line.strip() for line in text.splitlines() if line.strip()]

    @staticmethod
    def parse_header(line: str) -> List[str]:
        """Header names with quote characters removed."""
        return [header.replace('"', "").strip() for header in line.split(",")]

    @staticmethod
    def format_symbol(value: str) -> str:
        """
        Drop an exchange suffix from a ticker.

        Examples:
            >>> BrokerCSVParser.format_symbol("2330.TW")
            '2330'
        """
        if not value:
            return ""
        cleaned = value.replace('"', "").strip()
        dot_index = cleaned.find(".")
        if dot_index != -1:
            cleaned = cleaned[:dot_index]
        return cleaned

    @staticmethod
    def _cell(row: List[str], index: int) -> str:
        if index < 0 or index >= len(row):
            return ""
        value = row[index]
        if value is None or (not isinstance(value, str) and pd.isna(value)):
            return ""
        return str(value).replace('"', "").strip()

    @staticmethod
    def _read_frame(data: str, width: int, on_bad_line: Callable[[List[str]], List[str]]) -> List[List[str]]:
        # Over-wide rows are reported through on_bad_line, so pandas' own width warning is muted
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", pd.errors.ParserWarning)
            # dtype=str keeps leading zeros in codes such as 0050
            df = pd.read_csv(
                StringIO(data),
                header=None,
                names=list(range(width)),
                index_col=False,
                dtype=str,
                keep_default_na=False,
                skipinitialspace=True,
                skip_blank_lines=True,
                engine="python",
                on_bad_lines=on_bad_line,
            )
        return df.values.tolist()

    @staticmethod
    def has_unbalanced_quotes(line: str) -> bool:
        """A line with an odd number of quote characters has an unterminated field."""
        return line.count('"') % 2 == 1

    @staticmethod
    def read_rows(data_lines: List[str], width: int) -> Tuple[List[List[str]], int]:
        """
        Split data lines into fields, one row per line.

        Rows with more fields than the header are truncated to the header width.
        A line with an unterminated quote is skipped so it cannot swallow the
        lines after it. If the remaining batch still does not yield exactly
        one row per line, lines are read one by one and unreadable ones are
        skipped.

        Args:
            data_lines: Data lines without the header
            width: Number of header columns

        Returns:
            Tuple of (rows, number of unreadable lines)
        """
        def truncate(bad_line: List[str]) -> List[str]:
            logger.warning(
                f"Row has {len(bad_line)} fields but the header has {width}, ignoring extra fields"
            )
            return bad_line[:width]

        readable = []
        unreadable = 0
        for line in data_lines:
            if BrokerCSVParser.has_unbalanced_quotes(line):
                logger.warning(f"Skipping row with unterminated quote: {line}")
                unreadable += 1
            else:
                readable.append(line)

        if not readable:
            return [], unreadable

        try:
            rows = BrokerCSVParser._read_frame("\n".join(readable), width, truncate)
            if len(rows) == len(readable):
                return rows, unreadable
            logger.warning(
                f"CSV batch yielded {len(rows)} rows for {len(readable)} lines, reading line by line"
            )
        except pd.errors.ParserError as e:
            logger.warning(f"CSV batch could not be tokenized ({str(e)}), reading line by line")

        rows = []
        for line in readable:
            try:
                line_rows = BrokerCSVParser._read_frame(line, width, truncate)
            except ValueError as e:
                logger.warning(f"Skipping unreadable row: {line} ({str(e)})")
                unreadable += 1
                continue
            if len(line_rows) != 1:
                logger.warning(f"Skipping unreadable row: {line}")
                unreadable += 1
                continue
            rows.extend(line_rows)
        return rows, unreadable

    @staticmethod
    def _prepare(text: str, csv_format: CSVFormat) -> Tuple[List[List[str]], int, Dict[str, int]]:
        """
        Validate the header and split the data rows.

        Returns:
            Tuple of (rows, number of unreadable lines, column map)

        Raises:
            EmptyCSVError: If there is no header plus data line
            MissingColumnsError: If a required column is not found
        """
        lines = BrokerCSVParser.split_lines(text)
        if len(lines) < 2:
            raise EmptyCSVError(EMPTY_CSV_ERROR)

        headers = BrokerCSVParser.parse_header(lines[0])
        column_map = csv_format.resolve_columns(headers)
        missing = csv_format.missing_required(column_map)
        if missing:
            raise MissingColumnsError(missing)

        data_lines = [line for line in lines[1:] if not csv_format.is_skip_line(line)]
        markers = len(lines) - 1 - len(data_lines)
        if markers:
            logger.debug(f"Dropped {markers} subtotal/total rows")

        rows, unreadable = BrokerCSVParser.read_rows(data_lines, len(headers))
        return rows, unreadable, column_map

    @staticmethod
    def parse_transactions(text: str, csv_format: Optional[CSVFormat] = None) -> TransactionParseResult:
        """
        Parse a trade history CSV.

        Args:
            text: Decoded CSV text
            csv_format: Column keyword table (default Taiwan broker layout)

        Returns:
            TransactionParseResult with either an error or the parsed trades
        """
        csv_format = csv_format or TW_BROKER_TRANSACTIONS

        try:
            rows, skipped, column_map = BrokerCSVParser._prepare(text, csv_format)
        except EmptyCSVError as e:
            return TransactionParseResult(error=str(e))
        except MissingColumnsError as e:
            return TransactionParseResult(
                error=f"CSV 檔案缺少必要的欄位，請檢查是否包含：{'、'.join(e.missing)}"
            )
        except Exception as e:
            logger.error(f"Error parsing transaction CSV: {str(e)}")
            return TransactionParseResult(error=f"CSV 解析失敗：{str(e)}")

        transactions = []
        for row in rows:
            try:
                transaction = BrokerCSVParser._parse_transaction_row(row, column_map, csv_format)
            except Exception as e:
                logger.warning(f"Skipping invalid row during CSV parse: {row} ({str(e)})")
                skipped += 1
                continue

            if transaction is None:
                skipped += 1
                continue
            transactions.append(transaction)

        logger.info(f"Parsed {len(transactions)} stock transactions, skipped {skipped} rows")
        return TransactionParseResult(transactions=transactions, skipped=skipped)

    @staticmethod
    def _parse_transaction_row(
        row: List[str],
        column_map: Dict[str, int],
        csv_format: CSVFormat
    ) -> Optional[StockTransaction]:
        """
        Convert one data row into a StockTransaction.

        Returns None for rows that are not trades (no symbol, no date, or a
        date that does not look like YYYY/MM/DD).

        Raises:
            ValueError: If the date matches the pattern but is not a real date
        """
        cell = BrokerCSVParser._cell

        symbol = cell(row, column_map["symbol"])
        date_str = cell(row, column_map["date"])
        if not symbol or not date_str or not csv_format.matches_date(date_str):
            logger.debug(f"Ignoring non-trade row: {row}")
            return None

        trade_date = parse_date_string(date_str)
        if trade_date is None:
            raise ValueError(f"Invalid trade date '{date_str}'")

        side_text = cell(row, column_map["side"])
        side = TradeSide.BUY if "買" in side_text else TradeSide.SELL

        def optional_number(key: str):
            index = column_map.get(key, -1)
            return clean_number(cell(row, index)) if index != -1 else ZERO

        fees = optional_number("fee") + optional_number("tax") + optional_number("levy")
        realized_profit = optional_number("realized_profit") if side == TradeSide.SELL else ZERO

        return StockTransaction(
            date=trade_date,
            symbol=symbol,
            side=side,
            trade_type=cell(row, column_map.get("trade_type", -1)),
            shares=clean_number(cell(row, column_map["shares"])),
            price=clean_number(cell(row, column_map["price"])),
            fees=fees,
            realized_profit=realized_profit,
            amount=clean_number(cell(row, column_map["amount"])),
        )

    @staticmethod
    def parse_inventory(text: str, csv_format: Optional[CSVFormat] = None) -> InventoryParseResult:
        """
        Parse an inventory (holdings) CSV.

        Args:
            text: Decoded CSV text
            csv_format: Column keyword table (default Taiwan broker layout)

        Returns:
            InventoryParseResult with either an error or the parsed holdings
        """
        csv_format = csv_format or TW_BROKER_INVENTORY

        try:
            rows, skipped, column_map = BrokerCSVParser._prepare(text, csv_format)
        except EmptyCSVError as e:
            return InventoryParseResult(error=str(e))
        except MissingColumnsError as e:
            return InventoryParseResult(error=f"CSV 缺少必要欄位: {', '.join(e.missing)}")
        except Exception as e:
            logger.error(f"Error parsing inventory CSV: {str(e)}")
            return InventoryParseResult(error=f"CSV 解析失敗：{str(e)}")

        cell = BrokerCSVParser._cell
        assets = []
        for row in rows:
            try:
                symbol = BrokerCSVParser.format_symbol(cell(row, column_map["symbol"]))
                if not symbol:
                    skipped += 1
                    continue

                assets.append(InventoryRecord(
                    symbol=symbol,
                    name=cell(row, column_map["name"]),
                    shares=clean_number(cell(row, column_map["shares"])),
                    avg_cost=clean_number(cell(row, column_map["avg_cost"])),
                    current_price=clean_number(cell(row, column_map["current_price"])),
                ))
            except Exception as e:
                logger.warning(f"Skipping invalid inventory row: {row} ({str(e)})")
                skipped += 1

        logger.info(f"Parsed {len(assets)} inventory rows, skipped {skipped} rows")
        return InventoryParseResult(assets=assets, skipped=skipped)


parse_stock_transaction_csv = BrokerCSVParser.parse_transactions
parse_stock_inventory_csv = BrokerCSVParser.parse_inventory
