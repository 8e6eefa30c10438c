"""CSV import and merge API endpoints."""
from fastapi import APIRouter, File, HTTPException, Query, UploadFile
from typing import Optional
import logging

from fintrack.api.deps import inventory_format, transaction_format
from fintrack.config import settings
from fintrack.schemas.requests import (
    InventoryMergeRequest,
    InventoryMergeResponse,
    TransactionMergeRequest,
    TransactionMergeResponse,
)
from fintrack.schemas.transaction import InventoryParseResult, TransactionParseResult
from fintrack.services.csv_formats import UnknownCSVFormatError
from fintrack.services.csv_parser import BrokerCSVParser, decode_csv_bytes
from fintrack.services.import_merger import ImportMerger

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["imports"])


async def _read_csv_upload(file: UploadFile) -> str:
    """
    Raises:
        HTTPException: 400 if the upload is not a decodable .csv file
    """
    if not file.filename or not file.filename.lower().endswith(".csv"):
        raise HTTPException(status_code=400, detail="File must be a CSV")

    content = await file.read()
    try:
        return decode_csv_bytes(content, settings.csv_encodings)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/stock-transactions/parse", response_model=TransactionParseResult)
async def parse_stock_transactions(
    file: UploadFile = File(...),
    csv_format: Optional[str] = Query(None, alias="format", description="Registered CSV layout name")
):
    """
    Upload and parse a brokerage trade history CSV.

    Nothing is stored; the parsed trades are returned for the caller to merge.
    """
    try:
        fmt = transaction_format(csv_format)
    except UnknownCSVFormatError as e:
        raise HTTPException(status_code=400, detail=e.args[0])

    text = await _read_csv_upload(file)
    result = BrokerCSVParser.parse_transactions(text, fmt)

    if result.error:
        logger.info(f"Rejected trade CSV {file.filename}: {result.error}")
        raise HTTPException(status_code=400, detail=result.error)

    return result


@router.post("/inventory/parse", response_model=InventoryParseResult)
async def parse_inventory(
    file: UploadFile = File(...),
    csv_format: Optional[str] = Query(None, alias="format", description="Registered CSV layout name")
):
    """Upload and parse a brokerage inventory CSV."""
    try:
        fmt = inventory_format(csv_format)
    except UnknownCSVFormatError as e:
        raise HTTPException(status_code=400, detail=e.args[0])

    text = await _read_csv_upload(file)
    result = BrokerCSVParser.parse_inventory(text, fmt)

    if result.error:
        logger.info(f"Rejected inventory CSV {file.filename}: {result.error}")
        raise HTTPException(status_code=400, detail=result.error)

    return result


@router.post("/stock-transactions/merge", response_model=TransactionMergeResponse)
async def merge_stock_transactions(request: TransactionMergeRequest):
    """
    Merge parsed trades into the existing trade list.

    Existing records sharing an id are collapsed first. Returns the merged
    list (newest first) and a summary of new and duplicate records.
    """
    # A restored backup may carry the same record twice
    existing = ImportMerger.deduplicate_by_id(request.existing)
    merged, new_transactions, duplicates = ImportMerger.merge_stock_transactions(
        existing, request.incoming
    )
    summary = ImportMerger.transaction_import_summary(
        len(request.incoming), len(new_transactions), len(duplicates)
    )
    return TransactionMergeResponse(transactions=merged, summary=summary)


@router.post("/inventory/merge", response_model=InventoryMergeResponse)
async def merge_inventory(request: InventoryMergeRequest):
    """Synchronize stock positions with parsed inventory rows."""
    positions, created, updated = ImportMerger.merge_inventory(request.positions, request.records)
    summary = ImportMerger.inventory_import_summary(len(request.records), created, updated)
    return InventoryMergeResponse(positions=positions, summary=summary)
