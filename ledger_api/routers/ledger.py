"""
FastAPI Router for Ledger Endpoints.

Provides REST API for the trade ledger:
- Record trades (single and batch)
- List, export, edit and delete entries
- Entry metadata
- Bulk P&L recalculation
"""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from ledger_api.dependencies import get_ledger_service
from ledger_api.schemas import (
    BatchCreateResponse,
    LedgerEntryBatchCreate,
    LedgerEntryCreate,
    LedgerEntryResponse,
    LedgerEntryUpdate,
    LedgerListResponse,
    MetadataCreate,
    MetadataResponse,
    PageMeta,
    RecalculationResponse,
)
from ledger_engine.service import LedgerService
from ledger_engine.types import TradeInstruction

router = APIRouter(prefix="/ledger", tags=["Ledger"])


def _instruction(data: LedgerEntryCreate) -> TradeInstruction:
    return TradeInstruction(
        account_id=data.account_id,
        symbol=data.symbol,
        entry_type=data.entry_type,
        quantity=data.quantity,
        price=data.price,
        fee=data.fee,
        timestamp=data.timestamp,
        notes=data.notes,
    )


# =============================================================
# LISTING / EXPORT
# =============================================================

@router.get("", response_model=LedgerListResponse)
def list_entries(
    account_id: Optional[str] = Query(None),
    symbol: Optional[str] = Query(None, description="Case-insensitive substring"),
    entry_type: Optional[str] = Query(None, description="BUY or SELL"),
    start_date: Optional[datetime] = Query(None),
    end_date: Optional[datetime] = Query(None),
    limit: Optional[int] = Query(None, ge=1),
    offset: int = Query(0, ge=0),
    service: LedgerService = Depends(get_ledger_service),
):
    """
    Get a filtered page of ledger entries.

    Entries are sorted by trade timestamp, newest first. The page
    size is capped by the server configuration.
    """
    entries, total = service.list_entries(
        account_id=account_id,
        symbol=symbol,
        entry_type=entry_type,
        start_date=start_date,
        end_date=end_date,
        limit=limit,
        offset=offset,
    )
    return LedgerListResponse(
        data=[LedgerEntryResponse.model_validate(e) for e in entries],
        meta=PageMeta(total=total, limit=service.page_limit(limit), offset=offset),
    )


@router.get("/export/csv")
def export_csv(
    account_id: Optional[str] = Query(None),
    symbol: Optional[str] = Query(None),
    entry_type: Optional[str] = Query(None),
    start_date: Optional[datetime] = Query(None),
    end_date: Optional[datetime] = Query(None),
    service: LedgerService = Depends(get_ledger_service),
):
    """Export entries matching the filters as CSV."""
    content = service.export_csv(
        account_id=account_id,
        symbol=symbol,
        entry_type=entry_type,
        start_date=start_date,
        end_date=end_date,
    )
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=ledger-export.csv"},
    )


# =============================================================
# WRITES
# =============================================================

@router.post("", response_model=LedgerEntryResponse, status_code=status.HTTP_201_CREATED)
def create_entry(
    data: LedgerEntryCreate,
    service: LedgerService = Depends(get_ledger_service),
):
    """
    Record a trade.

    Validates:
    - entry_type is BUY or SELL
    - quantity and price are positive
    - fee, when given, is not negative
    - the account exists

    SELL entries are returned with their realized P&L.
    """
    entry = service.create_entry(_instruction(data))
    return LedgerEntryResponse.model_validate(entry)


@router.post("/batch", response_model=BatchCreateResponse, status_code=status.HTTP_201_CREATED)
def create_batch(
    data: LedgerEntryBatchCreate,
    service: LedgerService = Depends(get_ledger_service),
):
    """
    Import many trades at once.

    All entries are validated before any is written. P&L of the
    imported SELL entries is left empty; run /ledger/recalculate-pnl
    afterwards.
    """
    count = service.create_entries(_instruction(item) for item in data.entries)
    return BatchCreateResponse(count=count)


@router.post("/recalculate-pnl", response_model=RecalculationResponse)
def recalculate_pnl(service: LedgerService = Depends(get_ledger_service)):
    """Recompute the realized P&L of every SELL entry."""
    return RecalculationResponse(**service.recalculate_all_pnl().to_dict())


# =============================================================
# SINGLE ENTRY
# =============================================================

@router.get("/{entry_id}", response_model=LedgerEntryResponse)
def get_entry(entry_id: str, service: LedgerService = Depends(get_ledger_service)):
    return LedgerEntryResponse.model_validate(service.get_entry(entry_id))


@router.patch("/{entry_id}", response_model=LedgerEntryResponse)
def update_entry(
    entry_id: str,
    data: LedgerEntryUpdate,
    service: LedgerService = Depends(get_ledger_service),
):
    """
    Edit an entry.

    Other SELL entries that depend on this one keep their P&L
    until the next recalculation.
    """
    entry = service.update_entry(entry_id, data.model_dump(exclude_unset=True))
    return LedgerEntryResponse.model_validate(entry)


@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_entry(entry_id: str, service: LedgerService = Depends(get_ledger_service)):
    service.delete_entry(entry_id)


# =============================================================
# METADATA
# =============================================================

@router.get("/{entry_id}/metadata", response_model=List[MetadataResponse])
def get_metadata(entry_id: str, service: LedgerService = Depends(get_ledger_service)):
    return [MetadataResponse.model_validate(m) for m in service.get_metadata(entry_id)]


@router.post(
    "/{entry_id}/metadata",
    response_model=MetadataResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_metadata(
    entry_id: str,
    data: MetadataCreate,
    service: LedgerService = Depends(get_ledger_service),
):
    item = service.add_metadata(entry_id, data.key, data.value)
    return MetadataResponse.model_validate(item)


@router.delete("/{entry_id}/metadata/{metadata_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_metadata(
    entry_id: str,
    metadata_id: str,
    service: LedgerService = Depends(get_ledger_service),
):
    service.delete_metadata(metadata_id)
