"""
Pydantic schemas for the Ledger API.

Amounts are Decimal on the way in and out; they are never
converted to float. Amount rules (positive quantity/price,
non-negative fee) are enforced by the ledger engine so that
they answer 400 like every other accounting rejection.
"""

from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# =============================================================
# ACCOUNTS
# =============================================================

class AccountCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    base_currency: Optional[str] = Field(None, min_length=1, max_length=10)


class AccountUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    base_currency: Optional[str] = Field(None, min_length=1, max_length=10)


class AccountResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    base_currency: str
    archived_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class BalanceResponse(BaseModel):
    account_id: str
    balances: Dict[str, Decimal]


class PnLResponse(BaseModel):
    account_id: str
    base_currency: str
    total_pnl: Decimal


# =============================================================
# LEDGER ENTRIES
# =============================================================

class LedgerEntryCreate(BaseModel):
    """A trade as submitted by the client."""
    account_id: str = Field(..., min_length=1)
    symbol: str = Field(..., min_length=1, max_length=32)
    entry_type: str = Field(..., description="BUY or SELL")
    quantity: Decimal = Field(..., description="Positive traded amount")
    price: Decimal = Field(..., description="Positive unit price")
    fee: Optional[Decimal] = Field(None, description="Non-negative, informational")
    timestamp: Optional[datetime] = Field(None, description="Trade time, defaults to now")
    notes: Optional[str] = None

    @field_validator("symbol")
    @classmethod
    def symbol_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("symbol is required")
        return v


class LedgerEntryBatchCreate(BaseModel):
    entries: List[LedgerEntryCreate] = Field(..., min_length=1)


class BatchCreateResponse(BaseModel):
    count: int


class LedgerEntryUpdate(BaseModel):
    """Partial edit; only fields sent are applied."""
    symbol: Optional[str] = Field(None, min_length=1, max_length=32)
    entry_type: Optional[str] = None
    quantity: Optional[Decimal] = None
    price: Optional[Decimal] = None
    fee: Optional[Decimal] = None
    timestamp: Optional[datetime] = None
    notes: Optional[str] = None


class LedgerEntryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    account_id: str
    symbol: str
    entry_type: str
    quantity: Decimal
    price: Decimal
    fee: Optional[Decimal] = None
    value_base: Decimal
    pnl: Optional[Decimal] = None
    notes: Optional[str] = None
    timestamp: datetime
    created_at: datetime
    updated_at: datetime


class PageMeta(BaseModel):
    total: int
    limit: int
    offset: int


class LedgerListResponse(BaseModel):
    data: List[LedgerEntryResponse]
    meta: PageMeta


# =============================================================
# METADATA
# =============================================================

class MetadataCreate(BaseModel):
    key: str = Field(..., min_length=1, max_length=100)
    value: str = Field(..., min_length=1)


class MetadataResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    ledger_entry_id: str
    key: str
    value: str
    created_at: datetime


# =============================================================
# RECALCULATION
# =============================================================

class RecalculationError(BaseModel):
    entry_id: str
    error: str


class RecalculationResponse(BaseModel):
    updated: int
    failed: int
    errors: List[RecalculationError] = []


# =============================================================
# ASSETS
# =============================================================

class AssetCreate(BaseModel):
    symbol: str = Field(..., min_length=1, max_length=32)
    name: Optional[str] = Field(None, max_length=100)
    precision: Optional[int] = Field(None, ge=0, le=18)


class AssetUpdate(BaseModel):
    symbol: Optional[str] = Field(None, min_length=1, max_length=32)
    name: Optional[str] = Field(None, max_length=100)
    precision: Optional[int] = Field(None, ge=0, le=18)


class AssetResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    symbol: str
    name: Optional[str] = None
    precision: int
    created_at: datetime
    updated_at: datetime
