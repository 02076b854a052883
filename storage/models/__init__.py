"""
Storage Models Package.

ORM models for the ledger database.

============================================================
MODEL ORGANIZATION
============================================================

Base (base.py)
- Base
- TimestampMixin

Ledger (ledger.py)
- Account
- Asset
- LedgerEntry
- LedgerMetadata

============================================================
DESIGN PRINCIPLES
============================================================

- All timestamps are timezone-aware
- All amounts are exact fixed-point Money columns
- No business logic in models

============================================================
"""

from storage.models.base import Base, TimestampMixin, MONEY, Money, UTCDateTime

from storage.models.ledger import (
    Account,
    Asset,
    LedgerEntry,
    LedgerMetadata,
)

__all__ = [
    "Base",
    "TimestampMixin",
    "MONEY",
    "Money",
    "UTCDateTime",
    "Account",
    "Asset",
    "LedgerEntry",
    "LedgerMetadata",
]
