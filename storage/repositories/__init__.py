"""
Repository Layer Package.

============================================================
PURPOSE
============================================================
The Repository Layer is the ONLY gateway to persistent storage.
All database access MUST go through repository classes.

============================================================
ARCHITECTURE PRINCIPLES
============================================================
1. DAO Pattern: One repository per aggregate
2. Session Injection: Sessions are injected, not created internally
3. Explicit Methods: Clear method names, no generic 'execute'
4. Exception Handling: All DB errors wrapped in repository exceptions

============================================================
REPOSITORIES
============================================================
- LedgerEntryRepository: Ledger entries, cost basis reads,
  aggregates (implements ledger_engine.store.LedgerStore)
- LedgerMetadataRepository: Entry key/value metadata
- AccountRepository: Accounts and archiving
- AssetRepository: Asset catalogue

============================================================
USAGE
============================================================

    from storage.repositories import LedgerEntryRepository

    repo = LedgerEntryRepository(session)
    repo.sum_quantity_by_symbol(account_id)

============================================================
"""

# =============================================================
# EXCEPTIONS
# =============================================================
from storage.repositories.exceptions import (
    RepositoryException,
    RecordNotFoundError,
    DuplicateRecordError,
    IntegrityError,
    ConnectionError,
    QueryError,
    TransactionError,
)

# =============================================================
# BASE REPOSITORY
# =============================================================
from storage.repositories.base import BaseRepository

# =============================================================
# LEDGER REPOSITORIES
# =============================================================
from storage.repositories.ledger import (
    LedgerEntryRepository,
    LedgerMetadataRepository,
)
from storage.repositories.accounts import (
    AccountRepository,
    AssetRepository,
)

__all__ = [
    # Exceptions
    "RepositoryException",
    "RecordNotFoundError",
    "DuplicateRecordError",
    "IntegrityError",
    "ConnectionError",
    "QueryError",
    "TransactionError",

    # Base
    "BaseRepository",

    # Ledger
    "LedgerEntryRepository",
    "LedgerMetadataRepository",
    "AccountRepository",
    "AssetRepository",
]
