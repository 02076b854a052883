"""
Database Package Initialization.

============================================================
LEDGER DATABASE PERSISTENCE LAYER
============================================================

Engine, session and transaction management for the ledger.
ORM models live in storage.models; data access goes through
storage.repositories.

REQUIRED:
- Every failure raises hard exceptions
- All transactions are explicit with commit/rollback

============================================================
"""

from .engine import (
    # Engine creation
    DEFAULT_DATABASE_URL,
    get_database_url,
    create_database_engine,
    create_session_factory,
    configure_engine,
    get_engine,

    # Session management
    get_session,
    get_session_factory,
    get_db_session,
    transaction_scope,

    # Database initialization
    initialize_database,
    verify_database_connection,
    create_all_tables,

    # Exceptions
    DatabasePersistenceError,
    DatabaseConnectionError,
    DatabaseInitializationError,
)

__all__ = [
    "DEFAULT_DATABASE_URL",
    "get_database_url",
    "create_database_engine",
    "create_session_factory",
    "configure_engine",
    "get_engine",
    "get_session",
    "get_session_factory",
    "get_db_session",
    "transaction_scope",
    "initialize_database",
    "verify_database_connection",
    "create_all_tables",
    "DatabasePersistenceError",
    "DatabaseConnectionError",
    "DatabaseInitializationError",
]
