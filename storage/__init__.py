"""
Storage Package.

This package manages all ledger data persistence.

Modules:
- models/: ORM models (accounts, assets, ledger entries, metadata)
- repositories/: Data access layer
"""
