"""
Ledger API.

HTTP surface of the ledger engine:
- /accounts: accounts, balances, realized P&L
- /ledger:   trades, CSV export, metadata, P&L recalculation
- /assets:   asset catalogue
"""
