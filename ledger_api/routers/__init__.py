"""
Ledger API Routers.
"""
from . import accounts, assets, ledger

__all__ = ["accounts", "assets", "ledger"]
