"""
Ledger Engine - Position Aggregator.

============================================================
PURPOSE
============================================================
Read-side account aggregates.

- balances:  Σ signed quantity per symbol (BUYs and SELLs net)
- total_pnl: Σ value_base over all entries, i.e. the realized
             cash P&L in the account's base currency

total_pnl is NOT the sum of the per-entry pnl field. pnl is a
cost-basis-relative gain on SELLs; value_base is cash flow.
They differ whenever a BUY leg is still open.

============================================================
"""

from decimal import Decimal
from typing import Dict

from .store import LedgerStore


class PositionAggregator:
    """Open balances and cash P&L of an account."""

    def __init__(self, store: LedgerStore):
        self._store = store

    def balances(self, account_id: str) -> Dict[str, Decimal]:
        """Signed open quantity per symbol; empty for an account without entries."""
        return dict(self._store.sum_quantity_by_symbol(account_id))

    def total_pnl(self, account_id: str) -> Decimal:
        """Sum of value_base; zero for an account without entries."""
        total = self._store.sum_value_base(account_id)
        return total if total is not None else Decimal("0")
