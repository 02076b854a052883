"""
Ledger Engine - P&L Assigner.

============================================================
PURPOSE
============================================================
Attaches realized P&L to SELL entries:

    pnl = (sell_price - average_cost) * |quantity|

A SELL with no cost basis gets pnl = None. That is a valid
result, not a failure. BUY entries never carry a pnl.

Deterministic: same entry + same store snapshot -> same pnl.

============================================================
"""

from decimal import Decimal
from typing import Any, Optional

from .cost_basis import CostBasisCalculator
from .types import EntryType


def realized_pnl(price: Decimal, average_cost: Decimal, quantity: Decimal) -> Decimal:
    """Realized gain of selling |quantity| at price against average_cost."""
    return (price - average_cost) * abs(quantity)


class PnLAssigner:
    """Computes the pnl field of an entry from the current store state."""

    def __init__(self, calculator: CostBasisCalculator):
        self._calculator = calculator

    def assign(
        self,
        account_id: str,
        symbol: str,
        entry_type: Any,
        quantity: Decimal,
        price: Decimal,
        exclude_entry_id: Optional[str] = None,
    ) -> Optional[Decimal]:
        """
        P&L for an entry.

        Args:
            account_id: Owning account
            symbol: Traded symbol
            entry_type: BUY or SELL
            quantity: Quantity, either sign
            price: Sale price
            exclude_entry_id: Entry left out of the cost basis scan

        Returns:
            Realized P&L, or None for BUYs and SELLs without basis
        """
        if EntryType.parse(entry_type) is not EntryType.SELL:
            return None

        cost = self._calculator.average_cost(account_id, symbol, exclude_entry_id)
        if cost is None:
            return None

        return realized_pnl(price, cost, quantity)
