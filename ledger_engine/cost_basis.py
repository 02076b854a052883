"""
Ledger Engine - Cost Basis Calculator.

============================================================
PURPOSE
============================================================
Average acquisition cost of a symbol within one account:

    average_cost = Σ(|qty_i| * price_i) / Σ|qty_i|

over every BUY entry currently stored for the account+symbol.

============================================================
KNOWN LIMITATION
============================================================
The average spans ALL stored BUYs, including ones timestamped
after the SELL being priced. There is no point-in-time basis.

============================================================
"""

import logging
from decimal import Decimal
from typing import Iterable, Optional

from .store import LedgerStore
from .types import BuyLeg


logger = logging.getLogger(__name__)


def average_cost_of(legs: Iterable[BuyLeg]) -> Optional[Decimal]:
    """
    Weighted average price of a set of BUY legs.

    Returns None when there are no legs or their total quantity
    is exactly zero. Independent of leg order.
    """
    total_cost = Decimal("0")
    total_quantity = Decimal("0")
    seen = False

    for leg in legs:
        seen = True
        qty = abs(leg.quantity)
        total_cost += qty * leg.price
        total_quantity += qty

    if not seen or total_quantity == 0:
        return None

    return total_cost / total_quantity


class CostBasisCalculator:
    """Reads BUY legs from the store and averages them."""

    def __init__(self, store: LedgerStore):
        self._store = store

    def average_cost(
        self,
        account_id: str,
        symbol: str,
        exclude_entry_id: Optional[str] = None,
    ) -> Optional[Decimal]:
        """
        Average cost of a symbol in an account.

        Args:
            account_id: Account to scan
            symbol: Symbol, matched exactly
            exclude_entry_id: Entry left out of the scan

        Returns:
            Average cost, or None without a usable BUY history
        """
        legs = self._store.find_buy_entries(account_id, symbol, exclude_entry_id)
        cost = average_cost_of(legs)
        logger.debug(
            f"Average cost account={account_id} symbol={symbol} "
            f"legs={len(legs)} cost={cost}"
        )
        return cost
