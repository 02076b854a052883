"""
Ledger Engine - Store Contract.

============================================================
PURPOSE
============================================================
The queryable store the engine reads cost bases and
aggregates from, and writes normalized entries to.

storage.repositories.ledger.LedgerEntryRepository is the
SQLAlchemy implementation.

All amounts cross this boundary as Decimal, never float.

============================================================
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from decimal import Decimal
from typing import Any, Dict, List, Optional

from .types import BuyLeg, SellLeg


class LedgerStore(ABC):
    """Abstract store of ledger entries."""

    # --------------------------------------------------------
    # READS
    # --------------------------------------------------------

    @abstractmethod
    def find_buy_entries(
        self,
        account_id: str,
        symbol: str,
        exclude_entry_id: Optional[str] = None,
    ) -> List[BuyLeg]:
        """All BUY entries of an account+symbol, any timestamp."""

    @abstractmethod
    def find_sell_entries(
        self,
        after_id: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[SellLeg]:
        """SELL entries ordered by id, starting after after_id."""

    @abstractmethod
    def sum_quantity_by_symbol(self, account_id: str) -> Dict[str, Decimal]:
        """Signed quantity per symbol."""

    @abstractmethod
    def sum_value_base(self, account_id: str) -> Decimal:
        """Sum of value_base over every entry of the account."""

    # --------------------------------------------------------
    # WRITES
    # --------------------------------------------------------

    @abstractmethod
    def create_entry(self, record: Dict[str, Any]) -> Any:
        """Persist a fully normalized entry."""

    @abstractmethod
    def update_entry_pnl(self, entry_id: str, pnl: Optional[Decimal]) -> None:
        """Overwrite the pnl of one entry."""

    @abstractmethod
    def update_entry(self, entry_id: str, fields: Dict[str, Any]) -> Any:
        """Apply already-normalized field changes to one entry."""

    # --------------------------------------------------------
    # TRANSACTIONS
    # --------------------------------------------------------

    @abstractmethod
    def atomic(self) -> AbstractContextManager:
        """Savepoint: everything inside is written or nothing is."""

    @abstractmethod
    def commit(self) -> None:
        """Commit the current transaction."""
