"""
Ledger Repositories.

============================================================
PURPOSE
============================================================
Data access for ledger entries and their metadata.

LedgerEntryRepository is the durable implementation of the
ledger engine's store contract (ledger_engine.store.LedgerStore):
BUY/SELL scans, per-symbol and per-account aggregates, and the
entry writes.

============================================================
DATA LIFECYCLE
============================================================
- Stage: OPERATIONAL
- Mutability: MUTABLE (entries may be edited or deleted)
- Derived columns (signed quantity, value_base, pnl) are
  computed by the engine before they reach this layer

============================================================
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sqlalchemy import select, update, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ledger_engine.store import LedgerStore
from ledger_engine.types import BuyLeg, EntryType, SellLeg
from storage.models.base import stores_decimal_as_text
from storage.models.ledger import LedgerEntry, LedgerMetadata
from storage.repositories.base import BaseRepository
from storage.repositories.exceptions import RecordNotFoundError


class LedgerEntryRepository(BaseRepository[LedgerEntry], LedgerStore):
    """
    Repository for ledger entries.

    ============================================================
    SCOPE
    ============================================================
    - Entry CRUD and filtered listings
    - Cost basis reads (BUY legs)
    - Recalculation reads (SELL legs, keyset-paginated by id)
    - Balance and cash P&L aggregates

    ============================================================
    """

    def __init__(self, session: Session) -> None:
        super().__init__(session, LedgerEntry, "LedgerEntryRepository")

    # =========================================================
    # WRITES
    # =========================================================

    def create_entry(self, record: Dict[str, Any]) -> LedgerEntry:
        """
        Persist a normalized entry.

        Args:
            record: Column values, derived fields included

        Returns:
            Created LedgerEntry
        """
        entity = LedgerEntry(**record)
        entity = self._add(entity)
        self._logger.info(
            f"Created ledger entry {entity.id}: {entity.entry_type} {entity.symbol} "
            f"qty={entity.quantity} value_base={entity.value_base} pnl={entity.pnl}"
        )
        return entity

    def create_entries(self, records: Iterable[Dict[str, Any]]) -> int:
        """
        Persist many normalized entries in one flush.

        Returns:
            Number of entries added
        """
        entities = [LedgerEntry(**record) for record in records]
        try:
            self._session.add_all(entities)
            self._session.flush()
        except SQLAlchemyError as e:
            self._handle_db_error(e, "create_entries", {"count": len(entities)})
        self._logger.info(f"Created {len(entities)} ledger entries")
        return len(entities)

    def update_entry(self, entry_id: str, fields: Dict[str, Any]) -> LedgerEntry:
        """
        Apply field changes to an entry.

        Raises:
            RecordNotFoundError: If the entry does not exist
        """
        entity = self._get_by_id_or_raise(entry_id, "entry_id")
        for name, value in fields.items():
            setattr(entity, name, value)
        self._flush("update_entry")
        self._logger.info(f"Updated ledger entry {entry_id}: {sorted(fields)}")
        return entity

    def update_entry_pnl(self, entry_id: str, pnl: Optional[Decimal]) -> None:
        """
        Overwrite pnl of one entry.

        Issued as a single UPDATE so the recalculation job does
        not load every entry into the session.

        Raises:
            RecordNotFoundError: If the entry does not exist
        """
        stmt = (
            update(LedgerEntry)
            .where(LedgerEntry.id == entry_id)
            .values(pnl=pnl)
            .execution_options(synchronize_session=False)
        )
        try:
            result = self._session.execute(stmt)
        except SQLAlchemyError as e:
            self._handle_db_error(e, "update_entry_pnl", {"id": entry_id})

        if result.rowcount == 0:
            raise RecordNotFoundError(self._repository_name, entry_id, "entry_id")

        # An already loaded entry must not keep serving the old value
        loaded = self._session.identity_map.get(self._session.identity_key(LedgerEntry, entry_id))
        if loaded is not None:
            self._session.expire(loaded, ["pnl"])

    def delete_entry(self, entry_id: str) -> None:
        """
        Delete an entry and its metadata.

        Raises:
            RecordNotFoundError: If the entry does not exist
        """
        entity = self._get_by_id_or_raise(entry_id, "entry_id")
        self._delete(entity)
        self._logger.info(f"Deleted ledger entry {entry_id}")

    # =========================================================
    # READS
    # =========================================================

    def get_entry(self, entry_id: str) -> Optional[LedgerEntry]:
        """Get entry by ID."""
        return self._get_by_id(entry_id)

    def list_entries(
        self,
        account_id: Optional[str] = None,
        symbol: Optional[str] = None,
        entry_type: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> Tuple[List[LedgerEntry], int]:
        """
        Filtered listing, newest trade first.

        Args:
            account_id: Restrict to one account
            symbol: Case-insensitive substring of the symbol
            entry_type: BUY or SELL
            start_date: Inclusive lower bound on timestamp
            end_date: Inclusive upper bound on timestamp
            limit: Page size
            offset: Rows to skip

        Returns:
            (entries, total matching rows)
        """
        stmt = select(LedgerEntry)

        if account_id:
            stmt = stmt.where(LedgerEntry.account_id == account_id)
        if symbol:
            stmt = stmt.where(LedgerEntry.symbol.icontains(symbol, autoescape=True))
        if entry_type:
            stmt = stmt.where(LedgerEntry.entry_type == entry_type)
        if start_date:
            stmt = stmt.where(LedgerEntry.timestamp >= start_date)
        if end_date:
            stmt = stmt.where(LedgerEntry.timestamp <= end_date)

        total = self._count(stmt)
        page = (
            stmt.order_by(LedgerEntry.timestamp.desc(), LedgerEntry.id)
            .limit(limit)
            .offset(offset)
        )
        return self._execute_query(page), total

    def find_buy_entries(
        self,
        account_id: str,
        symbol: str,
        exclude_entry_id: Optional[str] = None,
    ) -> List[BuyLeg]:
        """All BUY legs of an account+symbol, regardless of timestamp."""
        stmt = select(LedgerEntry.quantity, LedgerEntry.price).where(
            LedgerEntry.account_id == account_id,
            LedgerEntry.symbol == symbol,
            LedgerEntry.entry_type == EntryType.BUY.value,
        )
        if exclude_entry_id:
            stmt = stmt.where(LedgerEntry.id != exclude_entry_id)

        return [BuyLeg(quantity=row.quantity, price=row.price) for row in self._execute_rows(stmt)]

    def find_sell_entries(
        self,
        after_id: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[SellLeg]:
        """SELL legs ordered by id, strictly after after_id."""
        stmt = select(
            LedgerEntry.id,
            LedgerEntry.account_id,
            LedgerEntry.symbol,
            LedgerEntry.quantity,
            LedgerEntry.price,
        ).where(LedgerEntry.entry_type == EntryType.SELL.value)

        if after_id is not None:
            stmt = stmt.where(LedgerEntry.id > after_id)
        stmt = stmt.order_by(LedgerEntry.id)
        if limit is not None:
            stmt = stmt.limit(limit)

        return [
            SellLeg(
                id=row.id,
                account_id=row.account_id,
                symbol=row.symbol,
                quantity=row.quantity,
                price=row.price,
            )
            for row in self._execute_rows(stmt)
        ]

    # =========================================================
    # AGGREGATES
    # =========================================================

    def _sums_in_python(self) -> bool:
        """Text-stored amounts cannot be summed by SQL without a float cast."""
        return stores_decimal_as_text(self._session.get_bind().dialect)

    def sum_quantity_by_symbol(self, account_id: str) -> Dict[str, Decimal]:
        """Signed quantity per symbol for an account."""
        if self._sums_in_python():
            stmt = (
                select(LedgerEntry.symbol, LedgerEntry.quantity)
                .where(LedgerEntry.account_id == account_id)
                .order_by(LedgerEntry.symbol)
            )
            totals: Dict[str, Decimal] = {}
            for row in self._execute_rows(stmt):
                totals[row.symbol] = totals.get(row.symbol, Decimal("0")) + row.quantity
            return totals

        stmt = (
            select(LedgerEntry.symbol, func.sum(LedgerEntry.quantity).label("quantity"))
            .where(LedgerEntry.account_id == account_id)
            .group_by(LedgerEntry.symbol)
            .order_by(LedgerEntry.symbol)
        )
        return {row.symbol: Decimal(row.quantity) for row in self._execute_rows(stmt)}

    def sum_value_base(self, account_id: str) -> Decimal:
        """Sum of value_base for an account (zero without entries)."""
        if self._sums_in_python():
            stmt = select(LedgerEntry.value_base).where(LedgerEntry.account_id == account_id)
            return sum((row.value_base for row in self._execute_rows(stmt)), Decimal("0"))

        stmt = select(func.sum(LedgerEntry.value_base)).where(
            LedgerEntry.account_id == account_id
        )
        total = self._execute_scalar(stmt)
        return Decimal(total) if total is not None else Decimal("0")


class LedgerMetadataRepository(BaseRepository[LedgerMetadata]):
    """Repository for ledger entry metadata."""

    def __init__(self, session: Session) -> None:
        super().__init__(session, LedgerMetadata, "LedgerMetadataRepository")

    def add_metadata(self, ledger_entry_id: str, key: str, value: str) -> LedgerMetadata:
        """Attach a key/value pair to an entry."""
        return self._add(LedgerMetadata(ledger_entry_id=ledger_entry_id, key=key, value=value))

    def list_metadata(self, ledger_entry_id: str) -> List[LedgerMetadata]:
        """Metadata of an entry, oldest first."""
        stmt = (
            select(LedgerMetadata)
            .where(LedgerMetadata.ledger_entry_id == ledger_entry_id)
            .order_by(LedgerMetadata.created_at, LedgerMetadata.id)
        )
        return self._execute_query(stmt)

    def get_metadata(self, metadata_id: str) -> Optional[LedgerMetadata]:
        return self._get_by_id(metadata_id)

    def delete_metadata(self, metadata_id: str) -> None:
        """
        Raises:
            RecordNotFoundError: If the metadata does not exist
        """
        self._delete(self._get_by_id_or_raise(metadata_id, "metadata_id"))
