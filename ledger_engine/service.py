"""
Ledger Service.

This service handles:
- Recording trades (single and bulk) with normalized amounts
- Realized P&L on SELL entries
- Editing and deleting entries
- Entry metadata
- CSV export
- Bulk P&L recalculation
- Account aggregates
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from sqlalchemy.orm import Session

from storage.models.base import as_utc, utc_now
from storage.models.ledger import LedgerEntry, LedgerMetadata
from storage.repositories.accounts import AccountRepository
from storage.repositories.ledger import LedgerEntryRepository, LedgerMetadataRepository

from .config import LedgerConfig
from .cost_basis import CostBasisCalculator
from .errors import NotFound
from .export import entries_to_csv
from .normalizer import normalize, require_fee, require_positive, signed_quantity, value_base
from .pnl import PnLAssigner
from .positions import PositionAggregator
from .recalculation import RecalculationJob
from .types import EntryType, RecalculationResult, TradeInstruction


logger = logging.getLogger(__name__)


UPDATABLE_FIELDS = ("symbol", "entry_type", "quantity", "price", "fee", "notes", "timestamp")


class LedgerService:
    """
    Service for the trade ledger.

    One instance per Session. Every public write commits before
    returning; validation errors are raised before anything is
    written.
    """

    def __init__(self, session: Session, config: Optional[LedgerConfig] = None):
        self.session = session
        self.config = config or LedgerConfig()
        self.entries = LedgerEntryRepository(session)
        self.metadata = LedgerMetadataRepository(session)
        self.accounts = AccountRepository(session)

        self.cost_basis = CostBasisCalculator(self.entries)
        self.assigner = PnLAssigner(self.cost_basis)
        self.positions = PositionAggregator(self.entries)

    # ---------------------------------------------------------
    # HELPERS
    # ---------------------------------------------------------

    def _require_account(self, account_id: str) -> None:
        if self.accounts.get_account(account_id) is None:
            raise NotFound("account", account_id)

    def _require_entry(self, entry_id: str) -> LedgerEntry:
        entry = self.entries.get_entry(entry_id)
        if entry is None:
            raise NotFound("entry", entry_id)
        return entry

    def _build_record(self, trade: TradeInstruction) -> Dict[str, Any]:
        """Validate and normalize a trade into column values (pnl excluded)."""
        amounts = normalize(trade.entry_type, trade.quantity, trade.price, trade.fee)
        return {
            "account_id": trade.account_id,
            "symbol": trade.symbol,
            "entry_type": amounts.entry_type.value,
            "quantity": amounts.signed_quantity,
            "price": amounts.price,
            "fee": amounts.fee,
            "value_base": amounts.value_base,
            "notes": trade.notes,
            "timestamp": as_utc(trade.timestamp) or utc_now(),
        }

    # ---------------------------------------------------------
    # CREATE
    # ---------------------------------------------------------

    def create_entry(self, trade: TradeInstruction) -> LedgerEntry:
        """
        Record one trade.

        The cost basis is read and the entry written in the same
        transaction. SELLs get their realized P&L immediately.

        Raises:
            InvalidEntryType, InvalidAmount: Rejected input
            NotFound: Unknown account
        """
        record = self._build_record(trade)
        self._require_account(trade.account_id)

        record["pnl"] = self.assigner.assign(
            account_id=record["account_id"],
            symbol=record["symbol"],
            entry_type=record["entry_type"],
            quantity=record["quantity"],
            price=record["price"],
        )

        entry = self.entries.create_entry(record)
        self.entries.commit()
        return entry

    def create_entries(self, trades: Iterable[TradeInstruction]) -> int:
        """
        Bulk import.

        Every trade is validated before any is written; one bad
        trade rejects the whole batch. Imported SELLs keep
        pnl = None until recalculate_all_pnl runs.

        Returns:
            Number of entries created
        """
        trades = list(trades)
        records = [self._build_record(trade) for trade in trades]
        for account_id in sorted({r["account_id"] for r in records}):
            self._require_account(account_id)

        for record in records:
            record["pnl"] = None

        count = self.entries.create_entries(records)
        self.entries.commit()
        logger.info(f"Imported {count} ledger entries")
        return count

    # ---------------------------------------------------------
    # UPDATE / DELETE
    # ---------------------------------------------------------

    def update_entry(self, entry_id: str, changes: Mapping[str, Any]) -> LedgerEntry:
        """
        Edit an entry.

        Only keys present in changes are touched. Quantity is given
        as a positive magnitude; the stored sign follows the
        (possibly new) entry type. quantity, price and value_base
        are rewritten whenever any of quantity, price or entry_type
        changes. SELL entries always get their pnl recomputed, BUY
        entries always end with pnl = None.

        Dependent SELL entries are not touched; their pnl stays
        stale until recalculate_all_pnl.

        Raises:
            NotFound: Unknown entry
            InvalidEntryType, InvalidAmount: Rejected input
        """
        unknown = set(changes) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValueError(f"Cannot update fields: {sorted(unknown)}")

        entry = self._require_entry(entry_id)

        kind = EntryType.parse(changes.get("entry_type", entry.entry_type))
        if "quantity" in changes:
            quantity = require_positive(changes["quantity"], "quantity")
        else:
            quantity = abs(entry.quantity)
        if "price" in changes:
            price = require_positive(changes["price"], "price")
        else:
            price = entry.price

        fields: Dict[str, Any] = {}
        if "fee" in changes:
            fields["fee"] = require_fee(changes["fee"])
        if changes.get("symbol") is not None:
            fields["symbol"] = changes["symbol"]
        if "notes" in changes:
            fields["notes"] = changes["notes"]
        if changes.get("timestamp") is not None:
            fields["timestamp"] = as_utc(changes["timestamp"])

        if {"quantity", "price", "entry_type"} & set(changes):
            fields["entry_type"] = kind.value
            fields["quantity"] = signed_quantity(kind, quantity)
            fields["price"] = price
            fields["value_base"] = value_base(kind, quantity, price)

        fields["pnl"] = self.assigner.assign(
            account_id=entry.account_id,
            symbol=fields.get("symbol", entry.symbol),
            entry_type=kind,
            quantity=quantity,
            price=price,
            exclude_entry_id=entry.id,
        )

        entry = self.entries.update_entry(entry_id, fields)
        self.entries.commit()
        return entry

    def delete_entry(self, entry_id: str) -> None:
        """
        Delete an entry and its metadata.

        Raises:
            NotFound: Unknown entry
        """
        self._require_entry(entry_id)
        self.entries.delete_entry(entry_id)
        self.entries.commit()

    # ---------------------------------------------------------
    # READ
    # ---------------------------------------------------------

    def get_entry(self, entry_id: str) -> LedgerEntry:
        """
        Raises:
            NotFound: Unknown entry
        """
        return self._require_entry(entry_id)

    def page_limit(self, limit: Optional[int] = None) -> int:
        """Effective page size: default_page_limit when unset, capped at max_page_limit."""
        if limit is None:
            limit = self.config.default_page_limit
        return min(limit, self.config.max_page_limit)

    def list_entries(
        self,
        account_id: Optional[str] = None,
        symbol: Optional[str] = None,
        entry_type: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> Tuple[List[LedgerEntry], int]:
        """
        Filtered page of entries, newest first, with the total count.

        limit defaults to config.default_page_limit and is capped at
        config.max_page_limit.
        """
        if entry_type is not None:
            entry_type = EntryType.parse(entry_type).value

        return self.entries.list_entries(
            account_id=account_id,
            symbol=symbol,
            entry_type=entry_type,
            start_date=start_date,
            end_date=end_date,
            limit=self.page_limit(limit),
            offset=max(offset, 0),
        )

    # ---------------------------------------------------------
    # METADATA
    # ---------------------------------------------------------

    def add_metadata(self, entry_id: str, key: str, value: str) -> LedgerMetadata:
        self._require_entry(entry_id)
        item = self.metadata.add_metadata(entry_id, key, value)
        self.metadata.commit()
        return item

    def get_metadata(self, entry_id: str) -> List[LedgerMetadata]:
        self._require_entry(entry_id)
        return self.metadata.list_metadata(entry_id)

    def delete_metadata(self, metadata_id: str) -> None:
        """
        Raises:
            NotFound: Unknown metadata
        """
        if self.metadata.get_metadata(metadata_id) is None:
            raise NotFound("metadata", metadata_id)
        self.metadata.delete_metadata(metadata_id)
        self.metadata.commit()

    # ---------------------------------------------------------
    # EXPORT
    # ---------------------------------------------------------

    def export_csv(
        self,
        account_id: Optional[str] = None,
        symbol: Optional[str] = None,
        entry_type: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> str:
        """Entries matching the filters as CSV, up to config.csv_export_limit rows."""
        if entry_type is not None:
            entry_type = EntryType.parse(entry_type).value

        entries, total = self.entries.list_entries(
            account_id=account_id,
            symbol=symbol,
            entry_type=entry_type,
            start_date=start_date,
            end_date=end_date,
            limit=self.config.csv_export_limit,
        )
        if total > len(entries):
            logger.warning(f"CSV export truncated to {len(entries)} of {total} entries")
        return entries_to_csv(entries)

    # ---------------------------------------------------------
    # P&L
    # ---------------------------------------------------------

    def recalculate_all_pnl(self) -> RecalculationResult:
        """Recompute pnl of every SELL entry against the current BUY history."""
        job = RecalculationJob(self.entries, self.assigner, self.config)
        return job.run()

    def balances(self, account_id: str) -> Dict[str, Decimal]:
        self._require_account(account_id)
        return self.positions.balances(account_id)

    def total_pnl(self, account_id: str) -> Decimal:
        self._require_account(account_id)
        return self.positions.total_pnl(account_id)
