"""
Ledger Domain ORM Models.

============================================================
PURPOSE
============================================================
Models for storing accounts, the asset catalogue, ledger
entries and their descriptive metadata.

============================================================
DATA LIFECYCLE ROLE
============================================================
- Stage: OPERATIONAL (accounting)
- Mutability: MUTABLE (entries can be edited or deleted)
- Source: Ledger service, bulk imports
- Consumers: Position aggregation, P&L recalculation, export

============================================================
SIGN CONVENTION
============================================================
- quantity:   + for BUY (holdings grow), - for SELL
- value_base: - for BUY (cash out),      + for SELL (cash in)

============================================================
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import (
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from storage.models.base import Base, TimestampMixin, UTCDateTime, generate_uuid, utc_now


class Account(Base, TimestampMixin):
    """
    Trading account.

    All value_base and pnl figures of its entries are expressed
    in the account's base currency. Archived accounts keep their
    entries but are hidden from default listings.
    """

    __tablename__ = "accounts"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=generate_uuid,
        comment="Account identifier"
    )

    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        comment="Display name"
    )

    base_currency: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
        default="USD",
        comment="Currency of value_base and pnl"
    )

    archived_at: Mapped[Optional[datetime]] = mapped_column(
        UTCDateTime(),
        nullable=True,
        comment="Archive timestamp, null when active"
    )

    entries: Mapped[List["LedgerEntry"]] = relationship(
        "LedgerEntry",
        back_populates="account",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def is_archived(self) -> bool:
        return self.archived_at is not None

    def __repr__(self) -> str:
        return f"<Account(id={self.id}, name={self.name}, base_currency={self.base_currency})>"


class Asset(Base, TimestampMixin):
    """
    Asset catalogue entry.

    Descriptive only; accounting never consults it.
    """

    __tablename__ = "assets"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=generate_uuid,
    )

    symbol: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        unique=True,
        comment="Upper-cased symbol"
    )

    name: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
    )

    precision: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=8,
        comment="Display precision"
    )

    def __repr__(self) -> str:
        return f"<Asset(symbol={self.symbol}, precision={self.precision})>"


class LedgerEntry(Base, TimestampMixin):
    """
    A single BUY or SELL record.

    ============================================================
    DERIVED FIELDS
    ============================================================
    quantity (signed), value_base and pnl are computed by the
    ledger engine at write time. pnl is only ever set on SELL
    entries and only when a cost basis exists.

    ============================================================
    """

    __tablename__ = "ledger_entries"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=generate_uuid,
        comment="Entry identifier"
    )

    account_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
        comment="Owning account"
    )

    symbol: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        comment="Traded instrument, case-sensitive as entered"
    )

    entry_type: Mapped[str] = mapped_column(
        String(4),
        nullable=False,
        comment="BUY or SELL"
    )

    quantity: Mapped[Decimal] = mapped_column(
        nullable=False,
        comment="Signed quantity: + BUY, - SELL"
    )

    price: Mapped[Decimal] = mapped_column(
        nullable=False,
        comment="Unit price, always positive"
    )

    fee: Mapped[Optional[Decimal]] = mapped_column(
        nullable=True,
        comment="Informational fee, never folded into value_base"
    )

    value_base: Mapped[Decimal] = mapped_column(
        nullable=False,
        comment="Signed cash effect: - BUY, + SELL"
    )

    pnl: Mapped[Optional[Decimal]] = mapped_column(
        nullable=True,
        comment="Realized P&L against average cost (SELL only)"
    )

    notes: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )

    timestamp: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
        default=utc_now,
        comment="Effective trade time"
    )

    account: Mapped["Account"] = relationship("Account", back_populates="entries")

    metadata_items: Mapped[List["LedgerMetadata"]] = relationship(
        "LedgerMetadata",
        back_populates="entry",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        Index("ix_ledger_entries_account_symbol_type", "account_id", "symbol", "entry_type"),
        Index("ix_ledger_entries_account_timestamp", "account_id", "timestamp"),
        Index("ix_ledger_entries_entry_type", "entry_type"),
    )

    def __repr__(self) -> str:
        return (
            f"<LedgerEntry(id={self.id}, {self.entry_type} {self.symbol} "
            f"qty={self.quantity} price={self.price})>"
        )


class LedgerMetadata(Base):
    """Free-form key/value annotation of a ledger entry."""

    __tablename__ = "ledger_metadata"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=generate_uuid,
    )

    ledger_entry_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("ledger_entries.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    key: Mapped[str] = mapped_column(String(100), nullable=False)

    value: Mapped[str] = mapped_column(Text, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
        default=utc_now,
    )

    entry: Mapped["LedgerEntry"] = relationship("LedgerEntry", back_populates="metadata_items")
