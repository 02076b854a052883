"""
Ledger Engine - Types.

============================================================
PURPOSE
============================================================
Value objects exchanged between the ledger engine components
and the store.

CRITICAL PRINCIPLE:
    "quantity tracks the position, value_base tracks the cash."
    A BUY adds to holdings (+quantity) and spends cash
    (-value_base); a SELL does the opposite. The two signs are
    always opposite.

============================================================
"""

from datetime import datetime, timezone
from typing import Optional, Dict, Any, List
from dataclasses import dataclass, field
from enum import Enum
from decimal import Decimal

from .errors import InvalidEntryType


# ============================================================
# ENTRY TYPES
# ============================================================

class EntryType(str, Enum):
    """Trade direction of a ledger entry."""

    BUY = "BUY"
    """Acquisition: holdings up, cash out."""

    SELL = "SELL"
    """Disposal: holdings down, cash in."""

    @classmethod
    def parse(cls, value: Any) -> "EntryType":
        """
        Coerce a raw value into an EntryType.

        Raises:
            InvalidEntryType: If value is not BUY or SELL
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise InvalidEntryType(value) from None


# ============================================================
# NORMALIZATION
# ============================================================

@dataclass(frozen=True)
class NormalizedAmounts:
    """Canonical signed amounts of a trade."""

    entry_type: EntryType
    """Trade direction."""

    signed_quantity: Decimal
    """+|quantity| for BUY, -|quantity| for SELL."""

    price: Decimal
    """Positive unit price."""

    value_base: Decimal
    """-(|quantity| * price) for BUY, +(|quantity| * price) for SELL."""

    fee: Optional[Decimal] = None
    """Non-negative informational fee."""


@dataclass
class TradeInstruction:
    """
    A raw trade request as received from the caller.

    Amounts may still be strings or ints here; the normalizer
    turns them into Decimals.
    """

    account_id: str
    """Owning account (always explicit)."""

    symbol: str
    """Traded instrument, case-sensitive."""

    entry_type: Any
    """BUY or SELL."""

    quantity: Any
    """Traded amount, must be positive."""

    price: Any
    """Unit price, must be positive."""

    fee: Any = None
    """Optional non-negative fee."""

    timestamp: Optional[datetime] = None
    """Effective trade time, defaults to now."""

    notes: Optional[str] = None
    """Free text."""


# ============================================================
# STORE ROWS
# ============================================================

@dataclass(frozen=True)
class BuyLeg:
    """The part of a BUY entry the cost basis needs."""

    quantity: Decimal
    price: Decimal


@dataclass(frozen=True)
class SellLeg:
    """The part of a SELL entry the P&L recalculation needs."""

    id: str
    account_id: str
    symbol: str
    quantity: Decimal
    price: Decimal


# ============================================================
# RECALCULATION RESULT
# ============================================================

@dataclass
class RecalculationFailure:
    """A SELL entry whose P&L could not be recomputed."""

    entry_id: str
    """Entry that failed."""

    error: str
    """Error message."""

    def to_dict(self) -> Dict[str, str]:
        return {"entry_id": self.entry_id, "error": self.error}


@dataclass
class RecalculationResult:
    """Result of a recalculation run."""

    run_id: str
    """Unique run identifier."""

    started_at: datetime
    """When the run started."""

    completed_at: Optional[datetime] = None
    """When the run finished."""

    updated: int = 0
    """SELL entries written, unchanged values included."""

    batches: int = 0
    """Committed batches."""

    failures: List[RecalculationFailure] = field(default_factory=list)
    """Per-entry failures."""

    @property
    def success(self) -> bool:
        """Whether every SELL entry was recomputed."""
        return len(self.failures) == 0

    def finish(self) -> None:
        self.completed_at = datetime.now(timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "updated": self.updated,
            "failed": len(self.failures),
            "errors": [f.to_dict() for f in self.failures],
        }
