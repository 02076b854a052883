"""
Ledger Engine Module.

============================================================
PURPOSE
============================================================
Turns raw trade instructions into normalized, signed ledger
records and keeps realized P&L consistent with them.

============================================================
COMPONENTS
============================================================
- normalizer:    signed quantity / value_base from a raw trade
- cost_basis:    average cost over the BUY history
- pnl:           realized P&L of SELL entries
- recalculation: batch P&L recomputation
- positions:     open balances and cash P&L per account

The session-bound services (service, accounts, assets) and the
CSV export depend on the storage layer and are imported from
their modules directly:

    from ledger_engine.service import LedgerService

============================================================
"""

from .errors import (
    ErrorCategory,
    ErrorCodeInfo,
    ERROR_CODES,
    get_error_info,
    LedgerError,
    InvalidAmount,
    InvalidEntryType,
    NotFound,
    DuplicateAsset,
)
from .types import (
    EntryType,
    NormalizedAmounts,
    TradeInstruction,
    BuyLeg,
    SellLeg,
    RecalculationFailure,
    RecalculationResult,
)
from .config import LedgerConfig
from .store import LedgerStore
from .normalizer import normalize, to_decimal
from .cost_basis import CostBasisCalculator, average_cost_of
from .pnl import PnLAssigner, realized_pnl
from .recalculation import RecalculationJob
from .positions import PositionAggregator


__all__ = [
    # Errors
    "ErrorCategory",
    "ErrorCodeInfo",
    "ERROR_CODES",
    "get_error_info",
    "LedgerError",
    "InvalidAmount",
    "InvalidEntryType",
    "NotFound",
    "DuplicateAsset",
    # Types
    "EntryType",
    "NormalizedAmounts",
    "TradeInstruction",
    "BuyLeg",
    "SellLeg",
    "RecalculationFailure",
    "RecalculationResult",
    # Config
    "LedgerConfig",
    # Store
    "LedgerStore",
    # Components
    "normalize",
    "to_decimal",
    "CostBasisCalculator",
    "average_cost_of",
    "PnLAssigner",
    "realized_pnl",
    "RecalculationJob",
    "PositionAggregator",
]
