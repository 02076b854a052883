"""
Ledger Engine - Error Taxonomy.

============================================================
PURPOSE
============================================================
Error classification for ledger accounting failures.

ERROR CATEGORIES:
1. Validation Errors - Amounts or entry types rejected before
   normalization, never persisted
2. Not Found Errors - Operation references a missing record
3. Conflict Errors - Unique constraints on catalogue data

NOT AN ERROR:
- A missing cost basis. A SELL without prior BUYs simply has
  pnl = None.

Store failures (I/O, constraints) are raised by the repository
layer as storage.repositories.exceptions.RepositoryException and
propagate unchanged. Nothing here is retried.

============================================================
"""

from enum import Enum
from typing import Optional, Dict, Any
from dataclasses import dataclass


# ============================================================
# ERROR CATEGORIES
# ============================================================

class ErrorCategory(Enum):
    """Error category classification."""

    VALIDATION = "VALIDATION"
    """Input rejected before normalization."""

    NOT_FOUND = "NOT_FOUND"
    """Referenced record does not exist."""

    CONFLICT = "CONFLICT"
    """Record conflicts with existing data."""

    INTERNAL = "INTERNAL"
    """Internal system error."""


# ============================================================
# ERROR CODE REGISTRY
# ============================================================

@dataclass
class ErrorCodeInfo:
    """Information about an error code."""

    code: str
    """Error code."""

    category: ErrorCategory
    """Error category."""

    description: str
    """Human-readable description."""

    http_status: int
    """Status the API layer answers with."""


ERROR_CODES: Dict[str, ErrorCodeInfo] = {
    # ========== VALIDATION ERRORS ==========
    "VAL_INVALID_AMOUNT": ErrorCodeInfo(
        code="VAL_INVALID_AMOUNT",
        category=ErrorCategory.VALIDATION,
        description="Quantity or price is not positive, or fee is negative",
        http_status=400,
    ),
    "VAL_INVALID_ENTRY_TYPE": ErrorCodeInfo(
        code="VAL_INVALID_ENTRY_TYPE",
        category=ErrorCategory.VALIDATION,
        description="Entry type must be BUY or SELL",
        http_status=400,
    ),

    # ========== NOT FOUND ERRORS ==========
    "NF_ENTRY": ErrorCodeInfo(
        code="NF_ENTRY",
        category=ErrorCategory.NOT_FOUND,
        description="Ledger entry not found",
        http_status=404,
    ),
    "NF_ACCOUNT": ErrorCodeInfo(
        code="NF_ACCOUNT",
        category=ErrorCategory.NOT_FOUND,
        description="Account not found",
        http_status=404,
    ),
    "NF_METADATA": ErrorCodeInfo(
        code="NF_METADATA",
        category=ErrorCategory.NOT_FOUND,
        description="Metadata not found",
        http_status=404,
    ),
    "NF_ASSET": ErrorCodeInfo(
        code="NF_ASSET",
        category=ErrorCategory.NOT_FOUND,
        description="Asset not found",
        http_status=404,
    ),

    # ========== CONFLICT ERRORS ==========
    "DUP_ASSET": ErrorCodeInfo(
        code="DUP_ASSET",
        category=ErrorCategory.CONFLICT,
        description="Asset symbol already exists",
        http_status=409,
    ),
}


def get_error_info(code: str) -> ErrorCodeInfo:
    """
    Get error info for a code.

    Args:
        code: Error code

    Returns:
        ErrorCodeInfo or default unknown error
    """
    return ERROR_CODES.get(code, ErrorCodeInfo(
        code=code,
        category=ErrorCategory.INTERNAL,
        description=f"Unknown error: {code}",
        http_status=500,
    ))


# ============================================================
# EXCEPTIONS
# ============================================================

class LedgerError(Exception):
    """Base exception for ledger engine failures."""

    default_code = "INT_UNEXPECTED_ERROR"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}
        super().__init__(f"[{self.code}] {message}")

    @property
    def info(self) -> ErrorCodeInfo:
        return get_error_info(self.code)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class InvalidAmount(LedgerError):
    """Non-positive quantity/price, negative fee or non-numeric input."""

    default_code = "VAL_INVALID_AMOUNT"

    def __init__(self, field: str, value: Any, reason: str) -> None:
        super().__init__(
            message=f"{field} {reason}",
            details={"field": field, "value": str(value)},
        )
        self.field = field
        self.value = value


class InvalidEntryType(LedgerError):
    """Entry type outside {BUY, SELL}."""

    default_code = "VAL_INVALID_ENTRY_TYPE"

    def __init__(self, value: Any) -> None:
        super().__init__(
            message=f"Invalid entry type {value!r}. Must be one of: BUY, SELL",
            details={"value": str(value)},
        )


class NotFound(LedgerError):
    """Operation referenced a record that does not exist."""

    _CODES = {
        "entry": "NF_ENTRY",
        "account": "NF_ACCOUNT",
        "metadata": "NF_METADATA",
        "asset": "NF_ASSET",
    }

    def __init__(self, resource: str, record_id: Any) -> None:
        super().__init__(
            message=f"{resource.capitalize()} {record_id} not found",
            code=self._CODES.get(resource, "NF_ENTRY"),
            details={"resource": resource, "id": str(record_id)},
        )
        self.resource = resource
        self.record_id = record_id


class DuplicateAsset(LedgerError):
    """Asset symbol already registered."""

    default_code = "DUP_ASSET"

    def __init__(self, symbol: str) -> None:
        super().__init__(
            message=f"Asset {symbol} already exists",
            details={"symbol": symbol},
        )
        self.symbol = symbol
