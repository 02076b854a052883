"""
Ledger Engine - Configuration.

============================================================
PURPOSE
============================================================
All configuration for the ledger engine.

Values come from LEDGER_* environment variables (a .env file
is honoured through database.engine's load_dotenv) and fall
back to the defaults below.

============================================================
"""

import os
from dataclasses import dataclass


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class LedgerConfig:
    """
    Ledger engine configuration.

    The recalculation job is a bounded loop: it reads SELL
    entries in batches of recalc_batch_size and commits after
    each batch.
    """

    recalc_batch_size: int = 500
    """SELL entries processed per committed batch."""

    recalc_stop_on_error: bool = False
    """Abort the recalculation on the first failing entry."""

    default_page_limit: int = 100
    """Page size for entry listings."""

    max_page_limit: int = 1000
    """Upper bound for a requested page size."""

    csv_export_limit: int = 10000
    """Rows included in a CSV export."""

    default_base_currency: str = "USD"
    """Base currency for new accounts."""

    @classmethod
    def from_env(cls) -> "LedgerConfig":
        """Build configuration from the environment."""
        config = cls(
            recalc_batch_size=int(os.getenv("LEDGER_RECALC_BATCH_SIZE", "500")),
            recalc_stop_on_error=_env_bool("LEDGER_RECALC_STOP_ON_ERROR", False),
            default_page_limit=int(os.getenv("LEDGER_DEFAULT_PAGE_LIMIT", "100")),
            max_page_limit=int(os.getenv("LEDGER_MAX_PAGE_LIMIT", "1000")),
            csv_export_limit=int(os.getenv("LEDGER_CSV_EXPORT_LIMIT", "10000")),
            default_base_currency=os.getenv("LEDGER_DEFAULT_BASE_CURRENCY", "USD").upper(),
        )
        config.validate()
        return config

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ValueError: If a value is out of range
        """
        if self.recalc_batch_size <= 0:
            raise ValueError("recalc_batch_size must be positive")
        if self.default_page_limit <= 0:
            raise ValueError("default_page_limit must be positive")
        if self.max_page_limit < self.default_page_limit:
            raise ValueError("max_page_limit must be >= default_page_limit")
        if self.csv_export_limit <= 0:
            raise ValueError("csv_export_limit must be positive")
        if not self.default_base_currency:
            raise ValueError("default_base_currency must not be empty")
