"""
Ledger Engine - P&L Recalculation Job.

============================================================
PURPOSE
============================================================
Recomputes pnl for every stored SELL entry against the
current store state. Used after bulk imports, and to clear
stale P&L after BUY entries were edited or deleted.

GUARANTEES:
- Only the pnl column of SELL entries is written
- Every write counts as "updated", even when unchanged
- Each entry is written inside its own savepoint, so a
  failing entry is rolled back whole, never half-written
- Bounded: SELL entries are read in batches and each batch
  is committed before the next one is read
- Restartable: re-running after an interruption is safe,
  the job is idempotent per entry

FAILURE POLICY:
- Default: continue, collecting per-entry failures in the
  result
- recalc_stop_on_error: re-raise the first failure after
  committing the entries already written

============================================================
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from .config import LedgerConfig
from .pnl import PnLAssigner
from .store import LedgerStore
from .types import EntryType, RecalculationFailure, RecalculationResult, SellLeg


logger = logging.getLogger(__name__)


class RecalculationJob:
    """
    Batch recomputation of realized P&L.

    Usage:
        job = RecalculationJob(store, assigner)
        result = job.run()
        result.to_dict()  # {"updated": 12, "failed": 0, "errors": []}
    """

    def __init__(
        self,
        store: LedgerStore,
        assigner: PnLAssigner,
        config: Optional[LedgerConfig] = None,
    ):
        self._store = store
        self._assigner = assigner
        self._config = config or LedgerConfig()

    def run(self) -> RecalculationResult:
        """
        Recompute pnl for every SELL entry.

        Returns:
            RecalculationResult with updated count and failures
        """
        result = RecalculationResult(
            run_id=str(uuid.uuid4()),
            started_at=datetime.now(timezone.utc),
        )
        batch_size = self._config.recalc_batch_size

        logger.info(f"P&L recalculation {result.run_id} started (batch_size={batch_size})")

        after_id: Optional[str] = None
        while True:
            batch = self._store.find_sell_entries(after_id=after_id, limit=batch_size)
            if not batch:
                break

            for leg in batch:
                try:
                    self._recalculate_entry(leg)
                except Exception as e:
                    logger.warning(
                        f"P&L recalculation failed for entry {leg.id}: {e}",
                        exc_info=True,
                    )
                    if self._config.recalc_stop_on_error:
                        self._store.commit()
                        raise
                    result.failures.append(RecalculationFailure(entry_id=leg.id, error=str(e)))
                    continue
                result.updated += 1

            self._store.commit()
            result.batches += 1
            after_id = batch[-1].id

            if len(batch) < batch_size:
                break

        result.finish()
        logger.info(
            f"P&L recalculation {result.run_id} complete: "
            f"updated={result.updated} failed={len(result.failures)} batches={result.batches}"
        )
        return result

    def _recalculate_entry(self, leg: SellLeg) -> None:
        """Read cost basis and write pnl as one unit."""
        with self._store.atomic():
            pnl = self._assigner.assign(
                account_id=leg.account_id,
                symbol=leg.symbol,
                entry_type=EntryType.SELL,
                quantity=leg.quantity,
                price=leg.price,
            )
            self._store.update_entry_pnl(leg.id, pnl)
