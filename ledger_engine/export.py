"""
Ledger Engine - CSV Export.

Renders ledger entries as CSV:

    Date,Type,Symbol,Quantity,Price,Fee,Total,P&L,Notes

Every cell is quoted. Total is value_base. Missing fee, P&L
and notes render as empty cells.
"""

import csv
import io
from decimal import Decimal
from typing import Iterable, List, Optional

from storage.models.ledger import LedgerEntry


CSV_HEADERS = ["Date", "Type", "Symbol", "Quantity", "Price", "Fee", "Total", "P&L", "Notes"]


def format_decimal(value: Optional[Decimal]) -> str:
    """Plain notation without trailing zeros; empty for None."""
    if value is None:
        return ""
    text = format(value, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text or "0"


def entry_row(entry: LedgerEntry) -> List[str]:
    return [
        entry.timestamp.isoformat(),
        entry.entry_type,
        entry.symbol,
        format_decimal(entry.quantity),
        format_decimal(entry.price),
        format_decimal(entry.fee),
        format_decimal(entry.value_base),
        format_decimal(entry.pnl),
        entry.notes or "",
    ]


def entries_to_csv(entries: Iterable[LedgerEntry]) -> str:
    """Render entries, in the given order, as a CSV document."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for entry in entries:
        writer.writerow(entry_row(entry))
    return buffer.getvalue()
