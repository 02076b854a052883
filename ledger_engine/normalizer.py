"""
Ledger Engine - Entry Normalizer.

============================================================
PURPOSE
============================================================
Turns a raw (entry_type, quantity, price, fee) into the
canonical signed amounts stored on a ledger entry.

    BUY:  quantity = +|q|   value_base = -(|q| * price)
    SELL: quantity = -|q|   value_base = +(|q| * price)

The fee is passed through untouched; it never changes
value_base or P&L.

No side effects.

============================================================
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from .errors import InvalidAmount
from .types import EntryType, NormalizedAmounts


def to_decimal(value: Any, field: str) -> Decimal:
    """
    Coerce an input amount to Decimal.

    Floats go through str() so 0.1 becomes Decimal("0.1").

    Raises:
        InvalidAmount: If value is missing, non-numeric or not finite
    """
    if isinstance(value, bool) or value is None:
        raise InvalidAmount(field, value, "must be a number")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            raise InvalidAmount(field, value, "must be a number") from None
    if not result.is_finite():
        raise InvalidAmount(field, value, "must be a finite number")
    return result


def require_positive(value: Any, field: str) -> Decimal:
    """Coerce and require value > 0."""
    amount = to_decimal(value, field)
    if amount <= 0:
        raise InvalidAmount(field, value, "must be a positive number")
    return amount


def require_fee(value: Any) -> Optional[Decimal]:
    """Coerce an optional fee and require fee >= 0."""
    if value is None:
        return None
    fee = to_decimal(value, "fee")
    if fee < 0:
        raise InvalidAmount("fee", value, "must be a non-negative number")
    return fee


def signed_quantity(entry_type: EntryType, quantity: Decimal) -> Decimal:
    """Position change: positive when acquiring, negative when disposing."""
    magnitude = abs(quantity)
    return -magnitude if entry_type is EntryType.SELL else magnitude


def value_base(entry_type: EntryType, quantity: Decimal, price: Decimal) -> Decimal:
    """Cash effect: negative when buying, positive when selling."""
    gross = abs(quantity) * price
    return -gross if entry_type is EntryType.BUY else gross


def normalize(
    entry_type: Any,
    quantity: Any,
    price: Any,
    fee: Any = None,
) -> NormalizedAmounts:
    """
    Produce the canonical signed amounts of a trade.

    Args:
        entry_type: BUY or SELL
        quantity: Traded amount (> 0)
        price: Unit price (> 0)
        fee: Optional fee (>= 0)

    Returns:
        NormalizedAmounts

    Raises:
        InvalidEntryType: Unknown entry type
        InvalidAmount: Non-positive quantity/price or negative fee
    """
    kind = EntryType.parse(entry_type)
    qty = require_positive(quantity, "quantity")
    unit_price = require_positive(price, "price")
    fee_amount = require_fee(fee)

    return NormalizedAmounts(
        entry_type=kind,
        signed_quantity=signed_quantity(kind, qty),
        price=unit_price,
        value_base=value_base(kind, qty, unit_price),
        fee=fee_amount,
    )
