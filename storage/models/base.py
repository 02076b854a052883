"""
Base ORM Model and Mixins.

============================================================
PURPOSE
============================================================
Provides the declarative base and common mixins used by all
ledger ORM models.

============================================================
COMPONENTS
============================================================
- Base: SQLAlchemy declarative base for all models
- TimestampMixin: Common timestamp columns
- Money / MONEY: Exact fixed-point column type for amounts
- UTCDateTime: Timezone-aware column type normalized to UTC

============================================================
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import DateTime, Numeric, String, func
from sqlalchemy.engine import Dialect
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator


MONEY_PRECISION = 28
MONEY_SCALE = 10
MONEY_QUANTUM = Decimal(1).scaleb(-MONEY_SCALE)

# Dialects without an exact decimal storage class. Numeric there
# degrades to binary floating point, so amounts are kept as text.
TEXT_DECIMAL_DIALECTS = frozenset({"sqlite"})


def stores_decimal_as_text(dialect: Dialect) -> bool:
    """True when Money columns are persisted as decimal strings."""
    return dialect.name in TEXT_DECIMAL_DIALECTS


def generate_uuid() -> str:
    """Generate a new UUID string."""
    return str(uuid.uuid4())


def utc_now() -> datetime:
    """Get current UTC timestamp."""
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    Normalize a datetime to UTC.

    Naive values are taken to be UTC already; aware values are
    converted.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class Money(TypeDecorator):
    """
    Exact fixed-point amount, NUMERIC(28, 10).

    On dialects without a native decimal the value is stored as
    its canonical string at scale 10 and parsed back into a
    Decimal, so no amount ever passes through a float.
    """

    impl = Numeric
    cache_ok = True

    def __init__(self):
        super().__init__(MONEY_PRECISION, MONEY_SCALE, asdecimal=True)

    def load_dialect_impl(self, dialect: Dialect):
        if stores_decimal_as_text(dialect):
            return dialect.type_descriptor(String(MONEY_PRECISION + 2))
        return super().load_dialect_impl(dialect)

    def process_bind_param(self, value: Any, dialect: Dialect) -> Any:
        if value is None:
            return None
        if not isinstance(value, Decimal):
            value = Decimal(str(value))
        if stores_decimal_as_text(dialect):
            return str(value.quantize(MONEY_QUANTUM))
        return value

    def process_result_value(self, value: Any, dialect: Dialect) -> Optional[Decimal]:
        if value is None:
            return None
        if isinstance(value, Decimal):
            return value
        return Decimal(str(value)).quantize(MONEY_QUANTUM)


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware datetime stored in UTC.

    Values are converted to UTC before they are written, and
    loaded values always carry tzinfo=UTC, including on SQLite
    where the offset is not persisted.
    """

    impl = DateTime
    cache_ok = True

    def __init__(self):
        super().__init__(timezone=True)

    def process_bind_param(self, value: Any, dialect: Dialect) -> Any:
        if isinstance(value, datetime):
            return as_utc(value)
        return value

    def process_result_value(self, value: Any, dialect: Dialect) -> Optional[datetime]:
        return as_utc(value)


# Fixed-point column type for every quantity, price and money value
MONEY = Money()


class Base(DeclarativeBase):
    """
    Declarative base for all ORM models.

    Maps datetimes to timezone-aware columns and Decimals to the
    ledger's fixed-point type.
    """

    type_annotation_map = {
        datetime: UTCDateTime(),
        Decimal: MONEY,
    }


class TimestampMixin:
    """
    Mixin providing standard timestamp columns.

    Adds created_at and updated_at columns to models that
    require temporal tracking. All timestamps are timezone-aware.

    Usage:
        class MyModel(Base, TimestampMixin):
            __tablename__ = "my_table"
            ...
    """

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
        default=utc_now,
        server_default=func.now(),
        comment="Record creation timestamp (UTC)"
    )

    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
        default=utc_now,
        server_default=func.now(),
        onupdate=utc_now,
        comment="Last update timestamp (UTC)"
    )
