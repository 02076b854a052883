"""
Shared fixtures: an in-memory SQLite database with a fresh
schema per test, plus the ledger services bound to it.
"""

import pytest

from database.engine import create_all_tables, create_database_engine, create_session_factory
from ledger_engine.accounts import AccountService
from ledger_engine.config import LedgerConfig
from ledger_engine.service import LedgerService
from ledger_engine.types import TradeInstruction


@pytest.fixture
def engine():
    """Create an isolated in-memory database."""
    eng = create_database_engine("sqlite://")
    create_all_tables(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def ledger_config():
    return LedgerConfig()


@pytest.fixture
def ledger_service(db_session, ledger_config):
    return LedgerService(db_session, ledger_config)


@pytest.fixture
def account_service(db_session, ledger_config):
    return AccountService(db_session, ledger_config)


@pytest.fixture
def account(account_service):
    """A fresh USD account."""
    return account_service.create_account("Main")


@pytest.fixture
def trade(account):
    """Build a TradeInstruction for the default account."""

    def _make(entry_type, quantity, price, symbol="BTC", **kwargs):
        return TradeInstruction(
            account_id=kwargs.pop("account_id", account.id),
            symbol=symbol,
            entry_type=entry_type,
            quantity=quantity,
            price=price,
            **kwargs,
        )

    return _make
