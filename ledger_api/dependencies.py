"""
FastAPI dependencies for the Ledger API.
"""

from functools import lru_cache

from fastapi import Depends
from sqlalchemy.orm import Session

from database.engine import get_session
from ledger_engine.accounts import AccountService
from ledger_engine.assets import AssetService
from ledger_engine.config import LedgerConfig
from ledger_engine.service import LedgerService


# =============================================================
# HELPER: Database dependency
# =============================================================

def get_db():
    db = get_session()
    try:
        yield db
    finally:
        db.close()


@lru_cache
def get_ledger_config() -> LedgerConfig:
    return LedgerConfig.from_env()


# =============================================================
# HELPER: Get service instance
# =============================================================

def get_ledger_service(
    db: Session = Depends(get_db),
    config: LedgerConfig = Depends(get_ledger_config),
) -> LedgerService:
    return LedgerService(db, config)


def get_account_service(
    db: Session = Depends(get_db),
    config: LedgerConfig = Depends(get_ledger_config),
) -> AccountService:
    return AccountService(db, config)


def get_asset_service(db: Session = Depends(get_db)) -> AssetService:
    return AssetService(db)
