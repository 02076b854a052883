"""
Account and Asset Repositories.

============================================================
PURPOSE
============================================================
Data access for accounts and the asset catalogue. Plain CRUD;
no accounting happens here.

============================================================
"""

from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from storage.models.ledger import Account, Asset
from storage.repositories.base import BaseRepository


class AccountRepository(BaseRepository[Account]):
    """Repository for accounts."""

    def __init__(self, session: Session) -> None:
        super().__init__(session, Account, "AccountRepository")

    def create_account(self, name: str, base_currency: str) -> Account:
        """Create an account."""
        account = self._add(Account(name=name, base_currency=base_currency))
        self._logger.info(f"Created account {account.id} ({name}, {base_currency})")
        return account

    def get_account(self, account_id: str) -> Optional[Account]:
        """Get account by ID."""
        return self._get_by_id(account_id)

    def list_accounts(self, include_archived: bool = False) -> List[Account]:
        """Accounts, newest first; archived ones only on request."""
        stmt = select(Account)
        if not include_archived:
            stmt = stmt.where(Account.archived_at.is_(None))
        stmt = stmt.order_by(Account.created_at.desc(), Account.id)
        return self._execute_query(stmt)

    def update_account(self, account_id: str, fields: Dict[str, Any]) -> Account:
        """
        Raises:
            RecordNotFoundError: If the account does not exist
        """
        account = self._get_by_id_or_raise(account_id, "account_id")
        for name, value in fields.items():
            setattr(account, name, value)
        self._flush("update_account")
        return account

    def delete_account(self, account_id: str) -> None:
        """
        Delete an account together with its entries.

        Raises:
            RecordNotFoundError: If the account does not exist
        """
        self._delete(self._get_by_id_or_raise(account_id, "account_id"))
        self._logger.info(f"Deleted account {account_id}")


class AssetRepository(BaseRepository[Asset]):
    """Repository for the asset catalogue."""

    def __init__(self, session: Session) -> None:
        super().__init__(session, Asset, "AssetRepository")

    def create_asset(self, symbol: str, name: Optional[str], precision: int) -> Asset:
        return self._add(Asset(symbol=symbol, name=name, precision=precision))

    def get_asset(self, asset_id: str) -> Optional[Asset]:
        return self._get_by_id(asset_id)

    def get_asset_by_symbol(self, symbol: str) -> Optional[Asset]:
        return self._execute_scalar(select(Asset).where(Asset.symbol == symbol))

    def list_assets(self) -> List[Asset]:
        return self._execute_query(select(Asset).order_by(Asset.symbol))

    def update_asset(self, asset_id: str, fields: Dict[str, Any]) -> Asset:
        asset = self._get_by_id_or_raise(asset_id, "asset_id")
        for name, value in fields.items():
            setattr(asset, name, value)
        self._flush("update_asset")
        return asset

    def delete_asset(self, asset_id: str) -> None:
        self._delete(self._get_by_id_or_raise(asset_id, "asset_id"))
