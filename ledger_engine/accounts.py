"""
Account Service.

Account CRUD, archiving, and the per-account aggregates
(open balances and realized cash P&L).
"""

import logging
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy.orm import Session

from storage.models.base import utc_now
from storage.models.ledger import Account
from storage.repositories.accounts import AccountRepository
from storage.repositories.ledger import LedgerEntryRepository

from .config import LedgerConfig
from .errors import NotFound
from .positions import PositionAggregator


logger = logging.getLogger(__name__)


class AccountService:
    """Service for trading accounts."""

    def __init__(self, session: Session, config: Optional[LedgerConfig] = None):
        self.session = session
        self.config = config or LedgerConfig()
        self.accounts = AccountRepository(session)
        self.positions = PositionAggregator(LedgerEntryRepository(session))

    def _require(self, account_id: str) -> Account:
        account = self.accounts.get_account(account_id)
        if account is None:
            raise NotFound("account", account_id)
        return account

    def create_account(self, name: str, base_currency: Optional[str] = None) -> Account:
        currency = (base_currency or self.config.default_base_currency).upper()
        account = self.accounts.create_account(name=name, base_currency=currency)
        self.accounts.commit()
        return account

    def get_account(self, account_id: str) -> Account:
        return self._require(account_id)

    def list_accounts(self, include_archived: bool = False) -> List[Account]:
        return self.accounts.list_accounts(include_archived=include_archived)

    def update_account(self, account_id: str, changes: Mapping[str, Any]) -> Account:
        """Rename an account or change its base currency."""
        self._require(account_id)
        fields: Dict[str, Any] = {}
        if changes.get("name") is not None:
            fields["name"] = changes["name"]
        if changes.get("base_currency") is not None:
            fields["base_currency"] = changes["base_currency"].upper()

        account = self.accounts.update_account(account_id, fields)
        self.accounts.commit()
        return account

    def archive_account(self, account_id: str) -> Account:
        """
        Hide an account from default listings.

        Archiving an archived account keeps its original archive time.
        """
        account = self._require(account_id)
        if account.archived_at is None:
            account = self.accounts.update_account(account_id, {"archived_at": utc_now()})
            self.accounts.commit()
            logger.info(f"Archived account {account_id}")
        return account

    def unarchive_account(self, account_id: str) -> Account:
        self._require(account_id)
        account = self.accounts.update_account(account_id, {"archived_at": None})
        self.accounts.commit()
        return account

    def delete_account(self, account_id: str) -> None:
        """Delete an account; its entries and their metadata go with it."""
        self._require(account_id)
        self.accounts.delete_account(account_id)
        self.accounts.commit()

    def get_balance(self, account_id: str) -> Dict[str, Decimal]:
        """Open quantity per symbol."""
        self._require(account_id)
        return self.positions.balances(account_id)

    def get_pnl(self, account_id: str) -> Decimal:
        """Realized cash P&L: the sum of value_base over all entries."""
        self._require(account_id)
        return self.positions.total_pnl(account_id)
