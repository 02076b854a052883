"""
Tests for the Account and Asset services.
"""

import pytest
from decimal import Decimal

from ledger_engine.assets import AssetService
from ledger_engine.errors import DuplicateAsset, NotFound


class TestAccountService:

    def test_default_base_currency(self, account_service):
        assert account_service.create_account("A").base_currency == "USD"
        assert account_service.create_account("B", "eur").base_currency == "EUR"

    def test_archive_hides_from_default_listing(self, account_service, account):
        other = account_service.create_account("Other")

        account_service.archive_account(account.id)

        assert [a.id for a in account_service.list_accounts()] == [other.id]
        assert {a.id for a in account_service.list_accounts(include_archived=True)} == {account.id, other.id}

    def test_archive_is_idempotent(self, account_service, account):
        first = account_service.archive_account(account.id).archived_at
        second = account_service.archive_account(account.id).archived_at

        assert first is not None
        assert first == second

    def test_unarchive(self, account_service, account):
        account_service.archive_account(account.id)

        assert account_service.unarchive_account(account.id).archived_at is None
        assert account.id in [a.id for a in account_service.list_accounts()]

    def test_archived_account_keeps_entries(self, account_service, ledger_service, account, trade):
        ledger_service.create_entry(trade("BUY", "1", "100"))

        account_service.archive_account(account.id)

        assert account_service.get_balance(account.id) == {"BTC": Decimal("1")}

    def test_update(self, account_service, account):
        updated = account_service.update_account(account.id, {"name": "Renamed", "base_currency": "gbp"})

        assert updated.name == "Renamed"
        assert updated.base_currency == "GBP"

    def test_delete_removes_entries(self, account_service, ledger_service, account, trade):
        ledger_service.create_entry(trade("BUY", "1", "100"))

        account_service.delete_account(account.id)

        with pytest.raises(NotFound):
            account_service.get_account(account.id)
        assert ledger_service.list_entries(account_id=account.id)[1] == 0
        assert ledger_service.entries.find_buy_entries(account.id, "BTC") == []

    def test_pnl(self, account_service, ledger_service, account, trade):
        ledger_service.create_entry(trade("BUY", "2", "10000"))
        ledger_service.create_entry(trade("SELL", "1", "12000"))

        assert account_service.get_pnl(account.id) == Decimal("-8000")

    def test_missing(self, account_service):
        with pytest.raises(NotFound) as exc:
            account_service.get_pnl("missing")
        assert exc.value.info.http_status == 404


class TestAssetService:

    @pytest.fixture
    def assets(self, db_session):
        return AssetService(db_session)

    def test_symbol_upper_cased(self, assets):
        asset = assets.create_asset(" btc ", "Bitcoin")

        assert asset.symbol == "BTC"
        assert asset.precision == 8

    def test_duplicate(self, assets):
        assets.create_asset("ETH")

        with pytest.raises(DuplicateAsset) as exc:
            assets.create_asset("eth")
        assert exc.value.info.http_status == 409

    def test_update_to_taken_symbol(self, assets):
        assets.create_asset("ETH")
        sol = assets.create_asset("SOL")

        with pytest.raises(DuplicateAsset):
            assets.update_asset(sol.id, {"symbol": "eth"})

    def test_update_keeps_own_symbol(self, assets):
        sol = assets.create_asset("SOL")

        updated = assets.update_asset(sol.id, {"symbol": "sol", "precision": 9})

        assert updated.symbol == "SOL"
        assert updated.precision == 9

    def test_list_sorted(self, assets):
        for symbol in ("SOL", "ADA", "BTC"):
            assets.create_asset(symbol)

        assert [a.symbol for a in assets.list_assets()] == ["ADA", "BTC", "SOL"]

    def test_delete(self, assets):
        ada = assets.create_asset("ADA")

        assets.delete_asset(ada.id)

        with pytest.raises(NotFound) as exc:
            assets.get_asset(ada.id)
        assert exc.value.code == "NF_ASSET"
