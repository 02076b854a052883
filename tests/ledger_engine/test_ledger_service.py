"""
Tests for the Ledger Service against a real (in-memory) store.

Tests cover:
- Entry creation with derived fields and realized P&L
- Bulk import
- Editing and deleting entries
- Listing and filtering
- Metadata
- Account aggregates
"""

import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from ledger_engine.errors import InvalidAmount, InvalidEntryType, NotFound
from storage.models.ledger import LedgerEntry


# =============================================================
# TEST: Creation
# =============================================================

class TestCreateEntry:

    def test_buy_then_sell_realizes_pnl(self, ledger_service, trade):
        """BUY 2 @ 10000, SELL 1 @ 12000 -> pnl 2000."""
        buy = ledger_service.create_entry(trade("BUY", "2", "10000"))
        sell = ledger_service.create_entry(trade("SELL", "1", "12000"))

        assert buy.quantity == Decimal("2")
        assert buy.value_base == Decimal("-20000")
        assert buy.pnl is None

        assert sell.quantity == Decimal("-1")
        assert sell.value_base == Decimal("12000")
        assert sell.pnl == Decimal("2000")

    def test_sell_without_buys_has_no_pnl(self, ledger_service, trade):
        sell = ledger_service.create_entry(trade("SELL", "1", "100"))

        assert sell.pnl is None
        assert sell.quantity == Decimal("-1")
        assert sell.value_base == Decimal("100")

    def test_average_over_two_buys(self, ledger_service, account, trade):
        """BUY 1 @ 9000, BUY 1 @ 11000, SELL 1 @ 10500 -> pnl 500."""
        ledger_service.create_entry(trade("BUY", "1", "9000"))
        ledger_service.create_entry(trade("BUY", "1", "11000"))

        assert ledger_service.cost_basis.average_cost(account.id, "BTC") == Decimal("10000")

        sell = ledger_service.create_entry(trade("SELL", "1", "10500"))
        assert sell.pnl == Decimal("500")

    def test_cost_basis_is_per_symbol(self, ledger_service, trade):
        ledger_service.create_entry(trade("BUY", "1", "100", symbol="ETH"))

        sell = ledger_service.create_entry(trade("SELL", "1", "200", symbol="BTC"))

        assert sell.pnl is None

    def test_symbol_is_case_sensitive(self, ledger_service, trade):
        ledger_service.create_entry(trade("BUY", "1", "100", symbol="btc"))

        assert ledger_service.create_entry(trade("SELL", "1", "150", symbol="BTC")).pnl is None

    def test_cost_basis_is_per_account(self, ledger_service, account_service, trade):
        other = account_service.create_account("Other")
        ledger_service.create_entry(trade("BUY", "1", "100", account_id=other.id))

        assert ledger_service.create_entry(trade("SELL", "1", "150")).pnl is None

    def test_fee_and_notes_are_stored(self, ledger_service, trade):
        entry = ledger_service.create_entry(trade("BUY", "1", "100", fee="1.5", notes="dca"))

        assert entry.fee == Decimal("1.5")
        assert entry.notes == "dca"
        assert entry.value_base == Decimal("-100")

    def test_timestamp_defaults_to_now(self, ledger_service, trade):
        entry = ledger_service.create_entry(trade("BUY", "1", "100"))
        assert entry.timestamp is not None

    def test_timestamp_stored_in_utc(self, ledger_service, db_session, trade):
        plus_five = timezone(timedelta(hours=5))
        entry = ledger_service.create_entry(
            trade("BUY", "1", "100", timestamp=datetime(2024, 1, 1, 10, 0, tzinfo=plus_five))
        )
        db_session.expire_all()

        stored = ledger_service.get_entry(entry.id)
        assert stored.timestamp == datetime(2024, 1, 1, 5, 0, tzinfo=timezone.utc)
        assert stored.timestamp.utcoffset() == timedelta(0)

    def test_pnl_exact_for_wide_prices(self, ledger_service, db_session, trade):
        """A one-unit-in-the-ninth-place gain keeps its sign."""
        ledger_service.create_entry(trade("BUY", "1", "123456789.123456789"))
        sell = ledger_service.create_entry(trade("SELL", "1", "123456789.123456790"))
        db_session.expire_all()

        assert ledger_service.get_entry(sell.id).pnl == Decimal("0.000000001")

    def test_invalid_amount_writes_nothing(self, ledger_service, db_session, trade):
        with pytest.raises(InvalidAmount):
            ledger_service.create_entry(trade("BUY", "-1", "100"))

        assert db_session.query(LedgerEntry).count() == 0

    def test_invalid_entry_type(self, ledger_service, trade):
        with pytest.raises(InvalidEntryType):
            ledger_service.create_entry(trade("HOLD", "1", "100"))

    def test_unknown_account(self, ledger_service, trade):
        with pytest.raises(NotFound) as exc:
            ledger_service.create_entry(trade("BUY", "1", "100", account_id="missing"))
        assert exc.value.code == "NF_ACCOUNT"


# =============================================================
# TEST: Bulk import
# =============================================================

class TestCreateEntries:

    def test_import_leaves_pnl_empty(self, ledger_service, trade):
        count = ledger_service.create_entries([
            trade("BUY", "2", "10000"),
            trade("SELL", "1", "12000"),
        ])

        assert count == 2
        entries, total = ledger_service.list_entries()
        assert total == 2
        assert all(e.pnl is None for e in entries)

    def test_recalculation_fills_imported_pnl(self, ledger_service, trade):
        ledger_service.create_entries([
            trade("BUY", "2", "10000"),
            trade("SELL", "1", "12000"),
        ])

        result = ledger_service.recalculate_all_pnl()

        assert result.to_dict() == {"updated": 1, "failed": 0, "errors": []}
        sells, _ = ledger_service.list_entries(entry_type="SELL")
        assert sells[0].pnl == Decimal("2000")

    def test_one_bad_trade_rejects_batch(self, ledger_service, trade):
        with pytest.raises(InvalidAmount):
            ledger_service.create_entries([
                trade("BUY", "1", "100"),
                trade("BUY", "1", "0"),
            ])

        assert ledger_service.list_entries()[1] == 0

    def test_unknown_account_rejects_batch(self, ledger_service, trade):
        with pytest.raises(NotFound):
            ledger_service.create_entries([
                trade("BUY", "1", "100"),
                trade("BUY", "1", "100", account_id="missing"),
            ])

        assert ledger_service.list_entries()[1] == 0


# =============================================================
# TEST: Update
# =============================================================

class TestUpdateEntry:

    def test_quantity_change_recomputes_derived_fields(self, ledger_service, trade):
        ledger_service.create_entry(trade("BUY", "2", "10000"))
        sell = ledger_service.create_entry(trade("SELL", "1", "12000"))

        updated = ledger_service.update_entry(sell.id, {"quantity": Decimal("2")})

        assert updated.quantity == Decimal("-2")
        assert updated.value_base == Decimal("24000")
        assert updated.pnl == Decimal("4000")

    def test_timestamp_change_converted_to_utc(self, ledger_service, db_session, trade):
        entry = ledger_service.create_entry(trade("BUY", "1", "100"))
        minus_three = timezone(timedelta(hours=-3))

        ledger_service.update_entry(entry.id, {"timestamp": datetime(2024, 6, 1, 22, 30, tzinfo=minus_three)})
        db_session.expire_all()

        stored = ledger_service.get_entry(entry.id)
        assert stored.timestamp == datetime(2024, 6, 2, 1, 30, tzinfo=timezone.utc)
        assert stored.timestamp.tzinfo is not None

    def test_sell_to_buy_clears_pnl(self, ledger_service, trade):
        ledger_service.create_entry(trade("BUY", "2", "10000"))
        sell = ledger_service.create_entry(trade("SELL", "1", "12000"))

        updated = ledger_service.update_entry(sell.id, {"entry_type": "BUY"})

        assert updated.entry_type == "BUY"
        assert updated.quantity == Decimal("1")
        assert updated.value_base == Decimal("-12000")
        assert updated.pnl is None

    def test_buy_to_sell_excludes_itself_from_basis(self, ledger_service, trade):
        ledger_service.create_entry(trade("BUY", "1", "100"))
        edited = ledger_service.create_entry(trade("BUY", "1", "300"))

        updated = ledger_service.update_entry(edited.id, {"entry_type": "SELL"})

        # basis is the remaining BUY only
        assert updated.quantity == Decimal("-1")
        assert updated.value_base == Decimal("300")
        assert updated.pnl == Decimal("200")

    def test_notes_only_still_recomputes_sell_pnl(self, ledger_service, trade):
        sell = ledger_service.create_entry(trade("SELL", "1", "150"))
        ledger_service.create_entry(trade("BUY", "1", "100"))

        updated = ledger_service.update_entry(sell.id, {"notes": "late basis"})

        assert updated.notes == "late basis"
        assert updated.pnl == Decimal("50")

    def test_fee_change_keeps_value_base(self, ledger_service, trade):
        entry = ledger_service.create_entry(trade("BUY", "1", "100"))

        updated = ledger_service.update_entry(entry.id, {"fee": Decimal("3")})

        assert updated.fee == Decimal("3")
        assert updated.value_base == Decimal("-100")

    def test_invalid_price_rejected(self, ledger_service, trade):
        entry = ledger_service.create_entry(trade("BUY", "1", "100"))

        with pytest.raises(InvalidAmount):
            ledger_service.update_entry(entry.id, {"price": Decimal("0")})

        assert ledger_service.get_entry(entry.id).price == Decimal("100")

    def test_missing_entry(self, ledger_service):
        with pytest.raises(NotFound) as exc:
            ledger_service.update_entry("missing", {"notes": "x"})
        assert exc.value.code == "NF_ENTRY"

    def test_editing_buy_leaves_dependent_sell_stale(self, ledger_service, trade):
        buy = ledger_service.create_entry(trade("BUY", "1", "100"))
        sell = ledger_service.create_entry(trade("SELL", "1", "150"))

        ledger_service.update_entry(buy.id, {"price": Decimal("120")})

        assert ledger_service.get_entry(sell.id).pnl == Decimal("50")
        ledger_service.recalculate_all_pnl()
        assert ledger_service.get_entry(sell.id).pnl == Decimal("30")


# =============================================================
# TEST: Delete
# =============================================================

class TestDeleteEntry:

    def test_delete_removes_entry_and_metadata(self, ledger_service, trade):
        entry = ledger_service.create_entry(trade("BUY", "1", "100"))
        ledger_service.add_metadata(entry.id, "source", "manual")

        ledger_service.delete_entry(entry.id)

        with pytest.raises(NotFound):
            ledger_service.get_entry(entry.id)
        assert ledger_service.metadata.list_metadata(entry.id) == []

    def test_deleting_buy_does_not_touch_sell_pnl(self, ledger_service, trade):
        buy = ledger_service.create_entry(trade("BUY", "1", "100"))
        sell = ledger_service.create_entry(trade("SELL", "1", "150"))

        ledger_service.delete_entry(buy.id)

        assert ledger_service.get_entry(sell.id).pnl == Decimal("50")
        ledger_service.recalculate_all_pnl()
        assert ledger_service.get_entry(sell.id).pnl is None

    def test_delete_missing(self, ledger_service):
        with pytest.raises(NotFound):
            ledger_service.delete_entry("missing")


# =============================================================
# TEST: Listing
# =============================================================

class TestListEntries:

    @pytest.fixture
    def history(self, ledger_service, trade):
        start = datetime(2024, 1, 1, tzinfo=timezone.utc)
        return [
            ledger_service.create_entry(trade("BUY", "1", "100", symbol="BTC", timestamp=start)),
            ledger_service.create_entry(
                trade("BUY", "1", "10", symbol="ETH", timestamp=start + timedelta(days=1))
            ),
            ledger_service.create_entry(
                trade("SELL", "1", "120", symbol="BTC", timestamp=start + timedelta(days=2))
            ),
        ]

    def test_newest_first_with_total(self, ledger_service, history):
        entries, total = ledger_service.list_entries()

        assert total == 3
        assert [e.id for e in entries] == [history[2].id, history[1].id, history[0].id]

    def test_symbol_substring_case_insensitive(self, ledger_service, history):
        entries, total = ledger_service.list_entries(symbol="bt")

        assert total == 2
        assert {e.symbol for e in entries} == {"BTC"}

    def test_entry_type_filter(self, ledger_service, history):
        entries, total = ledger_service.list_entries(entry_type="SELL")

        assert total == 1
        assert entries[0].id == history[2].id

    def test_invalid_entry_type_filter(self, ledger_service, history):
        with pytest.raises(InvalidEntryType):
            ledger_service.list_entries(entry_type="HOLD")

    def test_date_range(self, ledger_service, history):
        entries, total = ledger_service.list_entries(
            start_date=datetime(2024, 1, 2, tzinfo=timezone.utc),
            end_date=datetime(2024, 1, 2, 23, 59, tzinfo=timezone.utc),
        )

        assert total == 1
        assert entries[0].symbol == "ETH"

    def test_date_range_with_offset(self, ledger_service, history):
        minus_five = timezone(timedelta(hours=-5))

        # 2024-01-01 19:00-05:00 is 2024-01-02 00:00 UTC
        entries, total = ledger_service.list_entries(
            start_date=datetime(2024, 1, 1, 19, 0, tzinfo=minus_five),
            end_date=datetime(2024, 1, 2, 18, 59, tzinfo=minus_five),
        )

        assert total == 1
        assert entries[0].symbol == "ETH"

    def test_pagination(self, ledger_service, history):
        entries, total = ledger_service.list_entries(limit=1, offset=1)

        assert total == 3
        assert [e.id for e in entries] == [history[1].id]

    def test_limit_is_capped(self, ledger_service, ledger_config, history):
        ledger_config.max_page_limit = 2

        entries, _ = ledger_service.list_entries(limit=50)

        assert len(entries) == 2


# =============================================================
# TEST: Metadata
# =============================================================

class TestMetadata:

    def test_add_and_list(self, ledger_service, trade):
        entry = ledger_service.create_entry(trade("BUY", "1", "100"))

        ledger_service.add_metadata(entry.id, "exchange", "kraken")
        ledger_service.add_metadata(entry.id, "order", "42")

        items = ledger_service.get_metadata(entry.id)
        assert [(m.key, m.value) for m in items] == [("exchange", "kraken"), ("order", "42")]

    def test_add_to_missing_entry(self, ledger_service):
        with pytest.raises(NotFound):
            ledger_service.add_metadata("missing", "k", "v")

    def test_delete(self, ledger_service, trade):
        entry = ledger_service.create_entry(trade("BUY", "1", "100"))
        item = ledger_service.add_metadata(entry.id, "k", "v")

        ledger_service.delete_metadata(item.id)

        assert ledger_service.get_metadata(entry.id) == []

    def test_delete_missing(self, ledger_service):
        with pytest.raises(NotFound) as exc:
            ledger_service.delete_metadata("missing")
        assert exc.value.code == "NF_METADATA"


# =============================================================
# TEST: Aggregates
# =============================================================

class TestAggregates:

    def test_balance_nets_buys_and_sells(self, ledger_service, account, trade):
        """BUY 2 BTC, SELL 1 BTC, BUY 5 ETH -> {BTC: 1, ETH: 5}."""
        ledger_service.create_entry(trade("BUY", "2", "10000", symbol="BTC"))
        ledger_service.create_entry(trade("SELL", "1", "12000", symbol="BTC"))
        ledger_service.create_entry(trade("BUY", "5", "2000", symbol="ETH"))

        assert ledger_service.balances(account.id) == {
            "BTC": Decimal("1"),
            "ETH": Decimal("5"),
        }

    def test_total_pnl_is_sum_of_value_base(self, ledger_service, account, trade):
        ledger_service.create_entry(trade("BUY", "2", "10000"))
        ledger_service.create_entry(trade("SELL", "1", "12000"))

        # -20000 + 12000, not the 2000 of realized pnl
        assert ledger_service.total_pnl(account.id) == Decimal("-8000")

    def test_empty_account(self, ledger_service, account):
        assert ledger_service.balances(account.id) == {}
        assert ledger_service.total_pnl(account.id) == Decimal("0")

    def test_unknown_account(self, ledger_service):
        with pytest.raises(NotFound):
            ledger_service.balances("missing")

    def test_total_pnl_exact_for_large_amounts(self, ledger_service, account, trade):
        ledger_service.create_entry(trade("BUY", "1", "10000000000000000.01"))
        ledger_service.create_entry(trade("SELL", "1", "10000000000000000.02"))

        assert ledger_service.total_pnl(account.id) == Decimal("0.01")
