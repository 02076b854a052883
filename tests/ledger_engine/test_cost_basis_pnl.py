"""
Tests for the Cost Basis Calculator and P&L Assigner.

Tests cover:
- Weighted average cost
- Order independence
- Missing or zero cost basis
- Realized P&L on SELL, none on BUY
"""

import random
import pytest
from decimal import Decimal
from unittest.mock import MagicMock

from ledger_engine.cost_basis import CostBasisCalculator, average_cost_of
from ledger_engine.errors import InvalidEntryType
from ledger_engine.pnl import PnLAssigner, realized_pnl
from ledger_engine.types import BuyLeg, EntryType


def legs(*pairs):
    return [BuyLeg(quantity=Decimal(q), price=Decimal(p)) for q, p in pairs]


# =============================================================
# TEST: Average cost
# =============================================================

class TestAverageCost:

    def test_single_buy(self):
        assert average_cost_of(legs(("2", "10000"))) == Decimal("10000")

    def test_two_buys_average(self):
        assert average_cost_of(legs(("1", "9000"), ("1", "11000"))) == Decimal("10000")

    def test_weighted_by_quantity(self):
        # (3*10 + 1*30) / 4
        assert average_cost_of(legs(("3", "10"), ("1", "30"))) == Decimal("15")

    def test_no_buys_is_none(self):
        assert average_cost_of([]) is None

    def test_zero_total_quantity_is_none(self):
        assert average_cost_of(legs(("0", "100"))) is None

    def test_negative_quantities_use_magnitude(self):
        assert average_cost_of(legs(("-2", "50"), ("2", "150"))) == Decimal("100")

    def test_order_independent(self):
        history = legs(("1.5", "101"), ("0.25", "99.5"), ("4", "102.75"), ("2", "100"))
        expected = average_cost_of(history)

        rng = random.Random(7)
        for _ in range(10):
            shuffled = history[:]
            rng.shuffle(shuffled)
            assert average_cost_of(shuffled) == expected

    def test_calculator_reads_store(self):
        store = MagicMock()
        store.find_buy_entries.return_value = legs(("2", "10000"))

        calc = CostBasisCalculator(store)

        assert calc.average_cost("acc-1", "BTC") == Decimal("10000")
        store.find_buy_entries.assert_called_once_with("acc-1", "BTC", None)

    def test_calculator_passes_exclusion(self):
        store = MagicMock()
        store.find_buy_entries.return_value = []

        assert CostBasisCalculator(store).average_cost("acc-1", "BTC", "entry-9") is None
        store.find_buy_entries.assert_called_once_with("acc-1", "BTC", "entry-9")


# =============================================================
# TEST: P&L assignment
# =============================================================

class TestPnLAssigner:

    @pytest.fixture
    def calculator(self):
        return MagicMock(spec=CostBasisCalculator)

    def test_realized_pnl_formula(self):
        assert realized_pnl(Decimal("12000"), Decimal("10000"), Decimal("-1")) == Decimal("2000")

    def test_sell_gets_pnl(self, calculator):
        calculator.average_cost.return_value = Decimal("10000")
        assigner = PnLAssigner(calculator)

        pnl = assigner.assign("acc-1", "BTC", EntryType.SELL, Decimal("-1"), Decimal("12000"))

        assert pnl == Decimal("2000")

    def test_sell_at_loss(self, calculator):
        calculator.average_cost.return_value = Decimal("10000")

        pnl = PnLAssigner(calculator).assign("acc-1", "BTC", "SELL", Decimal("2"), Decimal("9500"))

        assert pnl == Decimal("-1000")

    def test_sell_without_basis_is_none(self, calculator):
        calculator.average_cost.return_value = None

        assert PnLAssigner(calculator).assign("acc-1", "BTC", "SELL", Decimal("1"), Decimal("5")) is None

    def test_buy_never_gets_pnl(self, calculator):
        calculator.average_cost.return_value = Decimal("1")

        assert PnLAssigner(calculator).assign("acc-1", "BTC", "BUY", Decimal("1"), Decimal("5")) is None
        calculator.average_cost.assert_not_called()

    def test_deterministic(self, calculator):
        calculator.average_cost.return_value = Decimal("10000")
        assigner = PnLAssigner(calculator)

        first = assigner.assign("acc-1", "BTC", "SELL", Decimal("1"), Decimal("10500"))
        second = assigner.assign("acc-1", "BTC", "SELL", Decimal("1"), Decimal("10500"))

        assert first == second == Decimal("500")

    def test_exclusion_forwarded(self, calculator):
        calculator.average_cost.return_value = None

        PnLAssigner(calculator).assign(
            "acc-1", "BTC", "SELL", Decimal("1"), Decimal("5"), exclude_entry_id="e-1"
        )

        calculator.average_cost.assert_called_once_with("acc-1", "BTC", "e-1")

    def test_invalid_entry_type(self, calculator):
        with pytest.raises(InvalidEntryType):
            PnLAssigner(calculator).assign("acc-1", "BTC", "SHORT", Decimal("1"), Decimal("5"))
