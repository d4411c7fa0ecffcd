"""Unit tests for the StockBalance model."""

import pytest

from stockledger.domain.exceptions import ConsistencyError
from stockledger.domain.model.balance import StockBalance
from stockledger.domain.model.value_objects import BalanceKey
from tests.fakes import T0


def _balance(total: int = 100, reserved: int = 0) -> StockBalance:
    balance = StockBalance.opened(BalanceKey.of("P1", "W1", "L1"), T0, "bob")
    balance.set_total(total, T0, "bob")
    balance.hold(reserved, T0, "bob")
    return balance


class TestStockBalance:

    def test_opened_is_zero(self):
        balance = StockBalance.opened(BalanceKey.of("P1", "W1"), T0, "bob")
        assert (balance.available_quantity, balance.reserved_quantity, balance.total_quantity) == (0, 0, 0)
        assert balance.location_id == "default"

    def test_set_total_keeps_reservations(self):
        balance = _balance(total=100, reserved=40)
        balance.set_total(70, T0, "carol")
        assert balance.total_quantity == 70
        assert balance.reserved_quantity == 40
        assert balance.available_quantity == 30
        assert balance.last_updated_by == "carol"

    def test_hold_and_unhold(self):
        balance = _balance(total=100)
        balance.hold(25, T0, "alice")
        assert (balance.available_quantity, balance.reserved_quantity) == (75, 25)
        balance.unhold(25, T0, "alice")
        assert (balance.available_quantity, balance.reserved_quantity) == (100, 0)

    def test_copy_is_independent(self):
        balance = _balance()
        clone = balance.copy()
        clone.hold(10, T0, "x")
        assert balance.reserved_quantity == 0


class TestInvariant:

    def test_consistent_balance_passes(self):
        _balance(total=100, reserved=40).check_invariant()

    def test_total_mismatch_detected(self):
        balance = _balance(total=100)
        balance.available_quantity = 90
        with pytest.raises(ConsistencyError, match="total 100 != available 90"):
            balance.check_invariant()

    def test_negative_reserved_detected(self):
        balance = _balance(total=10)
        balance.unhold(5, T0, "x")
        with pytest.raises(ConsistencyError, match="negative reserved"):
            balance.check_invariant()
