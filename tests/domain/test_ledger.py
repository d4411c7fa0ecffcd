"""Tests for StockLedger: recording transactions and keeping balances in step."""

import pytest

from stockledger.domain.exceptions import (
    InsufficientStockError,
    StockSystemError,
    ValidationError,
)
from stockledger.domain.model.events import LedgerUpdated
from stockledger.domain.model.ledger_entry import TransactionType
from stockledger.domain.model.value_objects import Money, StockLocation
from tests.fakes import T0, RecordingNotifier, build_stack, request


def _figures(stack, location_id="L1", warehouse_id="W1"):
    b = stack.balances.get_balance("P1", warehouse_id, location_id)
    return b.available_quantity, b.reserved_quantity, b.total_quantity


class TestRecordTransaction:

    def test_first_receipt_opens_balance(self):
        stack = build_stack()

        entry = stack.ledger.record_transaction(request("in", 100))

        assert (entry.previous_balance, entry.new_balance) == (0, 100)
        assert entry.transaction_type is TransactionType.IN
        assert entry.transaction_date == T0
        assert entry.id.startswith("LEDGER-")
        assert _figures(stack) == (100, 0, 100)

    def test_out_reduces_balance(self):
        stack = build_stack()
        stack.ledger.record_transaction(request("in", 100))

        entry = stack.ledger.record_transaction(request("out", 30))

        assert (entry.previous_balance, entry.new_balance) == (100, 70)
        assert _figures(stack) == (70, 0, 70)

    def test_count_replaces_balance(self):
        stack = build_stack()
        stack.ledger.record_transaction(request("in", 70))

        entry = stack.ledger.record_transaction(request("count", 50))

        assert entry.quantity == 50
        assert (entry.previous_balance, entry.new_balance) == (70, 50)
        assert _figures(stack) == (50, 0, 50)

    def test_signed_adjustment(self):
        stack = build_stack()
        stack.ledger.record_transaction(request("in", 20))

        down = stack.ledger.record_transaction(request("adjustment", -5))
        up = stack.ledger.record_transaction(request("adjustment", 2))

        assert (down.previous_balance, down.new_balance) == (20, 15)
        assert (up.previous_balance, up.new_balance) == (15, 17)
        assert down.delta == -5

    def test_entries_chain_previous_balances(self):
        stack = build_stack()
        for txn_type, qty in [("in", 10), ("in", 5), ("out", 3), ("count", 9)]:
            stack.ledger.record_transaction(request(txn_type, qty))

        entries = stack.ledger.all_entries()

        for before, after in zip(entries, entries[1:]):
            assert after.previous_balance == before.new_balance
        assert entries[-1].new_balance == 9

    def test_entry_ids_are_unique_and_ordered(self):
        stack = build_stack()
        ids = [stack.ledger.record_transaction(request("in", 1)).id for _ in range(5)]

        assert len(set(ids)) == 5
        assert ids == sorted(ids)

    def test_keys_are_independent(self):
        stack = build_stack()
        stack.ledger.record_transaction(request("in", 10, location_id="L1"))
        stack.ledger.record_transaction(request("in", 4, location_id="L2"))

        assert _figures(stack, "L1") == (10, 0, 10)
        assert _figures(stack, "L2") == (4, 0, 4)

    def test_missing_location_books_to_default_bucket(self):
        stack = build_stack()
        entry = stack.ledger.record_transaction(request("in", 5, location_id=None))

        assert entry.location_id is None
        assert stack.balances.get_balance("P1", "W1").total_quantity == 5
        assert stack.balances.get_balance("P1", "W1", "default").total_quantity == 5

    def test_reference_and_notes_are_kept(self):
        stack = build_stack()
        entry = stack.ledger.record_transaction(
            request("in", 5, reference_type="delivery", reference_id="PO-7", notes="dock 3")
        )

        assert (entry.reference_type, entry.reference_id, entry.notes) == (
            "delivery", "PO-7", "dock 3",
        )

    def test_total_cost_derived_from_unit_cost(self):
        stack = build_stack()
        entry = stack.ledger.record_transaction(request("in", 4, unit_cost=Money.of("2.50")))

        assert entry.total_cost == Money.of("10.00")

    def test_explicit_total_cost_wins(self):
        stack = build_stack()
        entry = stack.ledger.record_transaction(
            request("in", 4, unit_cost=Money.of("2.50"), total_cost=Money.of("9"))
        )

        assert entry.total_cost == Money.of("9")

    def test_persists_entry_and_balance_together(self):
        stack = build_stack()
        stack.ledger.record_transaction(request("in", 5))

        assert stack.repo.commits == 1
        assert len(stack.repo.entries) == 1
        assert stack.repo.balances[stack.repo.entries[0].key].total_quantity == 5


class TestInputErrors:

    @pytest.mark.parametrize(
        "txn_type, qty",
        [("in", 0), ("out", -1), ("adjustment", 0), ("count", -1), ("in", 2.5), ("teleport", 1)],
    )
    def test_rejected_without_effect(self, txn_type, qty):
        stack = build_stack()

        with pytest.raises(ValidationError):
            stack.ledger.record_transaction(request(txn_type, qty))

        assert stack.ledger.all_entries() == []
        assert stack.balances.get_balance("P1", "W1", "L1") is None
        assert stack.repo.commits == 0

    def test_performed_by_required(self):
        stack = build_stack()
        with pytest.raises(ValidationError, match="performed_by"):
            stack.ledger.record_transaction(request("in", 1, performed_by=" "))


class TestNonNegativePolicy:

    def test_out_beyond_available_refused(self):
        stack = build_stack()
        stack.ledger.record_transaction(request("in", 10))

        with pytest.raises(InsufficientStockError) as exc_info:
            stack.ledger.record_transaction(request("out", 11))

        assert exc_info.value.requested == 11
        assert exc_info.value.available == 10
        assert len(stack.ledger.all_entries()) == 1
        assert _figures(stack) == (10, 0, 10)

    def test_reserved_units_cannot_be_shipped(self):
        stack = build_stack()
        stack.ledger.record_transaction(request("in", 10))
        stack.reservations.reserve("P1", StockLocation("W1", "L1"), 8, "alice")

        with pytest.raises(InsufficientStockError):
            stack.ledger.record_transaction(request("out", 3))

        assert _figures(stack) == (2, 8, 10)

    def test_count_below_reserved_refused(self):
        stack = build_stack()
        stack.ledger.record_transaction(request("in", 10))
        stack.reservations.reserve("P1", StockLocation("W1", "L1"), 6, "alice")

        with pytest.raises(InsufficientStockError) as exc_info:
            stack.ledger.record_transaction(request("count", 5))

        assert str(exc_info.value) == "Count of 5 for product P1 is below the 6 units reserved"

        assert _figures(stack) == (4, 6, 10)

    def test_out_on_unknown_key_refused(self):
        stack = build_stack()
        with pytest.raises(InsufficientStockError):
            stack.ledger.record_transaction(request("out", 1))
        assert stack.balances.get_balance("P1", "W1", "L1") is None

    def test_increases_never_checked(self):
        stack = build_stack()
        stack.ledger.record_transaction(request("count", 0))
        stack.ledger.record_transaction(request("adjustment", 3))
        assert _figures(stack) == (3, 0, 3)

    def test_disabled_policy_allows_negative(self):
        stack = build_stack(enforce_non_negative=False)
        stack.ledger.record_transaction(request("in", 5))

        entry = stack.ledger.record_transaction(request("out", 8))

        assert entry.new_balance == -3
        assert _figures(stack) == (-3, 0, -3)


class TestNotification:

    def test_event_per_committed_entry(self):
        stack = build_stack()
        entry = stack.ledger.record_transaction(request("in", 5))

        events = [e for e in stack.notifier.events if isinstance(e, LedgerUpdated)]
        assert len(events) == 1
        assert events[0].entry == entry
        assert (events[0].previous_balance, events[0].new_balance) == (0, 5)
        assert events[0].name == "stock.ledger.updated"

    def test_failing_notifier_does_not_undo_write(self, caplog):
        stack = build_stack(notifier=RecordingNotifier(fail=True))

        entry = stack.ledger.record_transaction(request("in", 5))

        assert stack.ledger.all_entries() == [entry]
        assert _figures(stack) == (5, 0, 5)
        assert "Notifier failed" in caplog.text

    def test_no_event_for_rejected_transaction(self):
        stack = build_stack()
        with pytest.raises(InsufficientStockError):
            stack.ledger.record_transaction(request("out", 1))
        assert stack.notifier.events == []


class TestStorageFailure:

    def test_nothing_applied(self):
        stack = build_stack()
        stack.ledger.record_transaction(request("in", 10))
        stack.repo.fail_commits = True

        with pytest.raises(StockSystemError):
            stack.ledger.record_transaction(request("out", 4))

        assert len(stack.ledger.all_entries()) == 1
        assert _figures(stack) == (10, 0, 10)
        assert len(stack.notifier.events) == 1

    def test_recovers_after_outage(self):
        stack = build_stack()
        stack.repo.fail_commits = True
        with pytest.raises(StockSystemError):
            stack.ledger.record_transaction(request("in", 10))

        stack.repo.fail_commits = False
        entry = stack.ledger.record_transaction(request("in", 10))

        assert entry.previous_balance == 0
        assert _figures(stack) == (10, 0, 10)


class TestTransfer:

    def test_moves_stock_between_locations(self):
        stack = build_stack()
        stack.ledger.record_transaction(request("in", 10, location_id="L1"))

        out_entry, in_entry = stack.ledger.record_transfer(
            "P1", StockLocation("W1", "L1"), StockLocation("W2", "L9"), 4, "bob",
            reference_id="TR-1",
        )

        assert out_entry.transaction_type is TransactionType.TRANSFER_OUT
        assert in_entry.transaction_type is TransactionType.TRANSFER_IN
        assert out_entry.reference_type == in_entry.reference_type == "transfer"
        assert out_entry.reference_id == in_entry.reference_id == "TR-1"
        assert _figures(stack, "L1") == (6, 0, 6)
        assert _figures(stack, "L9", "W2") == (4, 0, 4)
        assert stack.repo.commits == 2

    def test_insufficient_source_moves_nothing(self):
        stack = build_stack()
        stack.ledger.record_transaction(request("in", 3))

        with pytest.raises(InsufficientStockError):
            stack.ledger.record_transfer(
                "P1", StockLocation("W1", "L1"), StockLocation("W1", "L2"), 5, "bob"
            )

        assert _figures(stack) == (3, 0, 3)
        assert stack.balances.get_balance("P1", "W1", "L2") is None
        assert len(stack.ledger.all_entries()) == 1

    def test_same_key_rejected(self):
        stack = build_stack()
        with pytest.raises(ValidationError, match="must differ"):
            stack.ledger.record_transfer(
                "P1", StockLocation("W1"), StockLocation("W1", "default"), 1, "bob"
            )


class TestQueries:

    def test_get_entries_newest_first(self):
        stack = build_stack()
        first = stack.ledger.record_transaction(request("in", 1))
        stack.ledger.record_transaction(request("in", 1, product_id="P2"))
        last = stack.ledger.record_transaction(request("in", 2))

        entries = stack.ledger.get_entries("P1")

        assert [e.id for e in entries] == [last.id, first.id]

    def test_get_entries_filters_warehouse_and_limits(self):
        stack = build_stack()
        for _ in range(3):
            stack.ledger.record_transaction(request("in", 1, warehouse_id="W1"))
        stack.ledger.record_transaction(request("in", 1, warehouse_id="W2"))

        assert len(stack.ledger.get_entries("P1", "W1")) == 3
        assert len(stack.ledger.get_entries("P1", limit=2)) == 2
        assert stack.ledger.get_entries("P9") == []
