"""Integration tests for the reservation use cases."""

import pytest

from stockledger.application.consume_reservation import ConsumeReservationHandler
from stockledger.application.expire_reservations import ExpireReservationsHandler
from stockledger.application.receive_stock import ReceiveStockHandler
from stockledger.application.release_reservation import ReleaseReservationHandler
from stockledger.application.reserve_stock import ReserveStockHandler
from stockledger.application.show_reservations import ShowReservationsHandler
from stockledger.domain.exceptions import EntityNotFoundError, ValidationError
from tests.fakes import build_stack


def _setup(on_hand=100):
    stack = build_stack()
    ReceiveStockHandler(stack.ledger).handle("P1", "W1", on_hand, "bob", location_id="L1")
    reserve = ReserveStockHandler(stack.reservations, stack.clock)
    return stack, reserve


class TestReserveStock:

    def test_reserve(self):
        stack, reserve = _setup()

        outcome = reserve.handle("P1", "W1", 40, "alice", location_id="L1")

        assert outcome.succeeded
        assert outcome.reservation.status == "active"
        assert outcome.reservation.location == "W1/L1"
        assert outcome.reservation.expires_at == ""
        assert stack.balances.get_balance("P1", "W1", "L1").reserved_quantity == 40

    def test_shortfall_returned_as_data(self):
        _, reserve = _setup(on_hand=100)
        reserve.handle("P1", "W1", 40, "alice", location_id="L1")

        outcome = reserve.handle("P1", "W1", 70, "bob", location_id="L1")

        assert not outcome.succeeded
        assert outcome.reservation is None
        assert outcome.validation.errors[0].details == {"requested": 70, "available": 60}

    def test_ttl_sets_expiry(self):
        _, reserve = _setup()

        outcome = reserve.handle("P1", "W1", 1, "alice", location_id="L1", ttl_minutes=30)

        assert outcome.reservation.expires_at == "2026-10-19 09:30 UTC"

    def test_non_positive_ttl_raises(self):
        _, reserve = _setup()
        with pytest.raises(ValidationError, match="future"):
            reserve.handle("P1", "W1", 1, "alice", location_id="L1", ttl_minutes=0)


class TestReleaseAndConsume:

    def test_release(self):
        stack, reserve = _setup()
        held = reserve.handle("P1", "W1", 40, "alice", location_id="L1").reservation

        outcome = ReleaseReservationHandler(stack.reservations).handle(held.id, "alice")

        assert outcome.succeeded
        assert outcome.reservation.status == "released"
        assert stack.balances.get_balance("P1", "W1", "L1").available_quantity == 100

    def test_double_release_returned_as_data(self):
        stack, reserve = _setup()
        held = reserve.handle("P1", "W1", 40, "alice", location_id="L1").reservation
        release = ReleaseReservationHandler(stack.reservations)
        release.handle(held.id, "alice")

        outcome = release.handle(held.id, "alice")

        assert not outcome.succeeded
        assert outcome.validation.errors[0].code == "INVALID_STATE_TRANSITION"

    def test_release_unknown_raises(self):
        stack, _ = _setup()
        with pytest.raises(EntityNotFoundError):
            ReleaseReservationHandler(stack.reservations).handle("RSV-x", "alice")

    def test_consume(self):
        stack, reserve = _setup()
        held = reserve.handle("P1", "W1", 40, "alice", location_id="L1").reservation

        outcome = ConsumeReservationHandler(stack.reservations).handle(
            held.id, "picker", reference_id="SO-3"
        )

        assert outcome.succeeded
        entry = outcome.entries[0]
        assert (entry.transaction_type, entry.new_balance) == ("out", 60)
        assert entry.reference == "reservation:SO-3"

    def test_consume_released_returned_as_data(self):
        stack, reserve = _setup()
        held = reserve.handle("P1", "W1", 40, "alice", location_id="L1").reservation
        ReleaseReservationHandler(stack.reservations).handle(held.id, "alice")

        outcome = ConsumeReservationHandler(stack.reservations).handle(held.id, "picker")

        assert not outcome.succeeded
        assert outcome.entries == ()


class TestExpireAndList:

    def test_expire_and_list(self):
        stack, reserve = _setup()
        reserve.handle("P1", "W1", 10, "alice", location_id="L1", ttl_minutes=5)
        kept = reserve.handle("P1", "W1", 20, "alice", location_id="L1").reservation
        stack.clock.advance(minutes=6)

        assert ExpireReservationsHandler(stack.reservations).handle() == 1

        listed = ShowReservationsHandler(stack.reservations).handle("P1", "W1")
        assert [r.id for r in listed] == [kept.id]
        assert stack.balances.get_balance("P1", "W1", "L1").reserved_quantity == 20
