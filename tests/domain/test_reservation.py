"""Unit tests for the StockReservation state machine."""

from datetime import timedelta

import pytest

from stockledger.domain.exceptions import InvalidStateError
from stockledger.domain.model.reservation import ReservationStatus, StockReservation
from stockledger.domain.model.value_objects import StockLocation
from tests.fakes import T0


def _reservation(expires_in: timedelta | None = None) -> StockReservation:
    return StockReservation(
        id="RSV-1",
        product_id="P1",
        location=StockLocation("W1", "L1"),
        quantity=10,
        reserved_by="alice",
        reserved_at=T0,
        expires_at=T0 + expires_in if expires_in else None,
    )


class TestTransitions:

    def test_new_reservation_is_active(self):
        assert _reservation().status is ReservationStatus.ACTIVE

    def test_release(self):
        r = _reservation()
        r.release(T0, "bob")
        assert r.status is ReservationStatus.RELEASED
        assert r.closed_by == "bob"

    def test_expire(self):
        r = _reservation()
        r.expire(T0)
        assert r.status is ReservationStatus.EXPIRED

    def test_consume(self):
        r = _reservation()
        r.consume(T0, "bob")
        assert r.status is ReservationStatus.CONSUMED

    @pytest.mark.parametrize("close", ["release", "expire", "consume"])
    def test_terminal_states_cannot_be_left(self, close):
        r = _reservation()
        r.release(T0, "bob")
        with pytest.raises(InvalidStateError, match="Current state: released"):
            if close == "expire":
                r.expire(T0)
            else:
                getattr(r, close)(T0, "bob")
        assert r.status is ReservationStatus.RELEASED

    def test_terminal_flags(self):
        assert not ReservationStatus.ACTIVE.is_terminal
        assert all(
            s.is_terminal
            for s in (ReservationStatus.RELEASED, ReservationStatus.EXPIRED, ReservationStatus.CONSUMED)
        )


class TestDue:

    def test_without_expiry_never_due(self):
        assert not _reservation().is_due(T0 + timedelta(days=365))

    def test_due_strictly_after_expiry(self):
        r = _reservation(expires_in=timedelta(minutes=10))
        assert not r.is_due(T0 + timedelta(minutes=10))
        assert r.is_due(T0 + timedelta(minutes=10, seconds=1))

    def test_closed_reservation_not_due(self):
        r = _reservation(expires_in=timedelta(minutes=1))
        r.release(T0, "bob")
        assert not r.is_due(T0 + timedelta(hours=1))
