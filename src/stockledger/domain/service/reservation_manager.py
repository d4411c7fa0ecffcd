"""Domain service: stock reservations.

Holds move quantity from ``available`` to ``reserved`` on a balance.
The availability check and the hold are made under the key lock as a
single step, so two callers can never both claim the same units.
"""

from __future__ import annotations

import logging
from datetime import datetime

from stockledger.domain.exceptions import (
    ConsistencyError,
    EntityNotFoundError,
    InsufficientStockError,
    ValidationError,
)
from stockledger.domain.model.balance import StockBalance
from stockledger.domain.model.events import ReservationChanged
from stockledger.domain.model.ledger_entry import (
    LedgerEntry,
    TransactionRequest,
    TransactionType,
)
from stockledger.domain.model.reservation import StockReservation
from stockledger.domain.model.value_objects import Quantity, StockLocation
from stockledger.domain.service.ledger import StockLedger
from stockledger.domain.service.notifier import Notifier, NullNotifier
from stockledger.domain.service.stock_state import StockState

logger = logging.getLogger(__name__)


class ReservationManager:

    def __init__(
        self,
        state: StockState,
        ledger: StockLedger,
        notifier: Notifier | None = None,
        expire_on_read: bool = True,
    ) -> None:
        self._state = state
        self._ledger = ledger
        self._notifier = notifier or NullNotifier()
        self._expire_on_read = expire_on_read

    # --- Commands -------------------------------------------------------------

    def reserve(
        self,
        product_id: str,
        location: StockLocation,
        quantity: int,
        reserved_by: str,
        expires_at: datetime | None = None,
    ) -> StockReservation:
        """Hold *quantity* units at the balance key of *location*.

        Raises InsufficientStockError when fewer units are available (a
        key with no balance has none); nothing changes in that case.
        """
        qty = Quantity(quantity).value
        if not isinstance(reserved_by, str) or not reserved_by.strip():
            raise ValidationError("reserved_by is required", field="reserved_by")
        key = location.key_for(product_id)
        now = self._state.clock.now()
        if expires_at is not None:
            if expires_at.tzinfo is None:
                raise ValidationError("expires_at must be timezone-aware", field="expires_at")
            if expires_at <= now:
                raise ValidationError("expires_at must be in the future", field="expires_at")

        with self._state.locked(key):
            balance = self._state.balance(key)
            available = balance.available_quantity if balance is not None else 0
            if balance is None or available < qty:
                logger.warning(
                    "Reservation of %d at %s refused: %d available", qty, key, available
                )
                raise InsufficientStockError(product_id, qty, max(available, 0))

            reservation = StockReservation(
                id=self._state.ids.next_id("RSV"),
                product_id=product_id,
                location=location,
                quantity=qty,
                reserved_by=reserved_by,
                reserved_at=now,
                expires_at=expires_at,
            )
            balance.hold(qty, now, reserved_by)
            self._state.commit(balances=[balance], reservations=[reservation])

        logger.info("Reserved %d at %s for %s (%s)", qty, key, reserved_by, reservation.id)
        self._publish(reservation)
        return reservation.copy()

    def release(self, reservation_id: str, released_by: str) -> StockReservation:
        """Return an active reservation's units to available.

        Raises InvalidStateError if the reservation is no longer active.
        """
        if self._expire_on_read:
            self.expire_due()
        key = self._require(reservation_id).key

        with self._state.locked(key):
            reservation = self._require(reservation_id)
            now = self._state.clock.now()
            reservation.release(now, released_by)
            balance = self._balance_for(reservation)
            balance.unhold(reservation.quantity, now, released_by)
            self._state.commit(balances=[balance], reservations=[reservation])

        logger.info("Released reservation %s (%d at %s)", reservation.id, reservation.quantity, key)
        self._publish(reservation)
        return reservation.copy()

    def consume(
        self,
        reservation_id: str,
        consumed_by: str,
        reference_id: str | None = None,
        notes: str | None = None,
    ) -> LedgerEntry:
        """Turn an active reservation into an ``out`` ledger entry.

        The held units leave both ``reserved`` and ``total``; available
        is unaffected.
        """
        if self._expire_on_read:
            self.expire_due()
        key = self._require(reservation_id).key

        with self._state.locked(key):
            reservation = self._require(reservation_id)
            now = self._state.clock.now()
            reservation.consume(now, consumed_by)
            balance = self._balance_for(reservation)
            balance.unhold(reservation.quantity, now, consumed_by)
            entry = self._ledger.prepare_entry(
                TransactionRequest(
                    product_id=reservation.product_id,
                    location=reservation.location,
                    transaction_type=TransactionType.OUT,
                    quantity=reservation.quantity,
                    performed_by=consumed_by,
                    reference_type="reservation",
                    reference_id=reference_id or reservation.id,
                    notes=notes,
                ),
                balance,
            )
            self._state.commit(
                entries=[entry], balances=[balance], reservations=[reservation]
            )

        logger.info("Consumed reservation %s into %s", reservation.id, entry.id)
        self._ledger.publish(entry)
        self._publish(reservation)
        return entry

    def expire_due(self, now: datetime | None = None) -> int:
        """Expire every active reservation whose ``expires_at`` is before *now*.

        Each reservation is handled in its own critical section.  Keys
        halted by a consistency failure are skipped.  Returns the number
        of reservations expired.  A naive *now* is rejected with
        ValidationError.
        """
        if now is not None and now.tzinfo is None:
            raise ValidationError("now must be timezone-aware", field="now")
        now = now or self._state.clock.now()
        candidates = self._state.reservations(lambda r: r.is_due(now))
        expired = 0

        for candidate in candidates:
            try:
                with self._state.locked(candidate.key):
                    reservation = self._state.reservation(candidate.id)
                    if reservation is None or not reservation.is_due(now):
                        continue
                    reservation.expire(now)
                    balance = self._balance_for(reservation)
                    balance.unhold(reservation.quantity, now, "system")
                    self._state.commit(balances=[balance], reservations=[reservation])
            except ConsistencyError:
                logger.error("Skipped expiry of %s on a halted balance", candidate.id)
                continue
            expired += 1
            self._publish(reservation)

        if expired:
            logger.info("Expired %d reservation(s)", expired)
        return expired

    # --- Queries --------------------------------------------------------------

    def get_reservation(self, reservation_id: str) -> StockReservation:
        if self._expire_on_read:
            self.expire_due()
        return self._require(reservation_id)

    def get_active_reservations(
        self, product_id: str, warehouse_id: str | None = None
    ) -> list[StockReservation]:
        if self._expire_on_read:
            self.expire_due()
        found = self._state.reservations(
            lambda r: r.is_active
            and r.product_id == product_id
            and (warehouse_id is None or r.location.warehouse_id == warehouse_id)
        )
        return sorted(found, key=lambda r: r.id)

    # --- Internal helpers -----------------------------------------------------

    def _require(self, reservation_id: str) -> StockReservation:
        reservation = self._state.reservation(reservation_id)
        if reservation is None:
            raise EntityNotFoundError(f"Reservation '{reservation_id}' not found")
        return reservation

    def _balance_for(self, reservation: StockReservation) -> StockBalance:
        balance = self._state.balance(reservation.key)
        if balance is None:
            self._state.halt(reservation.key, f"no balance behind {reservation.id}")
            raise ConsistencyError(
                f"Reservation {reservation.id} has no balance at {reservation.key}",
                key=reservation.key,
            )
        return balance

    def _publish(self, reservation: StockReservation) -> None:
        try:
            self._notifier.notify(ReservationChanged(reservation=reservation.copy()))
        except Exception:
            logger.warning(
                "Notifier failed for reservation %s", reservation.id, exc_info=True
            )
