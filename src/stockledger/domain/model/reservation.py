"""StockReservation: a temporary hold against available quantity.

State machine::

    ACTIVE -> RELEASED | EXPIRED | CONSUMED

All three targets are terminal.  Nothing but creation reaches ACTIVE.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from stockledger.domain.exceptions import InvalidStateError
from stockledger.domain.model.value_objects import BalanceKey, StockLocation


class ReservationStatus(Enum):
    ACTIVE = "active"
    RELEASED = "released"
    EXPIRED = "expired"
    CONSUMED = "consumed"

    @property
    def is_terminal(self) -> bool:
        return self is not ReservationStatus.ACTIVE


@dataclass
class StockReservation:
    id: str
    product_id: str
    location: StockLocation
    quantity: int
    reserved_by: str
    reserved_at: datetime
    expires_at: datetime | None = None
    status: ReservationStatus = ReservationStatus.ACTIVE
    closed_at: datetime | None = None
    closed_by: str | None = None

    @property
    def key(self) -> BalanceKey:
        return self.location.key_for(self.product_id)

    @property
    def is_active(self) -> bool:
        return self.status is ReservationStatus.ACTIVE

    def is_due(self, now: datetime) -> bool:
        """True if still active and its expiry lies strictly before *now*."""
        return self.is_active and self.expires_at is not None and self.expires_at < now

    def copy(self) -> StockReservation:
        return dataclasses.replace(self)

    # --- State transitions ----------------------------------------------------

    def release(self, at: datetime, by: str) -> None:
        self._close(ReservationStatus.RELEASED, at, by)

    def expire(self, at: datetime) -> None:
        self._close(ReservationStatus.EXPIRED, at, "system")

    def consume(self, at: datetime, by: str) -> None:
        self._close(ReservationStatus.CONSUMED, at, by)

    def _close(self, target: ReservationStatus, at: datetime, by: str) -> None:
        if not self.is_active:
            raise InvalidStateError(
                f"Cannot mark reservation {self.id} as {target.value}",
                entity_type="reservation",
                entity_id=self.id,
                current_state=self.status.value,
                required_state=ReservationStatus.ACTIVE.value,
            )
        self.status = target
        self.closed_at = at
        self.closed_by = by
