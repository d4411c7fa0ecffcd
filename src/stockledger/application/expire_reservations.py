"""Application service: Expire Reservations use case (scheduler entry point)."""

from __future__ import annotations

from stockledger.domain.service.reservation_manager import ReservationManager


class ExpireReservationsHandler:

    def __init__(self, reservations: ReservationManager) -> None:
        self._reservations = reservations

    def handle(self) -> int:
        return self._reservations.expire_due()
