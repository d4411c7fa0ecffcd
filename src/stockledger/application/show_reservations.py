"""Application service: Show Reservations use case (query)."""

from __future__ import annotations

from stockledger.application.dto import ReservationDTO, reservation_to_dto
from stockledger.domain.service.reservation_manager import ReservationManager


class ShowReservationsHandler:

    def __init__(self, reservations: ReservationManager) -> None:
        self._reservations = reservations

    def handle(
        self, product_id: str, warehouse_id: str | None = None
    ) -> list[ReservationDTO]:
        return [
            reservation_to_dto(r)
            for r in self._reservations.get_active_reservations(product_id, warehouse_id)
        ]
