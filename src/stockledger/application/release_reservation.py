"""Application service: Release Reservation use case."""

from __future__ import annotations

from stockledger.application.dto import ReservationOutcome, reservation_to_dto
from stockledger.domain.exceptions import BusinessRuleError
from stockledger.domain.service.reservation_manager import ReservationManager
from stockledger.domain.service.validation import ValidationResult


class ReleaseReservationHandler:

    def __init__(self, reservations: ReservationManager) -> None:
        self._reservations = reservations

    def handle(self, reservation_id: str, released_by: str) -> ReservationOutcome:
        """Release an active reservation.

        Unknown ids raise EntityNotFoundError; a reservation that is
        already closed comes back as an invalid outcome.
        """
        try:
            reservation = self._reservations.release(reservation_id, released_by)
        except BusinessRuleError as exc:
            return ReservationOutcome(ValidationResult.failed(exc))
        return ReservationOutcome(ValidationResult(), reservation_to_dto(reservation))
