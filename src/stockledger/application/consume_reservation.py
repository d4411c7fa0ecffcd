"""Application service: Consume Reservation use case.

Ships the reserved units: the reservation becomes ``consumed`` and an
``out`` entry is written to the ledger in the same step.
"""

from __future__ import annotations

from stockledger.application.dto import StockMovementOutcome, entry_to_dto
from stockledger.domain.exceptions import BusinessRuleError
from stockledger.domain.service.reservation_manager import ReservationManager
from stockledger.domain.service.validation import ValidationResult


class ConsumeReservationHandler:

    def __init__(self, reservations: ReservationManager) -> None:
        self._reservations = reservations

    def handle(
        self,
        reservation_id: str,
        consumed_by: str,
        reference_id: str | None = None,
    ) -> StockMovementOutcome:
        try:
            entry = self._reservations.consume(
                reservation_id, consumed_by, reference_id=reference_id
            )
        except BusinessRuleError as exc:
            return StockMovementOutcome(ValidationResult.failed(exc))
        return StockMovementOutcome(ValidationResult(), (entry_to_dto(entry),))
