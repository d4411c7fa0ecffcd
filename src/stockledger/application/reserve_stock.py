"""Application service: Reserve Stock use case."""

from __future__ import annotations

from datetime import timedelta

from stockledger.application.dto import ReservationOutcome, reservation_to_dto
from stockledger.domain.exceptions import BusinessRuleError
from stockledger.domain.model.value_objects import StockLocation
from stockledger.domain.service.identity import Clock
from stockledger.domain.service.reservation_manager import ReservationManager
from stockledger.domain.service.validation import ValidationResult


class ReserveStockHandler:

    def __init__(self, reservations: ReservationManager, clock: Clock) -> None:
        self._reservations = reservations
        self._clock = clock

    def handle(
        self,
        product_id: str,
        warehouse_id: str,
        quantity: int,
        reserved_by: str,
        location_id: str | None = None,
        ttl_minutes: int | None = None,
    ) -> ReservationOutcome:
        """Hold stock, optionally expiring after *ttl_minutes*.

        A shortfall is returned in the outcome, not raised.
        """
        expires_at = (
            self._clock.now() + timedelta(minutes=ttl_minutes)
            if ttl_minutes is not None
            else None
        )
        try:
            reservation = self._reservations.reserve(
                product_id,
                StockLocation(warehouse_id, location_id),
                quantity,
                reserved_by,
                expires_at=expires_at,
            )
        except BusinessRuleError as exc:
            return ReservationOutcome(ValidationResult.failed(exc))
        return ReservationOutcome(ValidationResult(), reservation_to_dto(reservation))
