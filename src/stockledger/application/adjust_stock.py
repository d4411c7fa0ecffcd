"""Application service: Adjust Stock use case (signed correction)."""

from __future__ import annotations

from stockledger.application.dto import StockMovementOutcome, entry_to_dto
from stockledger.domain.exceptions import BusinessRuleError
from stockledger.domain.model.ledger_entry import TransactionRequest, TransactionType
from stockledger.domain.model.value_objects import DEFAULT_LOCATION, StockLocation
from stockledger.domain.service.ledger import StockLedger
from stockledger.domain.service.validation import (
    StockOperation,
    StockValidator,
    ValidationResult,
)


class AdjustStockHandler:

    def __init__(self, ledger: StockLedger, validator: StockValidator) -> None:
        self._ledger = ledger
        self._validator = validator

    def handle(
        self,
        product_id: str,
        warehouse_id: str,
        delta: int,
        performed_by: str,
        location_id: str | None = None,
        reason: str | None = None,
    ) -> StockMovementOutcome:
        """Record an ``adjustment`` of *delta* (positive or negative).

        Downward adjustments are validated against the current balance;
        upward ones may open a new balance.
        """
        validation = ValidationResult()
        if isinstance(delta, int) and not isinstance(delta, bool) and delta < 0:
            validation = self._validator.validate_stock_operation(
                product_id,
                warehouse_id,
                -delta,
                StockOperation.ADJUST,
                location_id=location_id or DEFAULT_LOCATION,
            )
            if not validation.is_valid:
                return StockMovementOutcome(validation)

        try:
            entry = self._ledger.record_transaction(
                TransactionRequest(
                    product_id=product_id,
                    location=StockLocation(warehouse_id, location_id),
                    transaction_type=TransactionType.ADJUSTMENT,
                    quantity=delta,
                    performed_by=performed_by,
                    reference_type="adjustment",
                    notes=reason,
                )
            )
        except BusinessRuleError as exc:
            return StockMovementOutcome(ValidationResult.failed(exc))
        return StockMovementOutcome(validation, (entry_to_dto(entry),))
