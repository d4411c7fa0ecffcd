"""Application service: Transfer Stock use case.

Moves stock between two locations (possibly in different warehouses)
as one paired ``transfer_out``/``transfer_in``.
"""

from __future__ import annotations

from stockledger.application.dto import StockMovementOutcome, entry_to_dto
from stockledger.domain.exceptions import BusinessRuleError
from stockledger.domain.model.value_objects import DEFAULT_LOCATION, StockLocation
from stockledger.domain.service.ledger import StockLedger
from stockledger.domain.service.validation import (
    StockOperation,
    StockValidator,
    ValidationResult,
)


class TransferStockHandler:

    def __init__(self, ledger: StockLedger, validator: StockValidator) -> None:
        self._ledger = ledger
        self._validator = validator

    def handle(
        self,
        product_id: str,
        source: StockLocation,
        destination: StockLocation,
        quantity: int,
        performed_by: str,
        reference_id: str | None = None,
    ) -> StockMovementOutcome:
        validation = self._validator.validate_stock_operation(
            product_id,
            source.warehouse_id,
            quantity,
            StockOperation.WITHDRAW,
            location_id=source.location_id or DEFAULT_LOCATION,
        )
        if not validation.is_valid:
            return StockMovementOutcome(validation)

        try:
            out_entry, in_entry = self._ledger.record_transfer(
                product_id,
                source,
                destination,
                quantity,
                performed_by,
                reference_id=reference_id,
            )
        except BusinessRuleError as exc:
            return StockMovementOutcome(ValidationResult.failed(exc))
        return StockMovementOutcome(
            validation, (entry_to_dto(out_entry), entry_to_dto(in_entry))
        )
