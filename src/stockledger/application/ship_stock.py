"""Application service: Ship Stock use case (goods out).

Validates the withdrawal first; only a clean result reaches the ledger.
A shortfall that appears between validation and commit is reported the
same way as one caught by validation.
"""

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


class ShipStockHandler:

    def __init__(self, ledger: StockLedger, validator: StockValidator) -> None:
        self._ledger = ledger
        self._validator = validator

    def handle(
        self,
        product_id: str,
        warehouse_id: str,
        quantity: int,
        performed_by: str,
        location_id: str | None = None,
        reference_id: str | None = None,
        notes: str | None = None,
    ) -> StockMovementOutcome:
        validation = self._validator.validate_stock_operation(
            product_id,
            warehouse_id,
            quantity,
            StockOperation.WITHDRAW,
            location_id=location_id or DEFAULT_LOCATION,
        )
        if not validation.is_valid:
            return StockMovementOutcome(validation)

        try:
            entry = self._ledger.record_transaction(
                TransactionRequest(
                    product_id=product_id,
                    location=StockLocation(warehouse_id, location_id),
                    transaction_type=TransactionType.OUT,
                    quantity=quantity,
                    performed_by=performed_by,
                    reference_type="sales_order" if reference_id else None,
                    reference_id=reference_id,
                    notes=notes,
                )
            )
        except BusinessRuleError as exc:
            return StockMovementOutcome(ValidationResult.failed(exc))
        return StockMovementOutcome(validation, (entry_to_dto(entry),))
