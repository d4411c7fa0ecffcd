"""Application service: Count Stock use case (physical recount)."""

from __future__ import annotations

from stockledger.application.dto import StockMovementOutcome, entry_to_dto
from stockledger.domain.exceptions import BusinessRuleError
from stockledger.domain.model.ledger_entry import TransactionRequest, TransactionType
from stockledger.domain.model.value_objects import StockLocation
from stockledger.domain.service.ledger import StockLedger
from stockledger.domain.service.validation import ValidationResult


class CountStockHandler:

    def __init__(self, ledger: StockLedger) -> None:
        self._ledger = ledger

    def handle(
        self,
        product_id: str,
        warehouse_id: str,
        counted: int,
        performed_by: str,
        location_id: str | None = None,
        notes: str | None = None,
    ) -> StockMovementOutcome:
        """Replace the on-hand figure with *counted*.

        A count below the quantity currently reserved is refused; the
        reservations have to be released first.
        """
        try:
            entry = self._ledger.record_transaction(
                TransactionRequest(
                    product_id=product_id,
                    location=StockLocation(warehouse_id, location_id),
                    transaction_type=TransactionType.COUNT,
                    quantity=counted,
                    performed_by=performed_by,
                    reference_type="count",
                    notes=notes,
                )
            )
        except BusinessRuleError as exc:
            return StockMovementOutcome(ValidationResult.failed(exc))
        return StockMovementOutcome(ValidationResult(), (entry_to_dto(entry),))
