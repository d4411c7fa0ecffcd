"""Application service: Receive Stock use case (goods in)."""

from __future__ import annotations

from stockledger.application.dto import StockMovementOutcome, entry_to_dto
from stockledger.domain.model.ledger_entry import TransactionRequest, TransactionType
from stockledger.domain.model.value_objects import Money, StockLocation
from stockledger.domain.service.ledger import StockLedger
from stockledger.domain.service.validation import ValidationResult


class ReceiveStockHandler:

    def __init__(self, ledger: StockLedger) -> None:
        self._ledger = ledger

    def handle(
        self,
        product_id: str,
        warehouse_id: str,
        quantity: int,
        performed_by: str,
        location_id: str | None = None,
        reference_type: str | None = "delivery",
        reference_id: str | None = None,
        unit_cost: str | None = None,
        notes: str | None = None,
    ) -> StockMovementOutcome:
        """Record an ``in`` transaction.

        Receiving cannot fail a business rule, so the only failures are
        input errors, which are raised as ValidationError.
        """
        entry = self._ledger.record_transaction(
            TransactionRequest(
                product_id=product_id,
                location=StockLocation(warehouse_id, location_id),
                transaction_type=TransactionType.IN,
                quantity=quantity,
                performed_by=performed_by,
                reference_type=reference_type,
                reference_id=reference_id,
                unit_cost=Money.of(unit_cost) if unit_cost is not None else None,
                notes=notes,
            )
        )
        return StockMovementOutcome(ValidationResult(), (entry_to_dto(entry),))
