"""Domain service: the stock ledger.

Appends immutable LedgerEntries and, in the same critical section,
commits the balance they produce.  Every committed entry is announced
as a ``stock.ledger.updated`` event on a best-effort basis: a failing
notifier is logged and never undoes the write.
"""

from __future__ import annotations

import logging

from stockledger.domain.exceptions import InsufficientStockError, ValidationError
from stockledger.domain.model.balance import StockBalance
from stockledger.domain.model.events import LedgerUpdated
from stockledger.domain.model.ledger_entry import (
    LedgerEntry,
    TransactionRequest,
    TransactionType,
)
from stockledger.domain.model.value_objects import (
    BalanceKey,
    Money,
    Quantity,
    StockLocation,
)
from stockledger.domain.service.notifier import Notifier, NullNotifier
from stockledger.domain.service.stock_state import StockState

logger = logging.getLogger(__name__)


class StockLedger:

    def __init__(
        self,
        state: StockState,
        notifier: Notifier | None = None,
        enforce_non_negative: bool = True,
    ) -> None:
        self._state = state
        self._notifier = notifier or NullNotifier()
        self._enforce_non_negative = enforce_non_negative

    # --- Commands -------------------------------------------------------------

    def record_transaction(self, request: TransactionRequest) -> LedgerEntry:
        """Record one transaction and update its balance atomically.

        Raises ValidationError for malformed input and, when non-negative
        enforcement is on, InsufficientStockError if the entry would take
        more than is available.  Either way nothing is recorded.
        """
        key = self._check_request(request)

        with self._state.locked(key):
            balance = self._state.balance(key) or StockBalance.opened(
                key, self._state.clock.now(), request.performed_by
            )
            entry = self.prepare_entry(request, balance)
            self._state.commit(entries=[entry], balances=[balance])

        logger.info(
            "Recorded %s of %d at %s: %d -> %d (%s)",
            entry.transaction_type.value, entry.quantity, key,
            entry.previous_balance, entry.new_balance, entry.id,
        )
        self.publish(entry)
        return entry

    def record_transfer(
        self,
        product_id: str,
        source: StockLocation,
        destination: StockLocation,
        quantity: int,
        performed_by: str,
        reference_id: str | None = None,
        notes: str | None = None,
    ) -> tuple[LedgerEntry, LedgerEntry]:
        """Move stock between two locations as a paired out/in.

        Both keys are locked together, so the pair commits as one unit.
        """
        qty = Quantity(quantity).value
        source_key = source.key_for(product_id)
        destination_key = destination.key_for(product_id)
        if source_key == destination_key:
            raise ValidationError(
                "Transfer source and destination must differ", field="destination"
            )

        def request(location: StockLocation, txn_type: TransactionType) -> TransactionRequest:
            return TransactionRequest(
                product_id=product_id,
                location=location,
                transaction_type=txn_type,
                quantity=qty,
                performed_by=performed_by,
                reference_type="transfer",
                reference_id=reference_id,
                notes=notes,
            )

        outbound = request(source, TransactionType.TRANSFER_OUT)
        inbound = request(destination, TransactionType.TRANSFER_IN)
        self._check_request(outbound)

        with self._state.locked(source_key, destination_key):
            now = self._state.clock.now()
            source_balance = self._state.balance(source_key) or StockBalance.opened(
                source_key, now, performed_by
            )
            destination_balance = self._state.balance(
                destination_key
            ) or StockBalance.opened(destination_key, now, performed_by)
            out_entry = self.prepare_entry(outbound, source_balance)
            in_entry = self.prepare_entry(inbound, destination_balance)
            self._state.commit(
                entries=[out_entry, in_entry],
                balances=[source_balance, destination_balance],
            )

        logger.info(
            "Transferred %d of %s from %s to %s", qty, product_id, source, destination
        )
        self.publish(out_entry)
        self.publish(in_entry)
        return out_entry, in_entry

    def prepare_entry(
        self, request: TransactionRequest, balance: StockBalance
    ) -> LedgerEntry:
        """Stamp an entry for *request* and apply it to *balance* in place.

        Nothing is persisted: the caller holds the key lock and commits
        the returned entry together with *balance*.
        """
        txn_type = TransactionType.parse(request.transaction_type)
        quantity = txn_type.check_quantity(request.quantity)
        previous = balance.total_quantity
        new = txn_type.apply(previous, quantity)

        if self._enforce_non_negative and new < previous:
            available_after = new - balance.reserved_quantity
            if available_after < 0:
                logger.warning(
                    "Rejected %s of %d at %s: only %d available",
                    txn_type.value, quantity, balance.key, balance.available_quantity,
                )
                if txn_type is TransactionType.COUNT:
                    raise InsufficientStockError(
                        request.product_id,
                        previous - new,
                        max(balance.available_quantity, 0),
                        message=(
                            f"Count of {quantity} for product {request.product_id} is "
                            f"below the {balance.reserved_quantity} units reserved"
                        ),
                    )
                raise InsufficientStockError(
                    request.product_id,
                    previous - new,
                    max(balance.available_quantity, 0),
                )

        now = self._state.clock.now()
        entry = LedgerEntry(
            id=self._state.ids.next_id("LEDGER"),
            product_id=request.product_id,
            warehouse_id=request.location.warehouse_id,
            location_id=request.location.location_id,
            transaction_type=txn_type,
            quantity=quantity,
            previous_balance=previous,
            new_balance=new,
            performed_by=request.performed_by,
            transaction_date=now,
            reference_type=request.reference_type,
            reference_id=request.reference_id,
            unit_cost=request.unit_cost,
            total_cost=self._total_cost(request, abs(new - previous)),
            notes=request.notes,
        )
        balance.set_total(new, now, request.performed_by)
        return entry

    def publish(self, entry: LedgerEntry) -> None:
        event = LedgerUpdated(
            entry=entry,
            previous_balance=entry.previous_balance,
            new_balance=entry.new_balance,
        )
        try:
            self._notifier.notify(event)
        except Exception:
            logger.warning("Notifier failed for ledger entry %s", entry.id, exc_info=True)

    # --- Queries --------------------------------------------------------------

    def get_entries(
        self,
        product_id: str,
        warehouse_id: str | None = None,
        limit: int = 50,
    ) -> list[LedgerEntry]:
        """Newest-first entries for a product, optionally in one warehouse."""
        matches = [
            e for e in reversed(self._state.entries())
            if e.product_id == product_id
            and (warehouse_id is None or e.warehouse_id == warehouse_id)
        ]
        return matches[:limit]

    def all_entries(self) -> list[LedgerEntry]:
        """Every entry in append order."""
        return self._state.entries()

    # --- Internal helpers -----------------------------------------------------

    @staticmethod
    def _check_request(request: TransactionRequest) -> BalanceKey:
        txn_type = TransactionType.parse(request.transaction_type)
        txn_type.check_quantity(request.quantity)
        if not isinstance(request.performed_by, str) or not request.performed_by.strip():
            raise ValidationError("performed_by is required", field="performed_by")
        return request.key

    @staticmethod
    def _total_cost(request: TransactionRequest, moved: int) -> Money | None:
        if request.total_cost is not None:
            return request.total_cost
        if request.unit_cost is not None:
            return request.unit_cost * moved
        return None
