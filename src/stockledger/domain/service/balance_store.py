"""Domain service: read side of the per-key stock balances.

Balances are written only by the StockLedger and the
ReservationManager.  This service answers balance queries, sums
locations into warehouse aggregates and can rebuild every balance from
the ledger to detect drift.
"""

from __future__ import annotations

import logging

from stockledger.domain.model.balance import StockBalance
from stockledger.domain.model.ledger_entry import LedgerEntry
from stockledger.domain.model.reservation import StockReservation
from stockledger.domain.model.value_objects import BalanceKey
from stockledger.domain.service.stock_state import StockState

logger = logging.getLogger(__name__)


class BalanceStore:

    def __init__(self, state: StockState) -> None:
        self._state = state

    # --- Queries --------------------------------------------------------------

    def get_balance(
        self, product_id: str, warehouse_id: str, location_id: str | None = None
    ) -> StockBalance | None:
        """Balance of one key; a missing location means the default bucket."""
        return self._state.balance(BalanceKey.of(product_id, warehouse_id, location_id))

    def get_aggregate_balance(
        self, product_id: str, warehouse_id: str
    ) -> StockBalance | None:
        """Sum of every location of *product_id* in *warehouse_id*.

        ``last_updated`` is the latest of the constituents and
        ``last_updated_by`` belongs to that latest one.
        """
        parts = self._state.balances(
            lambda b: b.product_id == product_id and b.warehouse_id == warehouse_id
        )
        if not parts:
            return None

        available = sum(b.available_quantity for b in parts)
        reserved = sum(b.reserved_quantity for b in parts)
        latest = max(parts, key=lambda b: b.last_updated)
        return StockBalance(
            product_id=product_id,
            warehouse_id=warehouse_id,
            location_id=None,
            available_quantity=available,
            reserved_quantity=reserved,
            total_quantity=available + reserved,
            last_updated=latest.last_updated,
            last_updated_by=latest.last_updated_by,
        )

    def check_availability(
        self,
        product_id: str,
        warehouse_id: str,
        quantity: int,
        location_id: str | None = None,
    ) -> bool:
        balance = (
            self.get_balance(product_id, warehouse_id, location_id)
            if location_id
            else self.get_aggregate_balance(product_id, warehouse_id)
        )
        return balance is not None and balance.available_quantity >= quantity

    def list_balances(
        self, product_id: str | None = None, warehouse_id: str | None = None
    ) -> list[StockBalance]:
        found = self._state.balances(
            lambda b: (product_id is None or b.product_id == product_id)
            and (warehouse_id is None or b.warehouse_id == warehouse_id)
        )
        return sorted(found, key=lambda b: b.key)

    # --- Rebuild and verification ---------------------------------------------

    def rebuild_from_ledger(self) -> dict[BalanceKey, StockBalance]:
        """Recompute every balance by replaying the ledger and active holds."""
        entries, _, reservations = self._state.snapshot()
        return self._replay(entries, reservations)

    def verify(self) -> list[str]:
        """Compare stored balances against a full replay.

        Returns one human-readable line per discrepancy; empty means the
        stored state is consistent with the ledger.
        """
        entries, balances, reservations = self._state.snapshot()
        problems: list[str] = []

        running: dict[BalanceKey, int] = {}
        for entry in entries:
            before = running.get(entry.key, 0)
            if entry.previous_balance != before:
                problems.append(
                    f"{entry.id}: previous balance {entry.previous_balance}, "
                    f"replay gives {before}"
                )
            running[entry.key] = entry.transaction_type.apply(before, entry.quantity)

        rebuilt = self._replay(entries, reservations)
        stored = {b.key: b for b in balances}
        for key in sorted(set(rebuilt) | set(stored)):
            expected = rebuilt.get(key)
            actual = stored.get(key)
            if actual is None:
                problems.append(f"{key}: missing stored balance")
                continue
            if actual.total_quantity != actual.available_quantity + actual.reserved_quantity:
                problems.append(f"{key}: total != available + reserved")
            exp_total = expected.total_quantity if expected else 0
            exp_reserved = expected.reserved_quantity if expected else 0
            if (actual.total_quantity, actual.reserved_quantity) != (exp_total, exp_reserved):
                problems.append(
                    f"{key}: stored total/reserved {actual.total_quantity}/"
                    f"{actual.reserved_quantity}, replay gives {exp_total}/{exp_reserved}"
                )

        if problems:
            logger.warning("Balance verification found %d problem(s)", len(problems))
        return problems

    def clear_halt(
        self, product_id: str, warehouse_id: str, location_id: str | None = None
    ) -> None:
        """Re-enable mutations on a key halted by a consistency failure."""
        self._state.clear_halt(BalanceKey.of(product_id, warehouse_id, location_id))

    @staticmethod
    def _replay(
        entries: list[LedgerEntry], reservations: list[StockReservation]
    ) -> dict[BalanceKey, StockBalance]:
        rebuilt: dict[BalanceKey, StockBalance] = {}
        for entry in entries:
            balance = rebuilt.get(entry.key) or StockBalance.opened(
                entry.key, entry.transaction_date, entry.performed_by
            )
            balance.set_total(
                entry.transaction_type.apply(balance.total_quantity, entry.quantity),
                entry.transaction_date,
                entry.performed_by,
            )
            rebuilt[entry.key] = balance

        for reservation in reservations:
            if not reservation.is_active:
                continue
            balance = rebuilt.get(reservation.key) or StockBalance.opened(
                reservation.key, reservation.reserved_at, reservation.reserved_by
            )
            balance.reserved_quantity += reservation.quantity
            balance.available_quantity -= reservation.quantity
            rebuilt[reservation.key] = balance
        return rebuilt
