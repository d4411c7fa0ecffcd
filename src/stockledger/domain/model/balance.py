"""StockBalance: current on-hand and reserved quantity for one balance key.

Purely derived state: it can always be rebuilt by replaying the ledger
and the active reservations.  Created lazily on first use and never
deleted (a zero balance is valid and kept).
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from datetime import datetime

from stockledger.domain.exceptions import ConsistencyError
from stockledger.domain.model.value_objects import BalanceKey


@dataclass
class StockBalance:
    """Per-key stock figures.

    Invariants:
    - ``total_quantity == available_quantity + reserved_quantity``
    - ``reserved_quantity`` is never negative
    """

    product_id: str
    warehouse_id: str
    location_id: str | None
    available_quantity: int
    reserved_quantity: int
    total_quantity: int
    last_updated: datetime
    last_updated_by: str

    @staticmethod
    def opened(key: BalanceKey, at: datetime, by: str) -> StockBalance:
        """A zero balance for a key that has never been touched."""
        return StockBalance(
            product_id=key.product_id,
            warehouse_id=key.warehouse_id,
            location_id=key.location_id,
            available_quantity=0,
            reserved_quantity=0,
            total_quantity=0,
            last_updated=at,
            last_updated_by=by,
        )

    @property
    def key(self) -> BalanceKey:
        return BalanceKey.of(self.product_id, self.warehouse_id, self.location_id)

    def copy(self) -> StockBalance:
        return dataclasses.replace(self)

    # --- Mutations ------------------------------------------------------------

    def set_total(self, new_total: int, at: datetime, by: str) -> None:
        """Commit a new on-hand figure; reservations stay where they are."""
        self.total_quantity = new_total
        self.available_quantity = new_total - self.reserved_quantity
        self._touch(at, by)

    def hold(self, quantity: int, at: datetime, by: str) -> None:
        """Move *quantity* from available to reserved."""
        self.available_quantity -= quantity
        self.reserved_quantity += quantity
        self._touch(at, by)

    def unhold(self, quantity: int, at: datetime, by: str) -> None:
        """Move *quantity* from reserved back to available."""
        self.reserved_quantity -= quantity
        self.available_quantity += quantity
        self._touch(at, by)

    def check_invariant(self) -> None:
        if self.total_quantity != self.available_quantity + self.reserved_quantity:
            raise ConsistencyError(
                f"Balance {self.key} broken: total {self.total_quantity} != "
                f"available {self.available_quantity} + reserved {self.reserved_quantity}",
                key=self.key,
            )
        if self.reserved_quantity < 0:
            raise ConsistencyError(
                f"Balance {self.key} has negative reserved quantity "
                f"{self.reserved_quantity}",
                key=self.key,
            )

    def _touch(self, at: datetime, by: str) -> None:
        self.last_updated = at
        self.last_updated_by = by
