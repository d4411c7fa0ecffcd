"""LedgerEntry: one immutable record of a stock-affecting transaction.

The ledger is the single source of truth; balances are derived from it.
Entries are never edited or removed.  A mistake is corrected by
recording a counter ``adjustment``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from stockledger.domain.exceptions import ValidationError
from stockledger.domain.model.value_objects import (
    BalanceKey,
    Money,
    Quantity,
    StockLocation,
    require_integer,
)


class TransactionType(Enum):
    IN = "in"
    OUT = "out"
    TRANSFER_IN = "transfer_in"
    TRANSFER_OUT = "transfer_out"
    ADJUSTMENT = "adjustment"
    COUNT = "count"

    @staticmethod
    def parse(value: TransactionType | str) -> TransactionType:
        if isinstance(value, TransactionType):
            return value
        try:
            return TransactionType(value)
        except ValueError:
            raise ValidationError(
                f"Unknown transaction type: {value!r}",
                field="transaction_type",
            ) from None

    @property
    def is_inbound(self) -> bool:
        return self in (TransactionType.IN, TransactionType.TRANSFER_IN)

    @property
    def is_outbound(self) -> bool:
        return self in (TransactionType.OUT, TransactionType.TRANSFER_OUT)

    def check_quantity(self, quantity: object) -> int:
        """Validate *quantity* for this type and return it.

        ``in``/``out``/transfers take a positive amount, ``adjustment`` a
        non-zero signed delta, ``count`` an absolute non-negative figure.
        """
        if self.is_inbound or self.is_outbound:
            return Quantity(quantity).value  # type: ignore[arg-type]
        value = require_integer(quantity)
        if self is TransactionType.ADJUSTMENT and value == 0:
            raise ValidationError("Adjustment quantity must be non-zero", field="quantity")
        if self is TransactionType.COUNT and value < 0:
            raise ValidationError("Counted quantity cannot be negative", field="quantity")
        return value

    def apply(self, previous: int, quantity: int) -> int:
        """Return the balance after applying *quantity* to *previous*."""
        if self.is_inbound or self is TransactionType.ADJUSTMENT:
            return previous + quantity
        if self.is_outbound:
            return previous - quantity
        return quantity  # COUNT replaces the balance


@dataclass(frozen=True)
class TransactionRequest:
    """What a caller asks the ledger to record.

    Everything the ledger computes itself (id, balances, date) is absent.
    """

    product_id: str
    location: StockLocation
    transaction_type: TransactionType | str
    quantity: int
    performed_by: str
    reference_type: str | None = None
    reference_id: str | None = None
    unit_cost: Money | None = None
    total_cost: Money | None = None
    notes: str | None = None

    @property
    def key(self) -> BalanceKey:
        return self.location.key_for(self.product_id)


@dataclass(frozen=True)
class LedgerEntry:
    id: str
    product_id: str
    warehouse_id: str
    location_id: str | None
    transaction_type: TransactionType
    quantity: int
    previous_balance: int
    new_balance: int
    performed_by: str
    transaction_date: datetime
    reference_type: str | None = None
    reference_id: str | None = None
    unit_cost: Money | None = None
    total_cost: Money | None = None
    notes: str | None = None

    @property
    def key(self) -> BalanceKey:
        return BalanceKey.of(self.product_id, self.warehouse_id, self.location_id)

    @property
    def delta(self) -> int:
        return self.new_balance - self.previous_balance
