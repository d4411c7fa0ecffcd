"""Domain events handed to the injected notifier after a commit."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from stockledger.domain.model.ledger_entry import LedgerEntry
from stockledger.domain.model.reservation import StockReservation

STOCK_LEDGER_UPDATED = "stock.ledger.updated"
STOCK_RESERVATION_CHANGED = "stock.reservation.changed"


@dataclass(frozen=True)
class LedgerUpdated:
    name: ClassVar[str] = STOCK_LEDGER_UPDATED

    entry: LedgerEntry
    previous_balance: int
    new_balance: int


@dataclass(frozen=True)
class ReservationChanged:
    name: ClassVar[str] = STOCK_RESERVATION_CHANGED

    reservation: StockReservation
