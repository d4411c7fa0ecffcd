"""Abstract repository for the three stock collections.

``ledger_entries`` is append-only, ``stock_balances`` is keyed by
BalanceKey and ``stock_reservations`` by reservation id.  The invariants
between them are enforced by the domain services; the repository only
has to make each ``commit`` all-or-nothing.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from stockledger.domain.model.balance import StockBalance
from stockledger.domain.model.ledger_entry import LedgerEntry
from stockledger.domain.model.reservation import StockReservation


class StockRepository(ABC):

    @abstractmethod
    def load_entries(self) -> list[LedgerEntry]:
        """Return every ledger entry in append order."""

    @abstractmethod
    def load_balances(self) -> list[StockBalance]:
        """Return every stored balance."""

    @abstractmethod
    def load_reservations(self) -> list[StockReservation]:
        """Return every reservation, whatever its status."""

    @abstractmethod
    def commit(
        self,
        entries: Sequence[LedgerEntry] = (),
        balances: Sequence[StockBalance] = (),
        reservations: Sequence[StockReservation] = (),
    ) -> None:
        """Append *entries* and upsert *balances*/*reservations* atomically.

        Must raise ``StockSystemError`` on failure, leaving stored state
        exactly as it was before the call.
        """
