"""Application service: Show Ledger use case (query + audit check)."""

from __future__ import annotations

from stockledger.application.dto import LedgerEntryDTO, entry_to_dto
from stockledger.domain.service.balance_store import BalanceStore
from stockledger.domain.service.ledger import StockLedger


class ShowLedgerHandler:

    def __init__(self, ledger: StockLedger, balances: BalanceStore) -> None:
        self._ledger = ledger
        self._balances = balances

    def handle(
        self,
        product_id: str,
        warehouse_id: str | None = None,
        limit: int = 50,
    ) -> list[LedgerEntryDTO]:
        """Newest-first history of a product."""
        return [
            entry_to_dto(e)
            for e in self._ledger.get_entries(product_id, warehouse_id, limit)
        ]

    def verify(self) -> list[str]:
        """Replay the ledger and report any drift in stored balances."""
        return self._balances.verify()
