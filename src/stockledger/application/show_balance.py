"""Application service: Show Balance use case (query)."""

from __future__ import annotations

from stockledger.application.dto import BalanceDTO, balance_to_dto
from stockledger.domain.exceptions import EntityNotFoundError
from stockledger.domain.service.balance_store import BalanceStore


class ShowBalanceHandler:

    def __init__(self, balances: BalanceStore) -> None:
        self._balances = balances

    def handle(
        self,
        product_id: str,
        warehouse_id: str,
        location_id: str | None = None,
        aggregate: bool = False,
    ) -> BalanceDTO:
        balance = (
            self._balances.get_aggregate_balance(product_id, warehouse_id)
            if aggregate
            else self._balances.get_balance(product_id, warehouse_id, location_id)
        )
        if balance is None:
            raise EntityNotFoundError(
                f"No stock balance for product '{product_id}' in '{warehouse_id}'"
            )
        return balance_to_dto(balance)

    def list_all(
        self, product_id: str | None = None, warehouse_id: str | None = None
    ) -> list[BalanceDTO]:
        return [
            balance_to_dto(b)
            for b in self._balances.list_balances(product_id, warehouse_id)
        ]
