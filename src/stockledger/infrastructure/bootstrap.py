"""Composition root: wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.  ``build_services`` is
meant to be called once per process; the returned bundle is passed to
whoever needs it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from stockledger.domain.repository.stock_repository import StockRepository
from stockledger.domain.service.balance_store import BalanceStore
from stockledger.domain.service.identity import Clock
from stockledger.domain.service.ledger import StockLedger
from stockledger.domain.service.reservation_manager import ReservationManager
from stockledger.domain.service.stock_state import StockState
from stockledger.domain.service.validation import StockValidator
from stockledger.infrastructure.config import Settings
from stockledger.infrastructure.events import EventDispatcher
from stockledger.infrastructure.persistence.json_stock_repository import (
    JsonStockRepository,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StockServices:
    settings: Settings
    events: EventDispatcher
    state: StockState
    ledger: StockLedger
    balances: BalanceStore
    reservations: ReservationManager
    validator: StockValidator


def build_services(
    settings: Settings | None = None,
    repository: StockRepository | None = None,
    clock: Clock | None = None,
) -> StockServices:
    settings = settings or Settings.from_env()
    repository = repository or JsonStockRepository(settings.store_path)
    events = EventDispatcher()

    state = StockState(repository, clock=clock)
    ledger = StockLedger(
        state, notifier=events, enforce_non_negative=settings.enforce_non_negative
    )
    balances = BalanceStore(state)
    reservations = ReservationManager(
        state, ledger, notifier=events, expire_on_read=settings.expire_on_read
    )
    validator = StockValidator(balances, low_stock_ratio=settings.low_stock_ratio)

    logger.debug("Stock services ready (store=%s)", settings.store_path)
    return StockServices(
        settings=settings,
        events=events,
        state=state,
        ledger=ledger,
        balances=balances,
        reservations=reservations,
        validator=validator,
    )
