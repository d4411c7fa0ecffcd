"""In-memory view of the ledger, balances and reservations.

One StockState is built per process at startup and handed to the
services.  It serialises work per balance key: every read-then-write on
a key runs inside ``locked(key)``, so operations on different keys never
contend.  Mutations are prepared on copies and installed by ``commit``
only after the repository has persisted them, so a failed operation
leaves nothing behind.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator, Sequence
from contextlib import ExitStack, contextmanager

from stockledger.domain.exceptions import ConsistencyError, StockSystemError
from stockledger.domain.model.balance import StockBalance
from stockledger.domain.model.ledger_entry import LedgerEntry
from stockledger.domain.model.reservation import StockReservation
from stockledger.domain.model.value_objects import BalanceKey
from stockledger.domain.repository.stock_repository import StockRepository
from stockledger.domain.service.identity import Clock, IdGenerator, SystemClock

logger = logging.getLogger(__name__)


class StockState:

    def __init__(
        self,
        repository: StockRepository,
        clock: Clock | None = None,
        ids: IdGenerator | None = None,
    ) -> None:
        self.repository = repository
        self.clock = clock or SystemClock()
        self.ids = ids or IdGenerator(self.clock)

        # Guards the containers below; never held while waiting on a key lock.
        self._guard = threading.Lock()
        self._entries: list[LedgerEntry] = list(repository.load_entries())
        self._balances: dict[BalanceKey, StockBalance] = {
            b.key: b for b in repository.load_balances()
        }
        self._reservations: dict[str, StockReservation] = {
            r.id: r for r in repository.load_reservations()
        }
        self._key_locks: dict[BalanceKey, threading.RLock] = {}
        self._halted: set[BalanceKey] = set()

        logger.debug(
            "Loaded %d entries, %d balances, %d reservations",
            len(self._entries), len(self._balances), len(self._reservations),
        )

    # --- Locking --------------------------------------------------------------

    @contextmanager
    def locked(self, *keys: BalanceKey) -> Iterator[None]:
        """Hold the locks of *keys* (in sorted order) for the block.

        Raises ConsistencyError if any of the keys has been halted.
        """
        ordered = sorted(set(keys))
        with ExitStack() as stack:
            for key in ordered:
                stack.enter_context(self._lock_for(key))
            for key in ordered:
                if self.is_halted(key):
                    raise ConsistencyError(
                        f"Balance {key} is halted after a consistency failure",
                        key=key,
                    )
            yield

    def _lock_for(self, key: BalanceKey) -> threading.RLock:
        with self._guard:
            return self._key_locks.setdefault(key, threading.RLock())

    def is_halted(self, key: BalanceKey) -> bool:
        with self._guard:
            return key in self._halted

    def halt(self, key: BalanceKey, reason: str) -> None:
        with self._guard:
            self._halted.add(key)
        logger.error("Halting mutations on %s: %s", key, reason)

    def clear_halt(self, key: BalanceKey) -> None:
        with self._guard:
            self._halted.discard(key)
        logger.warning("Mutations on %s re-enabled", key)

    # --- Reads (always copies) ------------------------------------------------

    def balance(self, key: BalanceKey) -> StockBalance | None:
        with self._guard:
            found = self._balances.get(key)
            return found.copy() if found is not None else None

    def balances(
        self, predicate: Callable[[StockBalance], bool] | None = None
    ) -> list[StockBalance]:
        with self._guard:
            return [
                b.copy() for b in self._balances.values()
                if predicate is None or predicate(b)
            ]

    def entries(self) -> list[LedgerEntry]:
        with self._guard:
            return list(self._entries)

    def reservation(self, reservation_id: str) -> StockReservation | None:
        with self._guard:
            found = self._reservations.get(reservation_id)
            return found.copy() if found is not None else None

    def reservations(
        self, predicate: Callable[[StockReservation], bool] | None = None
    ) -> list[StockReservation]:
        with self._guard:
            return [
                r.copy() for r in self._reservations.values()
                if predicate is None or predicate(r)
            ]

    def snapshot(
        self,
    ) -> tuple[list[LedgerEntry], list[StockBalance], list[StockReservation]]:
        """All three collections as of one single instant."""
        with self._guard:
            return (
                list(self._entries),
                [b.copy() for b in self._balances.values()],
                [r.copy() for r in self._reservations.values()],
            )

    # --- Commit ---------------------------------------------------------------

    def commit(
        self,
        entries: Sequence[LedgerEntry] = (),
        balances: Sequence[StockBalance] = (),
        reservations: Sequence[StockReservation] = (),
    ) -> None:
        """Check invariants, persist, then install the prepared objects.

        The caller must hold the locks of every key touched.
        """
        for balance in balances:
            self._check(balance, reservations)

        try:
            self.repository.commit(entries, balances, reservations)
        except StockSystemError:
            logger.exception(
                "Storage commit failed, nothing applied "
                "(entries=%s, balances=%s, reservations=%s)",
                [e.id for e in entries],
                [str(b.key) for b in balances],
                [r.id for r in reservations],
            )
            raise
        except OSError as exc:
            logger.exception(
                "Storage I/O failed, nothing applied (entries=%s, reservations=%s)",
                [e.id for e in entries],
                [r.id for r in reservations],
            )
            raise StockSystemError(f"Storage commit failed: {exc}") from exc

        with self._guard:
            self._entries.extend(entries)
            for balance in balances:
                self._balances[balance.key] = balance.copy()
            for reservation in reservations:
                self._reservations[reservation.id] = reservation.copy()

    def _check(
        self, balance: StockBalance, pending: Sequence[StockReservation]
    ) -> None:
        key = balance.key
        try:
            balance.check_invariant()
            held = self._active_total(key, pending)
            if held != balance.reserved_quantity:
                raise ConsistencyError(
                    f"Balance {key} reserves {balance.reserved_quantity} but "
                    f"active reservations hold {held}",
                    key=key,
                )
        except ConsistencyError as exc:
            self.halt(key, str(exc))
            raise

    def _active_total(
        self, key: BalanceKey, pending: Sequence[StockReservation]
    ) -> int:
        with self._guard:
            merged = dict(self._reservations)
        merged.update((r.id, r) for r in pending)
        return sum(r.quantity for r in merged.values() if r.is_active and r.key == key)
