"""Identifier and clock utilities.

Both are injected into the services so tests can pin time and ids.
"""

from __future__ import annotations

import itertools
import secrets
import threading
from abc import ABC, abstractmethod
from datetime import datetime, timezone


class Clock(ABC):

    @abstractmethod
    def now(self) -> datetime:
        """Current time as a timezone-aware UTC datetime."""


class SystemClock(Clock):

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class IdGenerator:
    """Produces ids like ``LEDGER-1760870400000-000042-9f2c01ab``.

    Millisecond timestamp, then a process-wide sequence, then random
    hex.  Ids from one generator sort in creation order even when the
    clock does not move.
    """

    def __init__(self, clock: Clock) -> None:
        self._clock = clock
        self._sequence = itertools.count(1)
        self._lock = threading.Lock()

    def next_id(self, prefix: str) -> str:
        with self._lock:
            seq = next(self._sequence)
        millis = int(self._clock.now().timestamp() * 1000)
        return f"{prefix}-{millis:013d}-{seq:06d}-{secrets.token_hex(4)}"
