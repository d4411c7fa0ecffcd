"""In-process event dispatcher used as the ledger's notifier.

Listeners subscribe by event name (``stock.ledger.updated``, ...).
Delivery is best effort: an exception in one listener is logged and
the remaining listeners still run.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from stockledger.domain.service.notifier import Notifier

logger = logging.getLogger(__name__)

Listener = Callable[[object], None]


class EventDispatcher(Notifier):

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = {}
        self._lock = threading.Lock()

    def on(self, event_name: str, listener: Listener) -> None:
        if not callable(listener):
            raise TypeError("Listener must be callable")
        with self._lock:
            listeners = self._listeners.setdefault(event_name, [])
            if listener in listeners:
                logger.warning("Listener %r already subscribed to %s", listener, event_name)
                return
            listeners.append(listener)

    def off(self, event_name: str, listener: Listener) -> None:
        with self._lock:
            listeners = self._listeners.get(event_name, [])
            if listener in listeners:
                listeners.remove(listener)
            if not listeners:
                self._listeners.pop(event_name, None)

    def once(self, event_name: str, listener: Listener) -> None:
        """Subscribe *listener* for the next event only."""

        def wrapper(event: object) -> None:
            self.off(event_name, wrapper)
            listener(event)

        self.on(event_name, wrapper)

    def notify(self, event: object) -> None:
        event_name = getattr(event, "name", type(event).__name__)
        with self._lock:
            listeners = list(self._listeners.get(event_name, ()))
        for listener in listeners:
            try:
                listener(event)
            except Exception:
                logger.warning(
                    "Listener %r failed for %s", listener, event_name, exc_info=True
                )

    def listener_count(self, event_name: str) -> int:
        with self._lock:
            return len(self._listeners.get(event_name, ()))

    def event_names(self) -> list[str]:
        with self._lock:
            return list(self._listeners)
