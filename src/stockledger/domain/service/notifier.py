"""Outbound notification port for committed stock events."""

from __future__ import annotations

from abc import ABC, abstractmethod


class Notifier(ABC):

    @abstractmethod
    def notify(self, event: object) -> None:
        """Deliver *event*.  Called after the triggering commit."""


class NullNotifier(Notifier):

    def notify(self, event: object) -> None:
        pass
