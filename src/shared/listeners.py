"""Observer list used by components to publish state-change events."""

from __future__ import annotations

import logging
from typing import Callable, Generic, Optional, TypeVar

EventT = TypeVar("EventT")


class ListenerList(Generic[EventT]):
    """Ordered set of callbacks notified synchronously on the control thread."""

    def __init__(self, name: str, logger: Optional[logging.Logger] = None):
        self._name = name
        self._logger = logger or logging.getLogger(name)
        self._listeners: list[Callable[[EventT], None]] = []

    def add(self, listener: Callable[[EventT], None]) -> Callable[[], None]:
        """Register a listener and return a callable that removes it again."""
        if listener not in self._listeners:
            self._listeners.append(listener)

        def remove() -> None:
            self.remove(listener)

        return remove

    def remove(self, listener: Callable[[EventT], None]) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def emit(self, event: EventT) -> None:
        # Copy so listeners may unsubscribe while being notified.
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                self._logger.exception("%s listener failed", self._name)

    def __len__(self) -> int:
        return len(self._listeners)
