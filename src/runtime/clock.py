"""Repeating one-second tick source polled from the runtime loop."""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

DEFAULT_TICK_INTERVAL_SECONDS = 1.0


class MonotonicClock:
    """Fires its callback once per elapsed interval while active.

    The clock owns no thread: `poll()` is called from the control thread and
    emits every tick that fell due since the previous poll. Stopping is
    immediate, including from inside the tick callback.
    """

    def __init__(
        self,
        *,
        interval_seconds: float = DEFAULT_TICK_INTERVAL_SECONDS,
        monotonic_fn: Optional[Callable[[], float]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be > 0")
        self._interval = interval_seconds
        self._monotonic = monotonic_fn or time.monotonic
        self._logger = logger or logging.getLogger("runtime.clock")
        self._callback: Optional[Callable[[], None]] = None
        self._next_due: Optional[float] = None

    def on_tick(self, callback: Callable[[], None]) -> None:
        self._callback = callback

    @property
    def is_active(self) -> bool:
        return self._next_due is not None

    def start(self) -> None:
        if self._next_due is not None:
            return
        self._next_due = self._monotonic() + self._interval
        self._logger.debug("Clock started")

    def stop(self) -> None:
        if self._next_due is None:
            return
        self._next_due = None
        self._logger.debug("Clock stopped")

    def seconds_until_next_tick(self) -> Optional[float]:
        if self._next_due is None:
            return None
        return max(0.0, self._next_due - self._monotonic())

    def poll(self) -> int:
        """Emit due ticks; returns how many were delivered."""
        delivered = 0
        now = self._monotonic()
        while self._next_due is not None and now >= self._next_due:
            self._next_due += self._interval
            delivered += 1
            if self._callback is not None:
                self._callback()
        return delivered
