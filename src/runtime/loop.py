"""Runtime orchestration loop for clock ticks, key events, and capability polls."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from queue import Empty, Queue
from typing import Callable, Optional

from pomodoro import PomodoroTimer
from shortcuts import KeyEvent, ShortcutRegistry
from shortcuts.constants import SCOPE_FOCUSED
from shortcuts.registry import DEFAULT_CAPABILITY_POLL_SECONDS
from tasks import TaskStore

from .clock import MonotonicClock
from .quick_add import QuickAddController

_MAX_WAIT_SECONDS = 0.25
_STOP = object()


@dataclass(frozen=True)
class RuntimeHooks:
    """Injectable lifecycle hooks used by runtime startup and shutdown flow."""
    setup_signal_handlers: Callable[["RuntimeEngine"], None]
    on_shutdown: tuple[Callable[[], None], ...] = ()


@dataclass(frozen=True)
class RuntimeBootstrap:
    """Components wired by the composition root, each constructed exactly once."""
    logger: logging.Logger
    clock: MonotonicClock
    timer: PomodoroTimer
    task_store: TaskStore
    registry: ShortcutRegistry
    quick_add: QuickAddController
    hooks: RuntimeHooks
    capability_poll_seconds: float = DEFAULT_CAPABILITY_POLL_SECONDS
    monotonic_fn: Callable[[], float] = field(default=time.monotonic)


class RuntimeEngine:
    """Single control thread serializing ticks, key events, and capability polls.

    Key monitors post events from their own threads through `post_key_event`;
    every component call happens on the thread running `run()`.
    """

    def __init__(self, bootstrap: RuntimeBootstrap):
        self._bootstrap = bootstrap
        self._logger = bootstrap.logger
        self._events: Queue[object] = Queue()
        self._stop_requested = False
        self._next_capability_poll: Optional[float] = None

    @property
    def stop_requested(self) -> bool:
        return self._stop_requested

    def post_key_event(self, event: KeyEvent, scope: str) -> None:
        self._events.put((event, scope))

    def request_stop(self) -> None:
        self._stop_requested = True
        self._events.put(_STOP)

    def run(self) -> int:
        registry = self._bootstrap.registry
        try:
            self._bootstrap.hooks.setup_signal_handlers(self)
            registry.start_listening(self.post_key_event)
            self._schedule_capability_poll()
            snapshot = self._bootstrap.timer.snapshot()
            self._logger.info(
                "Ready! %s %s (completed: %d)",
                snapshot.phase_name,
                snapshot.formatted_remaining,
                snapshot.completed_count,
            )

            while not self._stop_requested:
                self.run_once()
            self._logger.info("Shutdown requested.")
            return 0

        except KeyboardInterrupt:
            self._logger.info("Shutdown requested by keyboard interrupt.")
            return 0
        except Exception as error:
            self._logger.error("Unexpected error: %s", error, exc_info=True)
            return 1
        finally:
            self._shutdown()

    def run_once(self) -> None:
        """One loop iteration: due ticks, due capability poll, then at most one event."""
        self._bootstrap.clock.poll()
        self._poll_capability_if_due()

        try:
            item = self._events.get(timeout=self._wait_timeout())
        except Empty:
            return
        if item is _STOP:
            return

        event, scope = item  # type: ignore[misc]
        self.handle_key_event(event, scope)

    def handle_key_event(self, event: KeyEvent, scope: str) -> bool:
        if self._bootstrap.registry.handle_key_event(event, scope):
            return True
        if scope != SCOPE_FOCUSED:
            return False
        return self._bootstrap.quick_add.handle_key_event(event)

    def _wait_timeout(self) -> float:
        timeout = _MAX_WAIT_SECONDS
        until_tick = self._bootstrap.clock.seconds_until_next_tick()
        if until_tick is not None:
            timeout = min(timeout, until_tick)
        return timeout

    def _schedule_capability_poll(self) -> None:
        self._next_capability_poll = (
            self._bootstrap.monotonic_fn() + self._bootstrap.capability_poll_seconds
        )

    def _poll_capability_if_due(self) -> None:
        due = self._next_capability_poll
        if due is None or self._bootstrap.monotonic_fn() < due:
            return
        self._bootstrap.registry.poll_capability()
        self._schedule_capability_poll()

    def _shutdown(self) -> None:
        self._logger.info("Stopping key monitors...")
        try:
            self._bootstrap.registry.stop_listening()
        except Exception as error:
            self._logger.error("Error stopping key monitors: %s", error, exc_info=True)

        for callback in self._bootstrap.hooks.on_shutdown:
            try:
                callback()
            except Exception as error:
                self._logger.error("Error during shutdown: %s", error, exc_info=True)
