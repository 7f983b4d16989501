"""Single-threaded pomodoro phase engine driven by one-second clock ticks."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Literal, Optional

from contracts import AudioCue, Clock, Notifier
from shared import ListenerList
from storage import KeyValueStore, StorageError

from .constants import (
    ACTION_PAUSE,
    ACTION_RESET,
    ACTION_SKIP,
    ACTION_START,
    ACTION_TOGGLE,
    CUE_COMPLETE,
    CUE_PAUSE,
    CUE_RESET,
    CUE_SKIP,
    CUE_START,
    EVENT_COUNT_RESET,
    EVENT_PAUSED,
    EVENT_PHASE_COMPLETED,
    EVENT_RESET,
    EVENT_SETTINGS_APPLIED,
    EVENT_STARTED,
    EVENT_TICK,
    KEY_COMPLETED_POMODOROS,
    NOTIFY_BREAK_DONE_BODY,
    NOTIFY_BREAK_DONE_TITLE,
    NOTIFY_WORK_DONE_BODY,
    NOTIFY_WORK_DONE_TITLE,
    PHASE_DISPLAY_NAMES,
    PHASE_LONG_BREAK,
    PHASE_SHORT_BREAK,
    PHASE_WORK,
    REASON_ALREADY_RUNNING,
    REASON_COMPLETION_IN_PROGRESS,
    REASON_NOT_RUNNING,
    REASON_PAUSED,
    REASON_RESET,
    REASON_RESUMED,
    REASON_SKIPPED,
    REASON_STARTED,
    REASON_UNSUPPORTED_ACTION,
    STATE_IDLE,
    STATE_PAUSED,
    STATE_RUNNING,
)
from .settings import SettingsChange, SettingsStore

TimerPhase = Literal["work", "short_break", "long_break"]
TimerState = Literal["idle", "running", "paused"]
TimerAction = Literal["start", "pause", "reset", "skip", "toggle"]


@dataclass(frozen=True)
class TimerSnapshot:
    """Immutable engine snapshot exposed to listeners and presentation code."""
    phase: TimerPhase
    state: TimerState
    remaining_seconds: int
    duration_seconds: int
    completed_count: int

    @property
    def phase_name(self) -> str:
        return PHASE_DISPLAY_NAMES[self.phase]

    @property
    def is_running(self) -> bool:
        return self.state == STATE_RUNNING

    @property
    def formatted_remaining(self) -> str:
        minutes, seconds = divmod(max(0, self.remaining_seconds), 60)
        return f"{minutes:02d}:{seconds:02d}"

    @property
    def progress(self) -> float:
        if self.duration_seconds <= 0:
            return 0.0
        return 1.0 - (self.remaining_seconds / self.duration_seconds)


@dataclass(frozen=True)
class TimerActionResult:
    """Result envelope returned after applying a timer action."""
    action: TimerAction
    accepted: bool
    reason: str
    snapshot: TimerSnapshot


@dataclass(frozen=True)
class TimerEvent:
    """State-change notification; `completed_phase` is set for phase completions."""
    kind: str
    snapshot: TimerSnapshot
    completed_phase: Optional[TimerPhase] = None


class PomodoroTimer:
    """Work/break phase state machine.

    All operations are total: calls that do not apply to the current state are
    reported as rejected results and leave the engine untouched. The engine is
    not thread-safe; ticks and commands must arrive on one control thread.
    """

    def __init__(
        self,
        *,
        settings: SettingsStore,
        store: KeyValueStore,
        clock: Clock,
        notifier: Optional[Notifier] = None,
        audio: Optional[AudioCue] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._settings = settings
        self._store = store
        self._clock = clock
        self._notifier = notifier
        self._audio = audio
        self._logger = logger or logging.getLogger("pomodoro")
        self.events: ListenerList[TimerEvent] = ListenerList("timer", logger=self._logger)

        self._phase: TimerPhase = PHASE_WORK
        self._state: TimerState = STATE_IDLE
        self._duration_seconds = settings.duration_seconds(PHASE_WORK)
        self._remaining_seconds = self._duration_seconds
        self._completed_count = self._load_completed_count()
        self._completing = False

        self._clock.on_tick(self.on_tick)
        self._settings.changes.add(self._on_settings_changed)

    @property
    def phase(self) -> TimerPhase:
        return self._phase

    @property
    def state(self) -> TimerState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state == STATE_RUNNING

    @property
    def completed_count(self) -> int:
        return self._completed_count

    @property
    def remaining_seconds(self) -> int:
        return self._remaining_seconds

    def snapshot(self) -> TimerSnapshot:
        return TimerSnapshot(
            phase=self._phase,
            state=self._state,
            remaining_seconds=self._remaining_seconds,
            duration_seconds=self._duration_seconds,
            completed_count=self._completed_count,
        )

    def apply(self, action: str) -> TimerActionResult:
        handlers: dict[str, Callable[[], TimerActionResult]] = {
            ACTION_START: self.start,
            ACTION_PAUSE: self.pause,
            ACTION_RESET: self.reset,
            ACTION_SKIP: self.skip,
            ACTION_TOGGLE: self.toggle,
        }
        handler = handlers.get(action)
        if handler is None:
            return self._result(action, False, REASON_UNSUPPORTED_ACTION)  # type: ignore[arg-type]
        return handler()

    def start(self) -> TimerActionResult:
        if self._state == STATE_RUNNING:
            return self._result(ACTION_START, False, REASON_ALREADY_RUNNING)

        reason = REASON_RESUMED if self._state == STATE_PAUSED else REASON_STARTED
        self._play(CUE_START)
        self._state = STATE_RUNNING
        self._clock.start()
        self._logger.info(
            "Timer %s: phase=%s remaining=%ss",
            reason,
            self._phase,
            self._remaining_seconds,
        )
        self.events.emit(TimerEvent(kind=EVENT_STARTED, snapshot=self.snapshot()))
        return self._result(ACTION_START, True, reason)

    def pause(self) -> TimerActionResult:
        if self._state != STATE_RUNNING:
            return self._result(ACTION_PAUSE, False, REASON_NOT_RUNNING)

        self._play(CUE_PAUSE)
        self._clock.stop()
        self._state = STATE_PAUSED
        self._logger.info(
            "Timer paused: phase=%s remaining=%ss",
            self._phase,
            self._remaining_seconds,
        )
        self.events.emit(TimerEvent(kind=EVENT_PAUSED, snapshot=self.snapshot()))
        return self._result(ACTION_PAUSE, True, REASON_PAUSED)

    def toggle(self) -> TimerActionResult:
        if self._state == STATE_RUNNING:
            return self.pause()
        return self.start()

    def reset(self) -> TimerActionResult:
        self._play(CUE_RESET)
        self._clock.stop()
        self._state = STATE_IDLE
        self._duration_seconds = self._settings.duration_seconds(self._phase)
        self._remaining_seconds = self._duration_seconds
        self._logger.info("Timer reset: phase=%s", self._phase)
        self.events.emit(TimerEvent(kind=EVENT_RESET, snapshot=self.snapshot()))
        return self._result(ACTION_RESET, True, REASON_RESET)

    def skip(self) -> TimerActionResult:
        if self._completing:
            # Issued from inside a completion listener; completing again would recurse.
            self._logger.debug("Ignoring skip during phase completion")
            return self._result(ACTION_SKIP, False, REASON_COMPLETION_IN_PROGRESS)

        self._play(CUE_SKIP)
        self._complete_phase()
        return self._result(ACTION_SKIP, True, REASON_SKIPPED)

    def on_tick(self) -> None:
        if self._state != STATE_RUNNING:
            return

        if self._remaining_seconds > 0:
            self._remaining_seconds -= 1
            self.events.emit(TimerEvent(kind=EVENT_TICK, snapshot=self.snapshot()))
            return

        self._complete_phase()

    def update_settings(
        self,
        work: int,
        short_break: int,
        long_break: int,
        interval: int,
    ) -> bool:
        """Change durations; an idle timer picks them up immediately."""
        return self._settings.update(
            work_minutes=work,
            short_break_minutes=short_break,
            long_break_minutes=long_break,
            long_break_interval=interval,
        )

    def reset_completed_count(self) -> None:
        self._completed_count = 0
        self._persist_completed_count()
        self._logger.info("Completed pomodoro count reset")
        self.events.emit(TimerEvent(kind=EVENT_COUNT_RESET, snapshot=self.snapshot()))

    def _complete_phase(self) -> None:
        self._completing = True
        try:
            self._clock.stop()
            self._state = STATE_IDLE
            finished = self._phase

            self._play(CUE_COMPLETE)
            self._notify_completion(finished)

            if finished == PHASE_WORK:
                self._completed_count += 1
                self._persist_completed_count()
                interval = self._settings.long_break_interval
                if self._completed_count % interval == 0:
                    next_phase: TimerPhase = PHASE_LONG_BREAK
                else:
                    next_phase = PHASE_SHORT_BREAK
            else:
                next_phase = PHASE_WORK

            self._phase = next_phase
            self._duration_seconds = self._settings.duration_seconds(next_phase)
            self._remaining_seconds = self._duration_seconds
            self._logger.info(
                "Phase completed: finished=%s next=%s completed=%d",
                finished,
                next_phase,
                self._completed_count,
            )
            self.events.emit(
                TimerEvent(
                    kind=EVENT_PHASE_COMPLETED,
                    snapshot=self.snapshot(),
                    completed_phase=finished,
                )
            )

            if next_phase == PHASE_WORK:
                auto_start = self._settings.auto_start_work
            else:
                auto_start = self._settings.auto_start_breaks
            if auto_start:
                self.start()
        finally:
            self._completing = False

    def _on_settings_changed(self, change: SettingsChange) -> None:
        # Running or paused phases keep the duration they started with.
        if self._state != STATE_IDLE:
            return

        duration = change.settings.duration_seconds(self._phase)
        if duration == self._duration_seconds:
            return

        self._duration_seconds = duration
        self._remaining_seconds = duration
        self.events.emit(TimerEvent(kind=EVENT_SETTINGS_APPLIED, snapshot=self.snapshot()))

    def _notify_completion(self, finished: TimerPhase) -> None:
        if self._notifier is None:
            return

        if finished == PHASE_WORK:
            title, body = NOTIFY_WORK_DONE_TITLE, NOTIFY_WORK_DONE_BODY
        else:
            title, body = NOTIFY_BREAK_DONE_TITLE, NOTIFY_BREAK_DONE_BODY
        try:
            self._notifier.notify(title, body)
        except Exception as error:
            self._logger.warning("Completion notification failed: %s", error)

    def _play(self, cue: str) -> None:
        if self._audio is None or not self._settings.sound_enabled:
            return
        try:
            self._audio.play(cue)
        except Exception as error:
            self._logger.debug("Sound cue %s failed: %s", cue, error)

    def _load_completed_count(self) -> int:
        try:
            raw = self._store.get(KEY_COMPLETED_POMODOROS, 0)
        except StorageError as error:
            self._logger.warning("Failed to read completed count: %s", error)
            return 0
        if isinstance(raw, bool) or not isinstance(raw, int) or raw < 0:
            return 0
        return raw

    def _persist_completed_count(self) -> None:
        try:
            self._store.set(KEY_COMPLETED_POMODOROS, self._completed_count)
        except StorageError as error:
            self._logger.warning("Failed to persist completed count: %s", error)

    def _result(self, action: TimerAction, accepted: bool, reason: str) -> TimerActionResult:
        return TimerActionResult(
            action=action,
            accepted=accepted,
            reason=reason,
            snapshot=self.snapshot(),
        )
