from .service import (
    PomodoroTimer,
    TimerAction,
    TimerActionResult,
    TimerEvent,
    TimerPhase,
    TimerSnapshot,
    TimerState,
)
from .settings import PomodoroSettings, SettingsChange, SettingsStore

__all__ = [
    "PomodoroSettings",
    "PomodoroTimer",
    "SettingsChange",
    "SettingsStore",
    "TimerAction",
    "TimerActionResult",
    "TimerEvent",
    "TimerPhase",
    "TimerSnapshot",
    "TimerState",
]
