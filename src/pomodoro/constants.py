"""Phase, state, action, reason, and persistence constants for the timer engine."""

from __future__ import annotations

PHASE_WORK = "work"
PHASE_SHORT_BREAK = "short_break"
PHASE_LONG_BREAK = "long_break"

PHASE_DISPLAY_NAMES: dict[str, str] = {
    PHASE_WORK: "Focus Time",
    PHASE_SHORT_BREAK: "Short Break",
    PHASE_LONG_BREAK: "Long Break",
}

STATE_IDLE = "idle"
STATE_RUNNING = "running"
STATE_PAUSED = "paused"

ACTION_START = "start"
ACTION_PAUSE = "pause"
ACTION_RESET = "reset"
ACTION_SKIP = "skip"
ACTION_TOGGLE = "toggle"

EVENT_STARTED = "started"
EVENT_PAUSED = "paused"
EVENT_RESET = "reset"
EVENT_TICK = "tick"
EVENT_PHASE_COMPLETED = "phase_completed"
EVENT_SETTINGS_APPLIED = "settings_applied"
EVENT_COUNT_RESET = "count_reset"

REASON_STARTED = "started"
REASON_RESUMED = "resumed"
REASON_PAUSED = "paused"
REASON_RESET = "reset"
REASON_SKIPPED = "skipped"
REASON_ALREADY_RUNNING = "already_running"
REASON_NOT_RUNNING = "not_running"
REASON_COMPLETION_IN_PROGRESS = "completion_in_progress"
REASON_UNSUPPORTED_ACTION = "unsupported_action"

# Sound cue names handed to the audio collaborator.
CUE_START = "Glass"
CUE_PAUSE = "Pop"
CUE_RESET = "Submarine"
CUE_SKIP = "Ping"
CUE_COMPLETE = "Hero"

NOTIFY_WORK_DONE_TITLE = "Pomodoro Complete!"
NOTIFY_WORK_DONE_BODY = "Great work! Time for a break."
NOTIFY_BREAK_DONE_TITLE = "Break is Over"
NOTIFY_BREAK_DONE_BODY = "Ready to focus again?"

DEFAULT_WORK_MINUTES = 25
DEFAULT_SHORT_BREAK_MINUTES = 5
DEFAULT_LONG_BREAK_MINUTES = 15
DEFAULT_LONG_BREAK_INTERVAL = 4
MIN_LONG_BREAK_INTERVAL = 2

KEY_COMPLETED_POMODOROS = "completedPomodoros"
KEY_WORK_DURATION = "workDuration"
KEY_SHORT_BREAK_DURATION = "shortBreakDuration"
KEY_LONG_BREAK_DURATION = "longBreakDuration"
KEY_LONG_BREAK_INTERVAL = "longBreakInterval"
KEY_AUTO_START_BREAKS = "autoStartBreaks"
KEY_AUTO_START_WORK = "autoStartPomodoros"
KEY_SOUND_ENABLED = "soundEnabled"
