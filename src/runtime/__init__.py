"""Runtime engine exports."""

from .capability import StaticCapabilityProbe
from .clock import MonotonicClock
from .keyboard import TerminalKeyMonitor, decode_terminal_input
from .loop import RuntimeBootstrap, RuntimeEngine, RuntimeHooks
from .notifier import DesktopNotifier, LoggingNotifier, build_notifier
from .quick_add import QuickAddController, QuickAddState

__all__ = [
    "DesktopNotifier",
    "LoggingNotifier",
    "MonotonicClock",
    "QuickAddController",
    "QuickAddState",
    "RuntimeBootstrap",
    "RuntimeEngine",
    "RuntimeHooks",
    "StaticCapabilityProbe",
    "TerminalKeyMonitor",
    "build_notifier",
    "decode_terminal_input",
]
