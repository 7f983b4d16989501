"""Protocols for the platform collaborators the core components call into."""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Protocol

if TYPE_CHECKING:
    from shortcuts.binding import KeyEvent


class Notifier(Protocol):
    """Displays a platform notification; fire-and-forget."""
    def notify(self, title: str, body: str) -> None:
        ...


class AudioCue(Protocol):
    """Plays a short named sound; failures are the implementation's concern."""
    def play(self, name: str) -> None:
        ...


class Clock(Protocol):
    """Repeating one-second tick source with a single registered callback."""
    def on_tick(self, callback: Callable[[], None]) -> None:
        ...

    def start(self) -> None:
        ...

    def stop(self) -> None:
        ...

    @property
    def is_active(self) -> bool:
        ...


class KeyMonitor(Protocol):
    """Key-down event source for one listening scope."""
    def start(self, callback: Callable[["KeyEvent"], None]) -> None:
        ...

    def stop(self) -> None:
        ...


class CapabilityProbe(Protocol):
    """Observes (and can prompt for) the OS grant for system-wide key monitoring."""
    def is_granted(self) -> bool:
        ...

    def request_grant(self) -> None:
        ...


class QuickAddSurface(Protocol):
    """Surface toggled by the quick-add shortcut."""
    def toggle(self) -> None:
        ...
