"""Shortcut bindings, capture mode, dispatch, and listening-scope management."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional, Protocol

from contracts import CapabilityProbe, KeyMonitor, QuickAddSurface
from shared import ListenerList
from storage import KeyValueStore, StorageError

from .binding import DEFAULT_BINDINGS, BindingFormatError, KeyEvent, ShortcutBinding
from .constants import (
    ACTION_QUICK_ADD,
    ACTION_RESET,
    ACTION_SKIP,
    ACTION_START_PAUSE,
    ACTIONS,
    DISPATCH_PRIORITY,
    LEGACY_ACTIONS,
    SCOPE_FOCUSED,
    SCOPE_GLOBAL,
    legacy_storage_key,
    storage_key,
)

EVENT_BINDING_CHANGED = "binding_changed"
EVENT_CAPTURE_STARTED = "capture_started"
EVENT_CAPTURE_ENDED = "capture_ended"
EVENT_DISPATCHED = "dispatched"
EVENT_CAPABILITY_CHANGED = "capability_changed"

DEFAULT_CAPABILITY_POLL_SECONDS = 2.0

KeyEventSink = Callable[[KeyEvent, str], Any]


class TimerControls(Protocol):
    """Timer operations reachable from shortcuts."""
    def toggle(self) -> Any:
        ...

    def reset(self) -> Any:
        ...

    def skip(self) -> Any:
        ...


@dataclass(frozen=True)
class ShortcutEvent:
    """Registry state-change notification."""
    kind: str
    action: Optional[str] = None
    binding: Optional[ShortcutBinding] = None


class ShortcutRegistry:
    """Maps key events to the four named actions.

    The registry holds non-owning references to the timer and the quick-add
    surface. While a binding is being captured every dispatch is suppressed.
    The focused scope listens whenever listening is active; the global scope
    only while the capability probe reports the OS grant.
    """

    def __init__(
        self,
        store: KeyValueStore,
        *,
        timer: TimerControls,
        quick_add: Optional[QuickAddSurface] = None,
        focused_monitor: Optional[KeyMonitor] = None,
        global_monitor: Optional[KeyMonitor] = None,
        capability_probe: Optional[CapabilityProbe] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._store = store
        self._timer = timer
        self._quick_add = quick_add
        self._focused_monitor = focused_monitor
        self._global_monitor = global_monitor
        self._probe = capability_probe
        self._logger = logger or logging.getLogger("shortcuts")
        self.events: ListenerList[ShortcutEvent] = ListenerList(
            "shortcuts", logger=self._logger
        )

        self._bindings: dict[str, ShortcutBinding] = {
            action: self._load_binding(action) for action in ACTIONS
        }
        self._capturing: Optional[str] = None
        self._listening = False
        self._global_installed = False
        self._sink: KeyEventSink = self.handle_key_event
        self._capability_granted = self._probe.is_granted() if self._probe else False
        self._needs_elevated_capability = not self._capability_granted

    @property
    def bindings(self) -> dict[str, ShortcutBinding]:
        return dict(self._bindings)

    def binding(self, action: str) -> ShortcutBinding:
        return self._bindings[action]

    def set_binding(self, action: str, binding: ShortcutBinding) -> bool:
        if action not in self._bindings:
            self._logger.debug("Ignoring binding for unknown action: %s", action)
            return False
        if self._bindings[action] == binding:
            return False

        self._bindings[action] = binding
        self._persist(action, binding)
        self._logger.info("Shortcut %s bound to %s", action, binding.display_string)
        self.events.emit(
            ShortcutEvent(kind=EVENT_BINDING_CHANGED, action=action, binding=binding)
        )
        return True

    def reset_to_defaults(self) -> None:
        self.cancel_capture()
        for action in ACTIONS:
            self.set_binding(action, DEFAULT_BINDINGS[action])

    @property
    def is_capturing(self) -> bool:
        return self._capturing is not None

    @property
    def capturing_action(self) -> Optional[str]:
        return self._capturing

    def begin_capture(self, action: str) -> bool:
        if action not in self._bindings:
            return False
        self._capturing = action
        self._logger.debug("Capturing new shortcut for %s", action)
        self.events.emit(ShortcutEvent(kind=EVENT_CAPTURE_STARTED, action=action))
        return True

    def cancel_capture(self) -> None:
        if self._capturing is None:
            return
        action = self._capturing
        self._capturing = None
        self.events.emit(ShortcutEvent(kind=EVENT_CAPTURE_ENDED, action=action))

    def handle_key_event(self, event: KeyEvent, scope: str = SCOPE_FOCUSED) -> bool:
        """Capture or dispatch one event; returns True when the event was consumed."""
        if self._capturing is not None:
            if scope != SCOPE_FOCUSED:
                return False
            return self._commit_capture(event)

        if scope == SCOPE_GLOBAL and not self.could_be_shortcut(event):
            return False

        action = self.resolve(event)
        if action is None:
            return False

        self.dispatch(action)
        return True

    def resolve(self, event: KeyEvent) -> Optional[str]:
        if self._capturing is not None or not event.key:
            return None
        for action in DISPATCH_PRIORITY:
            if self._bindings[action].matches(event):
                return action
        return None

    def could_be_shortcut(self, event: KeyEvent) -> bool:
        """Cheap pre-filter applied to system-wide events."""
        if self._capturing is not None:
            return False
        for binding in self._bindings.values():
            if binding.key_code is None or binding.key_code == event.key_code:
                return True
        return False

    def dispatch(self, action: str) -> None:
        self._logger.debug("Dispatching shortcut %s", action)
        if action == ACTION_RESET:
            self._timer.reset()
        elif action == ACTION_SKIP:
            self._timer.skip()
        elif action == ACTION_START_PAUSE:
            self._timer.toggle()
        elif action == ACTION_QUICK_ADD:
            if self._quick_add is None:
                self._logger.debug("No quick-add surface attached")
            else:
                self._quick_add.toggle()
        else:
            self._logger.debug("Unknown shortcut action: %s", action)
            return
        self.events.emit(ShortcutEvent(kind=EVENT_DISPATCHED, action=action))

    @property
    def needs_elevated_capability(self) -> bool:
        return self._needs_elevated_capability

    @property
    def is_global_listening(self) -> bool:
        return self._global_installed

    def start_listening(self, sink: Optional[KeyEventSink] = None) -> None:
        """Attach the monitors; `sink` receives `(event, scope)` from monitor callbacks."""
        if self._listening:
            return
        self._sink = sink or self.handle_key_event
        self._listening = True

        if self._focused_monitor is not None:
            self._focused_monitor.start(self._on_focused_event)

        if self._capability_granted:
            self._install_global_monitor()
        else:
            self._needs_elevated_capability = True
            self._logger.warning(
                "System-wide shortcut permission not granted; listening in focused scope only."
            )

    def stop_listening(self) -> None:
        if not self._listening:
            return
        self._listening = False
        self._remove_global_monitor()
        if self._focused_monitor is not None:
            self._focused_monitor.stop()

    def poll_capability(self) -> bool:
        """Re-check the OS grant; returns True when its state changed."""
        if self._probe is None:
            return False

        granted = self._probe.is_granted()
        if granted == self._capability_granted:
            return False
        self._capability_granted = granted

        self._remove_global_monitor()
        if granted:
            self._logger.info("System-wide shortcut permission granted")
            self._needs_elevated_capability = False
            if self._listening:
                self._install_global_monitor()
        else:
            self._logger.warning("System-wide shortcut permission revoked")
            self._needs_elevated_capability = True

        self.events.emit(ShortcutEvent(kind=EVENT_CAPABILITY_CHANGED))
        return True

    def request_capability(self) -> None:
        if self._probe is None:
            return
        try:
            self._probe.request_grant()
        except Exception as error:
            self._logger.warning("Capability request failed: %s", error)

    def _on_focused_event(self, event: KeyEvent) -> None:
        self._sink(event, SCOPE_FOCUSED)

    def _on_global_event(self, event: KeyEvent) -> None:
        self._sink(event, SCOPE_GLOBAL)

    def _install_global_monitor(self) -> None:
        self._remove_global_monitor()
        if self._global_monitor is None:
            self._logger.debug("No system-wide key monitor configured")
            return

        try:
            self._global_monitor.start(self._on_global_event)
        except Exception as error:
            self._needs_elevated_capability = True
            self._logger.warning("Failed to start system-wide key monitor: %s", error)
            return

        self._global_installed = True
        self._needs_elevated_capability = False
        self._logger.info("System-wide shortcuts enabled")

    def _remove_global_monitor(self) -> None:
        if not self._global_installed or self._global_monitor is None:
            return
        self._global_monitor.stop()
        self._global_installed = False
        self._logger.debug("System-wide key monitor removed")

    def _commit_capture(self, event: KeyEvent) -> bool:
        # resolve never dispatches an event without a character
        if not event.key:
            return False

        action = self._capturing
        if action is None:
            return False
        self._capturing = None
        self.set_binding(action, ShortcutBinding.from_event(event))
        self.events.emit(ShortcutEvent(kind=EVENT_CAPTURE_ENDED, action=action))
        return True

    def _load_binding(self, action: str) -> ShortcutBinding:
        fallback = DEFAULT_BINDINGS[action]

        try:
            raw = self._store.get(storage_key(action))
        except StorageError as error:
            self._logger.warning("Failed to read shortcut %s: %s", action, error)
            return fallback

        if isinstance(raw, str):
            try:
                raw = json.loads(raw)
            except ValueError:
                self._logger.warning("Ignoring undecodable shortcut for %s", action)
                raw = None
        if isinstance(raw, dict):
            try:
                return ShortcutBinding.from_dict(raw)
            except BindingFormatError as error:
                self._logger.warning("Ignoring malformed shortcut for %s: %s", action, error)

        if action in LEGACY_ACTIONS:
            try:
                legacy = self._store.get(legacy_storage_key(action))
            except StorageError as error:
                self._logger.warning("Failed to read legacy shortcut %s: %s", action, error)
                legacy = None
            if isinstance(legacy, str) and legacy:
                self._logger.info("Migrating legacy shortcut for %s: %r", action, legacy)
                return fallback.with_key(legacy.lower())

        return fallback

    def _persist(self, action: str, binding: ShortcutBinding) -> None:
        try:
            self._store.set(storage_key(action), binding.to_dict())
        except StorageError as error:
            self._logger.warning("Failed to persist shortcut %s: %s", action, error)
