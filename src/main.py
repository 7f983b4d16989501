import logging
import signal
import sys
from typing import Any, Optional

from app_config import AppConfig, AppConfigurationError, load_app_config, log_level
from contracts import AudioCue, KeyMonitor, Notifier
from pomodoro import SettingsStore, PomodoroTimer, TimerEvent, TimerSnapshot
from pomodoro.constants import EVENT_PAUSED, EVENT_PHASE_COMPLETED, EVENT_RESET, EVENT_STARTED
from runtime import (
    MonotonicClock,
    QuickAddController,
    QuickAddState,
    RuntimeBootstrap,
    RuntimeEngine,
    RuntimeHooks,
    StaticCapabilityProbe,
    TerminalKeyMonitor,
    build_notifier,
)
from shortcuts import ShortcutEvent, ShortcutRegistry
from shortcuts.registry import EVENT_CAPABILITY_CHANGED
from storage import JsonFileStore, KeyValueStore, MemoryStore, StorageError
from tasks import TaskStore


def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """Configure logging for the application."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    return logging.getLogger("pomodoro_menubar")


def setup_signal_handlers(engine: RuntimeEngine) -> None:
    """Set up graceful shutdown on SIGTERM and SIGINT."""

    def signal_handler(signum: int, frame) -> None:
        signal_name = signal.Signals(signum).name
        logging.getLogger("pomodoro_menubar").info("%s received, stopping...", signal_name)
        engine.request_stop()

    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)


def _status_message(snapshot: TimerSnapshot) -> str:
    if snapshot.state == "running":
        return f"{snapshot.phase_name} running ({snapshot.formatted_remaining} remaining)"
    if snapshot.state == "paused":
        return f"{snapshot.phase_name} paused ({snapshot.formatted_remaining} remaining)"
    return f"Ready: {snapshot.phase_name} {snapshot.formatted_remaining}"


def open_store(path: str, logger: logging.Logger) -> KeyValueStore:
    """Open the JSON store, keeping data in memory when the file is unreadable."""
    store = JsonFileStore(path, logger=logging.getLogger("storage"))
    try:
        store.get("todos")
    except StorageError as error:
        logger.warning("Storage error, changes will not be saved this session: %s", error)
        return MemoryStore()

    logger.info("Storing data in %s", store.path)
    return store


def _build_audio(app_config: AppConfig, logger: logging.Logger) -> Optional[AudioCue]:
    if not app_config.audio.enabled:
        return None
    try:
        from runtime.audio import SoundDeviceAudioCue
    except (ImportError, OSError) as error:
        logger.warning("Audio cues disabled, sounddevice unavailable: %s", error)
        return None

    logger.info("Audio cues enabled")
    return SoundDeviceAudioCue(
        output_device_index=app_config.audio.output_device,
        volume=app_config.audio.volume,
        logger=logging.getLogger("runtime.audio"),
    )


def _build_notifier(app_config: AppConfig) -> Optional[Notifier]:
    if not app_config.notifications.enabled:
        return None
    return build_notifier(
        app_config.notifications.backend,
        logger=logging.getLogger("runtime.notifier"),
    )


def main() -> int:
    """Run the pomodoro timer, task list and keyboard shortcuts."""
    logger = setup_logging(level=logging.INFO)

    try:
        app_config = load_app_config()
    except AppConfigurationError as error:
        logger.error("App configuration error: %s", error)
        return 1

    logging.getLogger().setLevel(log_level(app_config.logging))
    if app_config.source_file:
        logger.info("Loaded runtime config: %s", app_config.source_file)
    else:
        logger.info("No config file found, using defaults")

    store = open_store(app_config.storage.path, logger)

    audio = _build_audio(app_config, logger)
    notifier = _build_notifier(app_config)

    clock = MonotonicClock(logger=logging.getLogger("runtime.clock"))
    settings = SettingsStore(store, logger=logging.getLogger("pomodoro.settings"))
    timer = PomodoroTimer(
        settings=settings,
        store=store,
        clock=clock,
        notifier=notifier,
        audio=audio,
        logger=logging.getLogger("pomodoro"),
    )
    task_store = TaskStore(store, logger=logging.getLogger("tasks"))
    quick_add = QuickAddController(task_store, logger=logging.getLogger("runtime.quick_add"))

    focused_monitor: Optional[KeyMonitor] = None
    if app_config.shortcuts.terminal_keys:
        focused_monitor = TerminalKeyMonitor(
            meta_modifiers=app_config.shortcuts.terminal_meta_modifiers,
            logger=logging.getLogger("runtime.keyboard"),
        )

    registry = ShortcutRegistry(
        store,
        timer=timer,
        quick_add=quick_add,
        focused_monitor=focused_monitor,
        global_monitor=None,
        capability_probe=StaticCapabilityProbe(granted=False),
        logger=logging.getLogger("shortcuts"),
    )

    def on_timer_event(event: TimerEvent) -> None:
        if event.kind in (EVENT_STARTED, EVENT_PAUSED, EVENT_RESET, EVENT_PHASE_COMPLETED):
            logger.info(_status_message(event.snapshot))

    def on_quick_add(state: QuickAddState) -> None:
        if state.visible:
            logger.info("Quick add: %s_", state.draft)
        elif state.last_added is None:
            logger.info("Quick add closed")

    def on_shortcut_event(event: ShortcutEvent) -> None:
        if event.kind == EVENT_CAPABILITY_CHANGED and registry.needs_elevated_capability:
            registry.request_capability()

    timer.events.add(on_timer_event)
    quick_add.changes.add(on_quick_add)
    registry.events.add(on_shortcut_event)

    for action, binding in registry.bindings.items():
        logger.info("Shortcut %s: %s", action, binding.display_string)
    if registry.needs_elevated_capability:
        registry.request_capability()

    shutdown_callbacks: list[Any] = []
    close_audio = getattr(audio, "close", None)
    if close_audio is not None:
        shutdown_callbacks.append(close_audio)
    close_notifier = getattr(notifier, "close", None)
    if close_notifier is not None:
        shutdown_callbacks.append(close_notifier)

    engine = RuntimeEngine(
        RuntimeBootstrap(
            logger=logger,
            clock=clock,
            timer=timer,
            task_store=task_store,
            registry=registry,
            quick_add=quick_add,
            hooks=RuntimeHooks(
                setup_signal_handlers=setup_signal_handlers,
                on_shutdown=tuple(shutdown_callbacks),
            ),
            capability_poll_seconds=app_config.shortcuts.capability_poll_seconds,
        )
    )
    return engine.run()


if __name__ == "__main__":
    sys.exit(main())
