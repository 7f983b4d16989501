import json
import unittest

from shortcuts import DEFAULT_BINDINGS, KeyEvent, ShortcutBinding, ShortcutRegistry
from storage import MemoryStore, StorageError

CMD_OPT = frozenset({"command", "option"})


class _TimerStub:
    def __init__(self):
        self.calls: list[str] = []

    def toggle(self) -> None:
        self.calls.append("toggle")

    def reset(self) -> None:
        self.calls.append("reset")

    def skip(self) -> None:
        self.calls.append("skip")


class _QuickAddStub:
    def __init__(self):
        self.toggles = 0

    def toggle(self) -> None:
        self.toggles += 1


class _MonitorStub:
    def __init__(self, fail: bool = False):
        self.callback = None
        self.starts = 0
        self.stops = 0
        self._fail = fail

    def start(self, callback) -> None:
        if self._fail:
            raise PermissionError("not trusted")
        self.callback = callback
        self.starts += 1

    def stop(self) -> None:
        self.callback = None
        self.stops += 1

    def emit(self, event: KeyEvent) -> None:
        self.callback(event)


class _ProbeStub:
    def __init__(self, granted: bool):
        self.granted = granted
        self.requests = 0

    def is_granted(self) -> bool:
        return self.granted

    def request_grant(self) -> None:
        self.requests += 1


class _FailingWriteStore(MemoryStore):
    def set(self, key, value) -> None:
        raise StorageError("read-only")


def _event(key: str, key_code: int, modifiers=CMD_OPT) -> KeyEvent:
    return KeyEvent(key=key, key_code=key_code, modifiers=frozenset(modifiers))


def _build_registry(store=None, granted: bool = False, **kwargs):
    timer = _TimerStub()
    quick_add = _QuickAddStub()
    focused = _MonitorStub()
    global_monitor = kwargs.pop("global_monitor", _MonitorStub())
    probe = _ProbeStub(granted)
    registry = ShortcutRegistry(
        store if store is not None else MemoryStore(),
        timer=timer,
        quick_add=quick_add,
        focused_monitor=focused,
        global_monitor=global_monitor,
        capability_probe=probe,
        **kwargs,
    )
    return registry, timer, quick_add, focused, global_monitor, probe


class ShortcutDispatchTests(unittest.TestCase):
    def test_default_bindings_dispatch_their_actions(self) -> None:
        registry, timer, quick_add, *_ = _build_registry()

        self.assertTrue(registry.handle_key_event(_event("\r", 36)))
        self.assertTrue(registry.handle_key_event(_event("r", 15)))
        self.assertTrue(registry.handle_key_event(_event("s", 1)))
        self.assertTrue(registry.handle_key_event(_event("n", 45)))

        self.assertEqual(["toggle", "reset", "skip"], timer.calls)
        self.assertEqual(1, quick_add.toggles)

    def test_unmatched_event_is_not_consumed(self) -> None:
        registry, timer, *_ = _build_registry()
        self.assertFalse(registry.handle_key_event(_event("r", 15, {"command"})))
        self.assertFalse(registry.handle_key_event(_event("r", 15, CMD_OPT | {"shift"})))
        self.assertEqual([], timer.calls)

    def test_empty_character_is_never_dispatched(self) -> None:
        registry, timer, *_ = _build_registry()
        registry.set_binding("reset", ShortcutBinding(key="", key_code=15, modifiers=CMD_OPT))
        self.assertFalse(registry.handle_key_event(_event("", 15)))
        self.assertEqual([], timer.calls)

    def test_collisions_resolve_by_priority(self) -> None:
        registry, timer, quick_add, *_ = _build_registry()
        shared = ShortcutBinding(key="k", key_code=40, modifiers=CMD_OPT)
        for action in ("startPause", "reset", "skip", "quickAdd"):
            registry.set_binding(action, shared)

        registry.handle_key_event(_event("k", 40))
        self.assertEqual(["reset"], timer.calls)

        registry.set_binding("reset", DEFAULT_BINDINGS["reset"])
        registry.handle_key_event(_event("k", 40))
        self.assertEqual(["reset", "skip"], timer.calls)
        self.assertEqual(0, quick_add.toggles)

    def test_resolve_returns_action_name(self) -> None:
        registry, *_ = _build_registry()
        self.assertEqual("skip", registry.resolve(_event("s", 1)))
        self.assertIsNone(registry.resolve(_event("q", 12)))


class ShortcutCaptureTests(unittest.TestCase):
    def test_capture_suppresses_dispatch_and_commits_next_event(self) -> None:
        store = MemoryStore()
        registry, timer, *_ = _build_registry(store)

        registry.begin_capture("skip")
        self.assertTrue(registry.is_capturing)
        self.assertEqual("skip", registry.capturing_action)

        self.assertTrue(registry.handle_key_event(_event("R", 15, {"control", "shift"})))

        self.assertFalse(registry.is_capturing)
        self.assertEqual([], timer.calls)
        captured = registry.binding("skip")
        self.assertEqual("r", captured.key)
        self.assertEqual(frozenset({"control", "shift"}), captured.modifiers)
        self.assertEqual(captured.to_dict(), store.get("shortcut_skip_v2"))

    def test_no_dispatch_while_capturing(self) -> None:
        registry, timer, *_ = _build_registry()
        registry.begin_capture("quickAdd")
        self.assertIsNone(registry.resolve(_event("r", 15)))
        self.assertFalse(registry.handle_key_event(_event("r", 15), scope="global"))
        self.assertEqual([], timer.calls)
        self.assertTrue(registry.is_capturing)

    def test_cancel_capture_keeps_binding(self) -> None:
        registry, *_ = _build_registry()
        registry.begin_capture("reset")
        registry.cancel_capture()

        self.assertFalse(registry.is_capturing)
        self.assertEqual(DEFAULT_BINDINGS["reset"], registry.binding("reset"))

    def test_capture_events_are_emitted(self) -> None:
        registry, *_ = _build_registry()
        kinds = []
        registry.events.add(lambda event: kinds.append(event.kind))

        registry.begin_capture("reset")
        registry.handle_key_event(_event("x", 7))

        self.assertEqual(["capture_started", "binding_changed", "capture_ended"], kinds)

    def test_begin_capture_rejects_unknown_action(self) -> None:
        registry, *_ = _build_registry()
        self.assertFalse(registry.begin_capture("launch"))
        self.assertFalse(registry.is_capturing)

    def test_capture_ignores_events_without_a_character(self) -> None:
        registry, *_ = _build_registry()
        registry.begin_capture("skip")

        self.assertFalse(registry.handle_key_event(_event("", 126, ())))

        self.assertTrue(registry.is_capturing)
        self.assertEqual(DEFAULT_BINDINGS["skip"], registry.binding("skip"))

    def test_captured_symbolic_key_dispatches(self) -> None:
        registry, timer, *_ = _build_registry()
        registry.begin_capture("skip")
        registry.handle_key_event(_event("↑", 126, ()))

        self.assertEqual("↑", registry.binding("skip").display_string)
        self.assertTrue(registry.handle_key_event(_event("↑", 126, ())))
        self.assertEqual(["skip"], timer.calls)


class ShortcutPersistenceTests(unittest.TestCase):
    def test_bindings_round_trip_through_store(self) -> None:
        store = MemoryStore()
        registry, *_ = _build_registry(store)
        custom = ShortcutBinding(key="p", key_code=35, modifiers=frozenset({"control"}))
        registry.set_binding("startPause", custom)

        reloaded, *_ = _build_registry(store)
        self.assertEqual(custom, reloaded.binding("startPause"))

    def test_legacy_string_migrates_key_and_keeps_default_modifiers(self) -> None:
        store = MemoryStore({"shortcut_reset": "R"})
        registry, timer, *_ = _build_registry(store)

        binding = registry.binding("reset")
        self.assertEqual("r", binding.key)
        self.assertEqual(CMD_OPT, binding.modifiers)
        self.assertEqual(DEFAULT_BINDINGS["reset"].key_code, binding.key_code)

        registry.handle_key_event(_event("r", 15))
        self.assertEqual(["reset"], timer.calls)

    def test_structured_value_wins_over_legacy(self) -> None:
        custom = ShortcutBinding(key="z", key_code=6, modifiers=frozenset({"control"}))
        store = MemoryStore(
            {"shortcut_skip": "q", "shortcut_skip_v2": custom.to_dict()}
        )
        registry, *_ = _build_registry(store)
        self.assertEqual(custom, registry.binding("skip"))

    def test_structured_value_encoded_as_json_string_is_accepted(self) -> None:
        custom = ShortcutBinding(key="z", key_code=6, modifiers=frozenset({"control"}))
        store = MemoryStore({"shortcut_skip_v2": json.dumps(custom.to_dict())})
        registry, *_ = _build_registry(store)
        self.assertEqual(custom, registry.binding("skip"))

    def test_quick_add_has_no_legacy_key(self) -> None:
        store = MemoryStore({"shortcut_quickAdd": "q"})
        registry, *_ = _build_registry(store)
        self.assertEqual(DEFAULT_BINDINGS["quickAdd"], registry.binding("quickAdd"))

    def test_malformed_structured_value_falls_back(self) -> None:
        store = MemoryStore({"shortcut_reset_v2": {"key": 3}, "shortcut_skip_v2": "{oops"})
        with self.assertLogs("shortcuts", level="WARNING"):
            registry, *_ = _build_registry(store)
        self.assertEqual(DEFAULT_BINDINGS["reset"], registry.binding("reset"))
        self.assertEqual(DEFAULT_BINDINGS["skip"], registry.binding("skip"))

    def test_reset_to_defaults_restores_and_ends_capture(self) -> None:
        store = MemoryStore()
        registry, *_ = _build_registry(store)
        registry.set_binding("skip", ShortcutBinding(key="q", key_code=12))
        registry.begin_capture("reset")

        registry.reset_to_defaults()

        self.assertFalse(registry.is_capturing)
        self.assertEqual(DEFAULT_BINDINGS, registry.bindings)
        self.assertEqual(DEFAULT_BINDINGS["skip"].to_dict(), store.get("shortcut_skip_v2"))

    def test_write_failure_keeps_in_memory_binding(self) -> None:
        registry, *_ = _build_registry(_FailingWriteStore())
        custom = ShortcutBinding(key="q", key_code=12)
        with self.assertLogs("shortcuts", level="WARNING"):
            registry.set_binding("skip", custom)
        self.assertEqual(custom, registry.binding("skip"))


class ShortcutScopeTests(unittest.TestCase):
    def test_without_grant_only_focused_scope_listens(self) -> None:
        registry, timer, _, focused, global_monitor, _ = _build_registry(granted=False)
        registry.start_listening()

        self.assertEqual(1, focused.starts)
        self.assertEqual(0, global_monitor.starts)
        self.assertTrue(registry.needs_elevated_capability)

        focused.emit(_event("r", 15))
        self.assertEqual(["reset"], timer.calls)

    def test_with_grant_both_scopes_listen(self) -> None:
        registry, timer, _, focused, global_monitor, _ = _build_registry(granted=True)
        registry.start_listening()

        self.assertEqual(1, global_monitor.starts)
        self.assertFalse(registry.needs_elevated_capability)
        self.assertTrue(registry.is_global_listening)

        global_monitor.emit(_event("s", 1))
        self.assertEqual(["skip"], timer.calls)

    def test_poll_capability_installs_and_removes_global_listener(self) -> None:
        registry, _, _, _, global_monitor, probe = _build_registry(granted=False)
        registry.start_listening()

        self.assertFalse(registry.poll_capability())

        probe.granted = True
        self.assertTrue(registry.poll_capability())
        self.assertTrue(registry.is_global_listening)
        self.assertFalse(registry.needs_elevated_capability)

        probe.granted = False
        self.assertTrue(registry.poll_capability())
        self.assertFalse(registry.is_global_listening)
        self.assertTrue(registry.needs_elevated_capability)
        self.assertEqual(1, global_monitor.stops)

    def test_global_monitor_failure_degrades_to_focused_scope(self) -> None:
        registry, *_ = _build_registry(granted=True, global_monitor=_MonitorStub(fail=True))
        with self.assertLogs("shortcuts", level="WARNING"):
            registry.start_listening()
        self.assertFalse(registry.is_global_listening)
        self.assertTrue(registry.needs_elevated_capability)

    def test_global_prefilter_drops_key_codes_no_binding_uses(self) -> None:
        registry, *_ = _build_registry()
        self.assertFalse(registry.could_be_shortcut(_event("q", 12)))
        self.assertTrue(registry.could_be_shortcut(_event("r", 15)))

        registry.set_binding("skip", ShortcutBinding(key="q"))
        self.assertTrue(registry.could_be_shortcut(_event("w", 13)))

    def test_sink_receives_scope(self) -> None:
        registry, _, _, focused, global_monitor, _ = _build_registry(granted=True)
        received = []
        registry.start_listening(lambda event, scope: received.append(scope))

        focused.emit(_event("a", 0))
        global_monitor.emit(_event("a", 0))

        self.assertEqual(["focused", "global"], received)

    def test_stop_listening_stops_both_monitors(self) -> None:
        registry, _, _, focused, global_monitor, _ = _build_registry(granted=True)
        registry.start_listening()
        registry.stop_listening()

        self.assertEqual(1, focused.stops)
        self.assertEqual(1, global_monitor.stops)
        self.assertFalse(registry.is_global_listening)

    def test_request_capability_forwards_to_probe(self) -> None:
        registry, *_, probe = _build_registry()
        registry.request_capability()
        self.assertEqual(1, probe.requests)


if __name__ == "__main__":
    unittest.main()
