import unittest

from runtime import MonotonicClock


class _FakeMonotonic:
    def __init__(self, value: float = 100.0):
        self.value = value

    def __call__(self) -> float:
        return self.value


class MonotonicClockTests(unittest.TestCase):
    def _build(self):
        now = _FakeMonotonic()
        clock = MonotonicClock(monotonic_fn=now)
        ticks = []
        clock.on_tick(lambda: ticks.append(now.value))
        return clock, now, ticks

    def test_inactive_clock_never_ticks(self) -> None:
        clock, now, ticks = self._build()
        now.value += 10
        self.assertEqual(0, clock.poll())
        self.assertEqual([], ticks)
        self.assertIsNone(clock.seconds_until_next_tick())

    def test_ticks_once_per_elapsed_second(self) -> None:
        clock, now, ticks = self._build()
        clock.start()

        now.value = 100.5
        self.assertEqual(0, clock.poll())
        now.value = 101.0
        self.assertEqual(1, clock.poll())
        now.value = 103.2
        self.assertEqual(2, clock.poll())
        self.assertEqual(3, len(ticks))
        self.assertAlmostEqual(0.8, clock.seconds_until_next_tick())

    def test_start_is_idempotent(self) -> None:
        clock, now, ticks = self._build()
        clock.start()
        now.value = 100.9
        clock.start()
        now.value = 101.0
        self.assertEqual(1, clock.poll())

    def test_stop_from_callback_halts_remaining_ticks(self) -> None:
        now = _FakeMonotonic()
        clock = MonotonicClock(monotonic_fn=now)
        ticks = []

        def on_tick() -> None:
            ticks.append(now.value)
            clock.stop()

        clock.on_tick(on_tick)
        clock.start()
        now.value = 105.0

        self.assertEqual(1, clock.poll())
        self.assertFalse(clock.is_active)

    def test_stop_is_idempotent(self) -> None:
        clock, _, _ = self._build()
        clock.stop()
        clock.start()
        clock.stop()
        clock.stop()
        self.assertFalse(clock.is_active)

    def test_interval_must_be_positive(self) -> None:
        with self.assertRaises(ValueError):
            MonotonicClock(interval_seconds=0)


if __name__ == "__main__":
    unittest.main()
