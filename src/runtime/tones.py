"""Synthesized cue tones for the named timer sounds."""

from __future__ import annotations

import numpy as np

DEFAULT_SAMPLE_RATE_HZ = 44_100
FADE_SECONDS = 0.01

# (frequency_hz, seconds) segments played back to back.
CUE_TONES: dict[str, tuple[tuple[float, float], ...]] = {
    "Glass": ((1318.5, 0.09), (1760.0, 0.16)),
    "Pop": ((660.0, 0.06),),
    "Submarine": ((220.0, 0.18), (196.0, 0.22)),
    "Ping": ((1567.98, 0.12),),
    "Hero": ((523.25, 0.12), (659.25, 0.12), (783.99, 0.26)),
}
ALERT_TONE: tuple[tuple[float, float], ...] = ((880.0, 0.2),)


def cue_segments(name: str) -> tuple[tuple[float, float], ...]:
    return CUE_TONES.get(name, ALERT_TONE)


def synthesize_cue(
    name: str,
    *,
    sample_rate_hz: int = DEFAULT_SAMPLE_RATE_HZ,
    volume: float = 0.5,
) -> np.ndarray:
    """Render a cue as a mono float32 buffer in [-volume, volume]."""
    if sample_rate_hz <= 0:
        raise ValueError("sample_rate_hz must be > 0")
    level = float(np.clip(volume, 0.0, 1.0))
    parts = [
        _tone(frequency, seconds, sample_rate_hz)
        for frequency, seconds in cue_segments(name)
    ]
    return (np.concatenate(parts) * level).astype(np.float32)


def _tone(frequency_hz: float, seconds: float, sample_rate_hz: int) -> np.ndarray:
    count = max(1, int(round(seconds * sample_rate_hz)))
    t = np.arange(count, dtype=np.float64) / sample_rate_hz
    wave = np.sin(2.0 * np.pi * frequency_hz * t)

    # Linear fade in/out keeps segment joins free of clicks.
    fade = min(count // 2, int(FADE_SECONDS * sample_rate_hz))
    if fade > 0:
        ramp = np.linspace(0.0, 1.0, fade, endpoint=False)
        wave[:fade] *= ramp
        wave[-fade:] *= ramp[::-1]
    return wave
