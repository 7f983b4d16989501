"""Sounddevice-backed playback of the named cue tones."""

import logging
from typing import Optional

import sounddevice as sd

from .tones import DEFAULT_SAMPLE_RATE_HZ, synthesize_cue


class SoundDeviceAudioCue:
    """Plays cues without blocking the control thread.

    A new cue interrupts the one still playing. Device errors are logged and
    dropped.
    """
    def __init__(
        self,
        output_device_index: Optional[int] = None,
        volume: float = 0.5,
        sample_rate_hz: int = DEFAULT_SAMPLE_RATE_HZ,
        logger: Optional[logging.Logger] = None,
    ):
        self._output_device_index = output_device_index
        self._volume = volume
        self._sample_rate_hz = sample_rate_hz
        self._logger = logger or logging.getLogger("runtime.audio")

    def play(self, name: str) -> None:
        wav = synthesize_cue(
            name,
            sample_rate_hz=self._sample_rate_hz,
            volume=self._volume,
        )
        try:
            sd.play(wav, self._sample_rate_hz, device=self._output_device_index)
        except Exception as error:
            self._logger.warning("Audio playback of %s failed: %s", name, error)

    def close(self) -> None:
        try:
            sd.stop()
        except Exception as error:
            self._logger.debug("Stopping audio failed: %s", error)
