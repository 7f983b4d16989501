from .collaborators import (
    AudioCue,
    CapabilityProbe,
    Clock,
    KeyMonitor,
    Notifier,
    QuickAddSurface,
)

__all__ = [
    "AudioCue",
    "CapabilityProbe",
    "Clock",
    "KeyMonitor",
    "Notifier",
    "QuickAddSurface",
]
