from .binding import (
    DEFAULT_BINDINGS,
    BindingFormatError,
    KeyEvent,
    ShortcutBinding,
    display_key,
)
from .registry import ShortcutEvent, ShortcutRegistry

__all__ = [
    "BindingFormatError",
    "DEFAULT_BINDINGS",
    "KeyEvent",
    "ShortcutBinding",
    "ShortcutEvent",
    "ShortcutRegistry",
    "display_key",
]
