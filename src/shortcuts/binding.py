"""Key events, shortcut bindings, and the matching rule between them."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Mapping, Optional

from .constants import (
    ACTION_QUICK_ADD,
    ACTION_RESET,
    ACTION_SKIP,
    ACTION_START_PAUSE,
    ANSI_KEY_CODES,
    KEY_CODE_RETURN,
    KEY_CODE_SPACE,
    MOD_COMMAND,
    MOD_OPTION,
    MODIFIER_SYMBOLS,
    RECOGNIZED_MODIFIERS,
    SPECIAL_KEY_SYMBOLS,
)


class BindingFormatError(ValueError):
    """Raised when a persisted binding cannot be decoded."""


def normalize_modifiers(modifiers: Iterable[str]) -> frozenset[str]:
    """Keep only the five modifiers that take part in matching."""
    return frozenset(modifiers) & RECOGNIZED_MODIFIERS


@dataclass(frozen=True)
class KeyEvent:
    """Normalized key-down event delivered by a key monitor.

    `key` is the character produced without modifiers (empty when the key
    produces none); `key_code` identifies the physical key when the source
    knows it.
    """
    key: str
    key_code: Optional[int] = None
    modifiers: frozenset[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class ShortcutBinding:
    """Key plus exact modifier set assigned to one action."""
    key: str
    key_code: Optional[int] = None
    modifiers: frozenset[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        object.__setattr__(self, "modifiers", normalize_modifiers(self.modifiers))

    @classmethod
    def from_event(cls, event: KeyEvent) -> "ShortcutBinding":
        return cls(
            key=event.key.lower(),
            key_code=event.key_code,
            modifiers=event.modifiers,
        )

    def with_key(self, key: str) -> "ShortcutBinding":
        return replace(self, key=key)

    def matches(self, event: KeyEvent) -> bool:
        # A stored key code identifies the physical key regardless of layout,
        # so it replaces the character comparison entirely.
        if self.key_code is not None:
            if event.key_code != self.key_code:
                return False
        elif event.key.lower() != self.key.lower():
            return False

        return normalize_modifiers(event.modifiers) == self.modifiers

    @property
    def display_string(self) -> str:
        parts = [symbol for name, symbol in MODIFIER_SYMBOLS if name in self.modifiers]
        parts.append(display_key(self.key, self.key_code))
        return " ".join(parts)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"key": self.key}
        if self.key_code is not None:
            payload["keyCode"] = self.key_code
        for name in sorted(RECOGNIZED_MODIFIERS):
            payload[name] = name in self.modifiers
        return payload

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "ShortcutBinding":
        key = raw.get("key")
        if not isinstance(key, str):
            raise BindingFormatError("binding key must be a string")

        key_code = raw.get("keyCode")
        if key_code is not None and (isinstance(key_code, bool) or not isinstance(key_code, int)):
            raise BindingFormatError("binding keyCode must be an integer")

        modifiers = []
        for name in RECOGNIZED_MODIFIERS:
            value = raw.get(name, False)
            if not isinstance(value, bool):
                raise BindingFormatError(f"binding {name} flag must be a boolean")
            if value:
                modifiers.append(name)

        return cls(key=key, key_code=key_code, modifiers=frozenset(modifiers))


def display_key(key: str, key_code: Optional[int]) -> str:
    if key_code is not None and key_code in SPECIAL_KEY_SYMBOLS:
        return SPECIAL_KEY_SYMBOLS[key_code]

    if key == " ":
        return "Space"
    trimmed = key.strip()
    if not trimmed and key_code == KEY_CODE_SPACE:
        return "Space"

    upper = trimmed.upper()
    if upper.startswith("F") and upper[1:].isdigit():
        return f"F{int(upper[1:])}"
    return upper


_CMD_OPT = frozenset({MOD_COMMAND, MOD_OPTION})

DEFAULT_BINDINGS: dict[str, ShortcutBinding] = {
    ACTION_START_PAUSE: ShortcutBinding(key="↩", key_code=KEY_CODE_RETURN, modifiers=_CMD_OPT),
    ACTION_RESET: ShortcutBinding(key="r", key_code=ANSI_KEY_CODES["r"], modifiers=_CMD_OPT),
    ACTION_SKIP: ShortcutBinding(key="s", key_code=ANSI_KEY_CODES["s"], modifiers=_CMD_OPT),
    ACTION_QUICK_ADD: ShortcutBinding(key="n", key_code=ANSI_KEY_CODES["n"], modifiers=_CMD_OPT),
}
