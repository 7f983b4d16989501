"""Action names, modifier names, key codes, and storage keys for shortcuts."""

from __future__ import annotations

ACTION_START_PAUSE = "startPause"
ACTION_RESET = "reset"
ACTION_SKIP = "skip"
ACTION_QUICK_ADD = "quickAdd"

ACTIONS: tuple[str, ...] = (
    ACTION_START_PAUSE,
    ACTION_RESET,
    ACTION_SKIP,
    ACTION_QUICK_ADD,
)

# First match wins when several bindings accept the same event.
DISPATCH_PRIORITY: tuple[str, ...] = (
    ACTION_RESET,
    ACTION_SKIP,
    ACTION_START_PAUSE,
    ACTION_QUICK_ADD,
)

MOD_COMMAND = "command"
MOD_OPTION = "option"
MOD_CONTROL = "control"
MOD_SHIFT = "shift"
MOD_FUNCTION = "function"

RECOGNIZED_MODIFIERS: frozenset[str] = frozenset(
    {MOD_COMMAND, MOD_OPTION, MOD_CONTROL, MOD_SHIFT, MOD_FUNCTION}
)

# Display order and symbols, matching the menu-bar convention.
MODIFIER_SYMBOLS: tuple[tuple[str, str], ...] = (
    (MOD_FUNCTION, "fn"),
    (MOD_CONTROL, "^"),
    (MOD_OPTION, "⌥"),
    (MOD_SHIFT, "⇧"),
    (MOD_COMMAND, "⌘"),
)

SCOPE_FOCUSED = "focused"
SCOPE_GLOBAL = "global"

# macOS virtual key codes (physical ANSI layout positions).
KEY_CODE_RETURN = 36
KEY_CODE_TAB = 48
KEY_CODE_SPACE = 49
KEY_CODE_DELETE = 51
KEY_CODE_ESCAPE = 53
KEY_CODE_ENTER = 76
KEY_CODE_FORWARD_DELETE = 117
KEY_CODE_HOME = 115
KEY_CODE_END = 119
KEY_CODE_PAGE_UP = 116
KEY_CODE_PAGE_DOWN = 121
KEY_CODE_LEFT = 123
KEY_CODE_RIGHT = 124
KEY_CODE_DOWN = 125
KEY_CODE_UP = 126

SPECIAL_KEY_SYMBOLS: dict[int, str] = {
    KEY_CODE_RETURN: "↩",
    KEY_CODE_ENTER: "⌤",
    KEY_CODE_DELETE: "⌫",
    KEY_CODE_FORWARD_DELETE: "⌦",
    KEY_CODE_ESCAPE: "⎋",
    KEY_CODE_TAB: "⇥",
    KEY_CODE_SPACE: "Space",
    KEY_CODE_LEFT: "←",
    KEY_CODE_RIGHT: "→",
    KEY_CODE_DOWN: "↓",
    KEY_CODE_UP: "↑",
    KEY_CODE_HOME: "↖",
    KEY_CODE_END: "↘",
    KEY_CODE_PAGE_UP: "⇞",
    KEY_CODE_PAGE_DOWN: "⇟",
}

ANSI_KEY_CODES: dict[str, int] = {
    "a": 0, "s": 1, "d": 2, "f": 3, "h": 4, "g": 5, "z": 6, "x": 7,
    "c": 8, "v": 9, "b": 11, "q": 12, "w": 13, "e": 14, "r": 15, "y": 16,
    "t": 17, "1": 18, "2": 19, "3": 20, "4": 21, "6": 22, "5": 23, "=": 24,
    "9": 25, "7": 26, "-": 27, "8": 28, "0": 29, "]": 30, "o": 31, "u": 32,
    "[": 33, "i": 34, "p": 35, "l": 37, "j": 38, "'": 39, "k": 40, ";": 41,
    "\\": 42, ",": 43, "/": 44, "n": 45, "m": 46, ".": 47, "`": 50,
}

STORAGE_KEY_SUFFIX = "_v2"
LEGACY_ACTIONS: frozenset[str] = frozenset({ACTION_START_PAUSE, ACTION_RESET, ACTION_SKIP})


def storage_key(action: str) -> str:
    return f"shortcut_{action}{STORAGE_KEY_SUFFIX}"


def legacy_storage_key(action: str) -> str:
    return f"shortcut_{action}"
