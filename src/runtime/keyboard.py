"""Focused-scope key monitor reading raw keystrokes from the terminal."""

from __future__ import annotations

import codecs
import logging
import os
import select
import sys
import termios
import threading
import tty
from typing import Any, Callable, Iterable, Optional

from shortcuts import KeyEvent
from shortcuts.constants import (
    ANSI_KEY_CODES,
    KEY_CODE_DELETE,
    KEY_CODE_DOWN,
    KEY_CODE_ESCAPE,
    KEY_CODE_LEFT,
    KEY_CODE_RETURN,
    KEY_CODE_RIGHT,
    KEY_CODE_SPACE,
    KEY_CODE_TAB,
    KEY_CODE_UP,
    MOD_COMMAND,
    MOD_CONTROL,
    MOD_OPTION,
    MOD_SHIFT,
    SPECIAL_KEY_SYMBOLS,
)

ESCAPE = "\x1b"
_CSI = ESCAPE + "["

# Terminals fold the command and option keys into one ESC (meta) prefix, so a
# meta chord stands for the app's primary ⌘⌥ chord.
DEFAULT_META_MODIFIERS: frozenset[str] = frozenset({MOD_COMMAND, MOD_OPTION})

_ARROW_CODES = {
    "A": KEY_CODE_UP,
    "B": KEY_CODE_DOWN,
    "C": KEY_CODE_RIGHT,
    "D": KEY_CODE_LEFT,
}

_NAMED_KEYS: dict[str, tuple[str, int]] = {
    "\r": ("\r", KEY_CODE_RETURN),
    "\n": ("\r", KEY_CODE_RETURN),
    "\t": ("\t", KEY_CODE_TAB),
    "\x7f": ("\x7f", KEY_CODE_DELETE),
    "\x08": ("\x7f", KEY_CODE_DELETE),
    " ": (" ", KEY_CODE_SPACE),
}


def decode_terminal_input(
    data: str,
    *,
    meta_modifiers: Iterable[str] = DEFAULT_META_MODIFIERS,
) -> list[KeyEvent]:
    """Translate a chunk of terminal input into key events.

    The terminal cannot tell command from option. An ESC prefix is reported
    with `meta_modifiers`, control comes from the C0 control characters and
    shift from upper-case letters.
    """
    meta = frozenset(meta_modifiers)
    events: list[KeyEvent] = []
    index = 0
    while index < len(data):
        char = data[index]
        if char != ESCAPE:
            events.append(_decode_char(char))
            index += 1
            continue

        following = data[index + 1 : index + 2]
        if following == "[" and data[index + 2 : index + 3] in _ARROW_CODES:
            code = _ARROW_CODES[data[index + 2]]
            events.append(KeyEvent(key=SPECIAL_KEY_SYMBOLS[code], key_code=code))
            index += 3
        elif following and following != ESCAPE:
            base = _decode_char(following)
            events.append(
                KeyEvent(
                    key=base.key,
                    key_code=base.key_code,
                    modifiers=base.modifiers | meta,
                )
            )
            index += 2
        else:
            events.append(KeyEvent(key=ESCAPE, key_code=KEY_CODE_ESCAPE))
            index += 1
    return events


def split_incomplete_sequence(text: str) -> tuple[str, str]:
    """Hold back an unfinished CSI sequence until the next read completes it.

    A lone trailing ESC is the escape key itself and is not held.
    """
    if text.endswith(_CSI):
        return text[: -len(_CSI)], _CSI
    return text, ""


def _decode_char(char: str) -> KeyEvent:
    if char in _NAMED_KEYS:
        key, code = _NAMED_KEYS[char]
        return KeyEvent(key=key, key_code=code)

    ordinal = ord(char)
    if 1 <= ordinal <= 26:
        letter = chr(ordinal + 96)
        return KeyEvent(
            key=letter,
            key_code=ANSI_KEY_CODES.get(letter),
            modifiers=frozenset({MOD_CONTROL}),
        )

    if char.isalpha() and char.isupper():
        letter = char.lower()
        return KeyEvent(
            key=letter,
            key_code=ANSI_KEY_CODES.get(letter),
            modifiers=frozenset({MOD_SHIFT}),
        )

    if not char.isprintable():
        return KeyEvent(key="")
    return KeyEvent(key=char, key_code=ANSI_KEY_CODES.get(char))


class TerminalKeyMonitor:
    """Reads stdin in cbreak mode on a background thread.

    Events are handed to the callback on the reader thread; the runtime loop
    queues them for the control thread.
    """

    def __init__(
        self,
        *,
        stream: Optional[Any] = None,
        meta_modifiers: Iterable[str] = DEFAULT_META_MODIFIERS,
        poll_interval_seconds: float = 0.1,
        logger: Optional[logging.Logger] = None,
    ):
        self._stream = stream or sys.stdin
        self._meta_modifiers = frozenset(meta_modifiers)
        self._poll_interval = poll_interval_seconds
        self._logger = logger or logging.getLogger("runtime.keyboard")
        self._callback: Optional[Callable[[KeyEvent], None]] = None
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()
        self._saved_attributes: Optional[list[Any]] = None
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="ignore")
        self._pending = ""

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self, callback: Callable[[KeyEvent], None]) -> None:
        if self.is_running:
            return
        self._callback = callback
        fd = self._stream.fileno()
        try:
            self._saved_attributes = termios.tcgetattr(fd)
            tty.setcbreak(fd)
        except termios.error as error:
            self._logger.warning("Terminal is not interactive, key input disabled: %s", error)
            self._saved_attributes = None
            return

        self._decoder.reset()
        self._pending = ""
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run,
            args=(fd,),
            name="terminal-keys",
            daemon=True,
        )
        self._thread.start()
        self._logger.debug("Terminal key monitor started")

    def stop(self) -> None:
        self._stop_event.set()
        thread = self._thread
        if thread is not None:
            thread.join(timeout=1.0)
            self._thread = None

        if self._saved_attributes is not None:
            try:
                termios.tcsetattr(
                    self._stream.fileno(),
                    termios.TCSADRAIN,
                    self._saved_attributes,
                )
            except termios.error as error:
                self._logger.warning("Failed to restore terminal settings: %s", error)
            self._saved_attributes = None

    def feed(self, chunk: bytes) -> list[KeyEvent]:
        """Decode one raw read, carrying split characters over to the next."""
        text = self._pending + self._decoder.decode(chunk)
        text, self._pending = split_incomplete_sequence(text)
        return decode_terminal_input(text, meta_modifiers=self._meta_modifiers)

    def _run(self, fd: int) -> None:
        while not self._stop_event.is_set():
            try:
                readable, _, _ = select.select([fd], [], [], self._poll_interval)
                if not readable:
                    continue
                chunk = os.read(fd, 64)
            except OSError as error:
                self._logger.error("Terminal read failed: %s", error)
                return
            if not chunk:
                self._logger.info("Terminal input closed")
                return

            for event in self.feed(chunk):
                callback = self._callback
                if callback is not None:
                    callback(event)
