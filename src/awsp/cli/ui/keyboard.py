"""Raw-mode keyboard input decoding.

The decoder puts stdin into raw, no-echo mode, registers a reader on the
running asyncio loop and turns every chunk of bytes into ``KeyEvent``s. The
handler is called synchronously, once per event, so a chunk is fully
processed before the next one is read.
"""

import asyncio
import codecs
import os
import sys
import termios
import tty
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from readchar import key

from awsp.utils.constants import INTERRUPT_EXIT_CODE
from awsp.utils.debug import debug_keys
from awsp.utils.exceptions import InputClosedError, NotATerminalError


class KeyKind(Enum):
    """Closed vocabulary of key events understood by the selector."""

    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
    ENTER = "enter"
    ESCAPE = "escape"
    BACKSPACE = "backspace"
    CHAR = "char"
    WORD_START = "word-start"
    WORD_END = "word-end"
    KILL_TO_END = "kill-to-end"


@dataclass(frozen=True)
class KeyEvent:
    """A decoded key press. ``text`` is set only for ``KeyKind.CHAR``."""

    kind: KeyKind
    text: str = ""


KeyHandler = Callable[[KeyEvent], None]
ErrorHandler = Callable[[BaseException], None]

# Escape sequences, longest first when matched
SEQUENCES: dict[str, KeyKind] = {
    key.UP: KeyKind.UP,
    key.DOWN: KeyKind.DOWN,
    key.LEFT: KeyKind.LEFT,
    key.RIGHT: KeyKind.RIGHT,
    # application cursor mode (SS3)
    "\x1bOA": KeyKind.UP,
    "\x1bOB": KeyKind.DOWN,
    "\x1bOC": KeyKind.RIGHT,
    "\x1bOD": KeyKind.LEFT,
    "\x1bOH": KeyKind.WORD_START,
    "\x1bOF": KeyKind.WORD_END,
    # xterm, vt and rxvt Home and End
    "\x1b[H": KeyKind.WORD_START,
    "\x1b[F": KeyKind.WORD_END,
    "\x1b[1~": KeyKind.WORD_START,
    "\x1b[7~": KeyKind.WORD_START,
    "\x1b[4~": KeyKind.WORD_END,
    "\x1b[8~": KeyKind.WORD_END,
}

CONTROLS: dict[str, KeyKind] = {
    key.CR: KeyKind.ENTER,
    key.LF: KeyKind.ENTER,
    key.BACKSPACE: KeyKind.BACKSPACE,
    key.CTRL_H: KeyKind.BACKSPACE,
    key.CTRL_A: KeyKind.WORD_START,
    key.CTRL_E: KeyKind.WORD_END,
    key.CTRL_K: KeyKind.KILL_TO_END,
}

_SORTED_SEQUENCES = sorted(SEQUENCES, key=len, reverse=True)

# Seconds to wait for the rest of a sequence before a trailing ESC is a key
ESCAPE_TIMEOUT = 0.1


class KeyboardInterruptRequested(Exception):
    """Raised by ``decode`` when Ctrl-C is found in the input."""


def _skip_escape(text: str, start: int) -> int:
    """Index just past an unrecognized escape sequence starting at ``start``."""
    if start + 1 >= len(text):
        return start + 1
    intro = text[start + 1]
    if intro == "[":
        # CSI: parameters then a final byte in 0x40-0x7E
        i = start + 2
        while i < len(text) and not ("\x40" <= text[i] <= "\x7e"):
            i += 1
        return min(i + 1, len(text))
    if intro == "O":
        return min(start + 3, len(text))
    # meta + key
    return start + 2


def split_pending(text: str) -> tuple[str, str]:
    """Split off an escape sequence cut short at the end of a chunk.

    Returns:
        Tuple of (complete, pending); pending is empty or starts with ESC
    """
    start = text.rfind(key.ESC)
    if start == -1:
        return text, ""
    tail = text[start:]
    if tail in (key.ESC, "\x1b[", "\x1bO"):
        return text[:start], tail
    # CSI still reading parameter and intermediate bytes
    if tail.startswith("\x1b[") and all("\x20" <= ch <= "\x3f" for ch in tail[2:]):
        return text[:start], tail
    return text, ""


def decode(text: str) -> list[KeyEvent]:
    """Split a chunk of terminal input into key events.

    Unmapped control characters, unknown escape sequences and meta (Alt)
    combinations are dropped. A lone ESC becomes ``KeyKind.ESCAPE``.

    Raises:
        KeyboardInterruptRequested: If the chunk contains Ctrl-C
    """
    events: list[KeyEvent] = []
    i = 0
    while i < len(text):
        ch = text[i]

        if ch == key.CTRL_C:
            raise KeyboardInterruptRequested()

        if ch == key.ESC:
            for seq in _SORTED_SEQUENCES:
                if text.startswith(seq, i):
                    events.append(KeyEvent(SEQUENCES[seq]))
                    i += len(seq)
                    break
            else:
                if i + 1 == len(text) or text[i + 1] == key.ESC:
                    events.append(KeyEvent(KeyKind.ESCAPE))
                    i += 1
                else:
                    i = _skip_escape(text, i)
            continue

        if ch in CONTROLS:
            events.append(KeyEvent(CONTROLS[ch]))
            # CR LF from a pasted line counts as one Enter
            if ch == key.CR and text.startswith(key.LF, i + 1):
                i += 1
        elif ord(ch) >= 0x20 and ch != "\x7f":
            events.append(KeyEvent(KeyKind.CHAR, ch))
        i += 1
    return events


class KeyboardDecoder:
    """Owns raw mode on a terminal fd and feeds decoded keys to a handler.

    An escape sequence split across two reads is held back and joined with
    the next chunk. If nothing follows within ``ESCAPE_TIMEOUT`` the held
    bytes are decoded on their own, so a lone ESC still cancels promptly.
    """

    def __init__(self, fd: Optional[int] = None):
        self._fd = sys.stdin.fileno() if fd is None else fd
        self._saved_attrs: Optional[list] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._handler: Optional[KeyHandler] = None
        self._on_error: Optional[ErrorHandler] = None
        self._utf8 = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._pending = ""
        self._escape_timer: Optional[asyncio.TimerHandle] = None

    @property
    def active(self) -> bool:
        return self._handler is not None

    def start(self, handler: KeyHandler, on_error: Optional[ErrorHandler] = None) -> None:
        """Enter raw mode and start delivering key events.

        Must be called from inside a running event loop.

        Raises:
            NotATerminalError: If the fd is not a TTY
        """
        if not os.isatty(self._fd):
            raise NotATerminalError()

        loop = asyncio.get_running_loop()
        self._enter_raw_mode()
        self._handler = handler
        self._on_error = on_error
        self._loop = loop
        loop.add_reader(self._fd, self._on_readable)
        debug_keys("keyboard started", fd=self._fd)

    def stop(self) -> None:
        """Stop delivering events and restore the terminal. Safe to repeat."""
        self._cancel_escape_timer()
        if self._loop is not None:
            self._loop.remove_reader(self._fd)
            self._loop = None
        self._handler = None
        self._on_error = None
        self._pending = ""
        self._utf8.reset()
        if self._saved_attrs is not None:
            termios.tcsetattr(self._fd, termios.TCSADRAIN, self._saved_attrs)
            self._saved_attrs = None
            debug_keys("keyboard stopped", fd=self._fd)

    def _enter_raw_mode(self) -> None:
        try:
            self._saved_attrs = termios.tcgetattr(self._fd)
        except termios.error as exc:
            raise NotATerminalError(f"cannot read terminal attributes: {exc}") from exc
        tty.setraw(self._fd, termios.TCSAFLUSH)
        # keep output post-processing so "\n" still returns the carriage
        attrs = termios.tcgetattr(self._fd)
        attrs[1] |= termios.OPOST | termios.ONLCR
        termios.tcsetattr(self._fd, termios.TCSADRAIN, attrs)

    def _cancel_escape_timer(self) -> None:
        if self._escape_timer is not None:
            self._escape_timer.cancel()
            self._escape_timer = None

    def _on_readable(self) -> None:
        self._cancel_escape_timer()
        try:
            data = os.read(self._fd, 1024)
        except OSError as exc:
            self._report(exc)
            return
        if not data:
            self._report(InputClosedError())
            return

        text, self._pending = split_pending(self._pending + self._utf8.decode(data))
        self._feed(text)
        if self._pending and self._loop is not None:
            self._escape_timer = self._loop.call_later(
                ESCAPE_TIMEOUT, self._flush_pending
            )

    def _flush_pending(self) -> None:
        """No continuation arrived: decode the held bytes as they are."""
        self._escape_timer = None
        text, self._pending = self._pending, ""
        self._feed(text)

    def _feed(self, text: str) -> None:
        if not text:
            return
        try:
            events = decode(text)
        except KeyboardInterruptRequested:
            self._interrupt()
            return

        debug_keys("decoded", raw=repr(text), events=len(events))
        for event in events:
            # handler may stop us mid-chunk (enter/escape)
            if self._handler is None:
                break
            self._handler(event)

    def _report(self, exc: BaseException) -> None:
        on_error = self._on_error
        self.stop()
        if on_error is None:
            raise exc
        on_error(exc)

    def _interrupt(self) -> None:
        """Ctrl-C: restore the terminal and abort the whole process."""
        self.stop()
        raise SystemExit(INTERRUPT_EXIT_CODE)
