"""In-place terminal redraw.

The renderer remembers how many lines it painted last time. Each frame
moves back to the top of that block and rewrites every line after erasing
it, so nothing from a longer previous line or frame survives and the
terminal history does not scroll in steady state.
"""

import sys
from dataclasses import dataclass
from typing import Sequence, TextIO

from awsp.utils.ansi import paint
from awsp.utils.constants import Colors

CSI = "\x1b["
CLEAR_LINE = f"{CSI}2K"
HIDE_CURSOR = f"{CSI}?25l"
SHOW_CURSOR = f"{CSI}?25h"
CURSOR_TO_COLUMN_1 = f"{CSI}1G"
# Long lines are clipped at the right margin instead of wrapping,
# so one logical line is always one screen line.
AUTOWRAP_OFF = f"{CSI}?7l"
AUTOWRAP_ON = f"{CSI}?7h"
REVERSE = "reverse"

PROMPT_LABEL = "Filter:"
CURSOR_GLYPH = "█"


def cursor_up(n: int) -> str:
    """Move cursor up N lines (empty for N <= 0)."""
    return f"{CSI}{n}A" if n > 0 else ""


@dataclass(frozen=True)
class Frame:
    """Everything that should be on screen after one render call."""

    filter_text: str
    cursor_position: int
    rows: Sequence[str]
    window_offset: int
    window_size: int


def format_prompt(filter_text: str, cursor_position: int) -> str:
    """Filter prompt with the cursor drawn at its logical position."""
    before = filter_text[:cursor_position]
    if cursor_position < len(filter_text):
        under = paint(REVERSE, filter_text[cursor_position])
        after = filter_text[cursor_position + 1 :]
    else:
        under = paint(Colors.CURSOR, CURSOR_GLYPH)
        after = ""
    return f"{paint(Colors.PROMPT, PROMPT_LABEL)} {before}{under}{after}"


class TerminalRenderer:
    """Writes frames to a text stream using ANSI/VT sequences."""

    def __init__(self, stream: TextIO = None):
        self._stream = stream if stream is not None else sys.stdout
        self._line_count = 0
        self._cursor_hidden = False

    @property
    def line_count(self) -> int:
        """Number of lines painted by the last frame."""
        return self._line_count

    def _write(self, text: str) -> None:
        self._stream.write(text)
        self._stream.flush()

    def _to_top(self) -> str:
        return cursor_up(self._line_count - 1) + CURSOR_TO_COLUMN_1

    def hide_cursor(self) -> None:
        self._write(HIDE_CURSOR)
        self._cursor_hidden = True

    def show_cursor(self) -> None:
        self._write(SHOW_CURSOR)
        self._cursor_hidden = False

    def compose(self, frame: Frame) -> list[str]:
        """Lines for a frame: prompt first, then the visible window."""
        start = max(0, frame.window_offset)
        visible = frame.rows[start : start + frame.window_size]
        return [format_prompt(frame.filter_text, frame.cursor_position), *visible]

    def render(self, frame: Frame) -> None:
        """Repaint the block in place with the lines of ``frame``."""
        lines = self.compose(frame)
        out = [AUTOWRAP_OFF]

        if self._line_count > 0:
            out.append(self._to_top())

        out.append("\n".join(CLEAR_LINE + line for line in lines))

        # clear leftovers from a taller previous frame, then come back
        extra = self._line_count - len(lines)
        if extra > 0:
            out.append(("\n" + CLEAR_LINE) * extra)
            out.append(cursor_up(extra))

        out.append(AUTOWRAP_ON)
        self._write("".join(out))
        self._line_count = len(lines)

    def clear(self) -> None:
        """Erase everything painted so far and show the cursor again."""
        if self._line_count > 0:
            out = [self._to_top()]
            out.append("\n".join(CLEAR_LINE for _ in range(self._line_count)))
            out.append(self._to_top())
            self._write("".join(out))
            self._line_count = 0
        if self._cursor_hidden:
            self.show_cursor()
