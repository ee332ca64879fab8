"""ANSI styling helpers backed by rich.

Styles are written in rich's style syntax and rendered straight to SGR
escape codes, so callers get plain strings they can concatenate and pad.
"""

from functools import lru_cache

from rich.cells import cell_len
from rich.color import ColorSystem
from rich.style import Style
from rich.text import Text


@lru_cache(maxsize=64)
def _style(definition: str) -> Style:
    return Style.parse(definition)


def paint(style: str, text: str) -> str:
    """Wrap text in the SGR codes for a rich style definition.

    ``paint("bold #6366F1", "Filter:")`` yields a 24-bit color sequence,
    ``paint("bright_black", "│")`` a 16-color one.
    """
    if not text:
        return text
    return _style(style).render(text, color_system=ColorSystem.TRUECOLOR)


def strip_ansi(text: str) -> str:
    """Remove ANSI escape codes from a string."""
    return Text.from_ansi(text).plain


def display_width(text: str) -> int:
    """Terminal cell width of text, ignoring escape codes.

    Wide (CJK, emoji) characters count as two cells.
    """
    if "\x1b" in text:
        text = strip_ansi(text)
    return cell_len(text)


def pad(text: str, width: int) -> str:
    """Right-pad text with spaces to a display width."""
    return text + " " * max(0, width - display_width(text))
