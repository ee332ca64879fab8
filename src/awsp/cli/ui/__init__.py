"""Terminal UI components for the profile selector."""

from awsp.cli.ui.keyboard import KeyboardDecoder, KeyEvent, KeyKind
from awsp.cli.ui.panels import (
    calculate_scroll_offset,
    console,
    err_console,
)
from awsp.cli.ui.renderer import Frame, TerminalRenderer
from awsp.cli.ui.selector import NO_SELECTION, ProfileSelector, SelectorState

__all__ = [
    "Frame",
    "KeyEvent",
    "KeyKind",
    "KeyboardDecoder",
    "NO_SELECTION",
    "ProfileSelector",
    "SelectorState",
    "TerminalRenderer",
    "calculate_scroll_offset",
    "console",
    "err_console",
]
