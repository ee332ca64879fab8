"""Interactive profile selector.

``ProfileSelector`` owns the UI state, turns key events into state
transitions, refilters through the searcher when the filter text changes and
repaints through the renderer. ``run()`` resolves exactly once: with the
chosen profile name on Enter, or with ``None`` on Escape.
"""

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from awsp.cli.ui.keyboard import KeyboardDecoder, KeyEvent, KeyKind
from awsp.cli.ui.panels import calculate_scroll_offset
from awsp.cli.ui.renderer import Frame, TerminalRenderer
from awsp.core.layout import FOOTER_ROWS, HEADER_ROWS, Layout
from awsp.core.profiles import Profile
from awsp.core.search import FuzzySearcher
from awsp.utils.constants import DEFAULT_PAGE_SIZE
from awsp.utils.debug import debug_selector

# Returned by run() when the user cancels
NO_SELECTION = None

# Table chrome plus one data row
MIN_PAGE_SIZE = HEADER_ROWS + FOOTER_ROWS + 1


class SelectorState(Enum):
    """Lifecycle of one selector run."""

    RUNNING = "running"
    RESOLVED = "resolved"
    CANCELLED = "cancelled"


@dataclass
class UIState:
    """Mutable state of a running selector."""

    filtered: list[Profile] = field(default_factory=list)
    filter_text: str = ""
    cursor_position: int = 0
    selected_index: int = 0
    scroll_offset: int = 0


class ProfileSelector:
    """Fuzzy-filtered, keyboard-driven single-select over profiles."""

    def __init__(
        self,
        searcher: FuzzySearcher,
        layout: Layout,
        page_size: int = DEFAULT_PAGE_SIZE,
        current_profile: Optional[str] = None,
        keyboard: Optional[KeyboardDecoder] = None,
        renderer: Optional[TerminalRenderer] = None,
    ):
        self.searcher = searcher
        self.layout = layout
        self.page_size = max(page_size, MIN_PAGE_SIZE)
        self.current_profile = current_profile
        self.keyboard = keyboard or KeyboardDecoder()
        self.renderer = renderer or TerminalRenderer()

        self.state = SelectorState.RUNNING
        self.ui = UIState()
        self._result: Optional[asyncio.Future] = None
        self._torn_down = False

        self._transitions: dict[KeyKind, Callable[[KeyEvent], None]] = {
            KeyKind.UP: self._move_up,
            KeyKind.DOWN: self._move_down,
            KeyKind.LEFT: self._cursor_left,
            KeyKind.RIGHT: self._cursor_right,
            KeyKind.ENTER: self._confirm,
            KeyKind.ESCAPE: self._cancel,
            KeyKind.BACKSPACE: self._backspace,
            KeyKind.CHAR: self._insert,
            KeyKind.WORD_START: self._cursor_home,
            KeyKind.WORD_END: self._cursor_end,
            KeyKind.KILL_TO_END: self._kill_to_end,
        }

    @property
    def data_page_size(self) -> int:
        """Data rows that fit in the window below the table header."""
        return self.page_size - HEADER_ROWS - FOOTER_ROWS

    async def run(self) -> Optional[str]:
        """Show the selector and wait for Enter or Escape.

        Returns:
            The selected profile name, or ``NO_SELECTION`` if cancelled

        Raises:
            NotATerminalError: If stdin cannot be put into raw mode
        """
        loop = asyncio.get_running_loop()
        self._result = loop.create_future()
        self.state = SelectorState.RUNNING
        self.ui = UIState(filtered=self.searcher.get_all())
        self._torn_down = False

        try:
            self.keyboard.start(self.handle_key, on_error=self._fail)
            self.renderer.hide_cursor()
            self.render()
            return await self._result
        finally:
            self._teardown()

    # -- event handling -------------------------------------------------

    def handle_key(self, event: KeyEvent) -> None:
        """Apply one key event, then repaint unless the run has finished."""
        if self.state is not SelectorState.RUNNING:
            return
        try:
            self._transitions[event.kind](event)
            if self.state is SelectorState.RUNNING:
                self.render()
        except Exception as exc:
            self._fail(exc)

    def _move_up(self, event: KeyEvent) -> None:
        count = len(self.ui.filtered)
        if count == 0:
            return
        self.ui.selected_index = (self.ui.selected_index - 1) % count
        self._adjust_scroll()

    def _move_down(self, event: KeyEvent) -> None:
        count = len(self.ui.filtered)
        if count == 0:
            return
        self.ui.selected_index = (self.ui.selected_index + 1) % count
        self._adjust_scroll()

    def _cursor_left(self, event: KeyEvent) -> None:
        if self.ui.cursor_position > 0:
            self.ui.cursor_position -= 1

    def _cursor_right(self, event: KeyEvent) -> None:
        if self.ui.cursor_position < len(self.ui.filter_text):
            self.ui.cursor_position += 1

    def _cursor_home(self, event: KeyEvent) -> None:
        self.ui.cursor_position = 0

    def _cursor_end(self, event: KeyEvent) -> None:
        self.ui.cursor_position = len(self.ui.filter_text)

    def _backspace(self, event: KeyEvent) -> None:
        pos = self.ui.cursor_position
        if pos == 0:
            return
        text = self.ui.filter_text
        self.ui.filter_text = text[: pos - 1] + text[pos:]
        self.ui.cursor_position = pos - 1
        self._refilter()

    def _insert(self, event: KeyEvent) -> None:
        pos = self.ui.cursor_position
        text = self.ui.filter_text
        self.ui.filter_text = text[:pos] + event.text + text[pos:]
        self.ui.cursor_position = pos + len(event.text)
        self._refilter()

    def _kill_to_end(self, event: KeyEvent) -> None:
        pos = self.ui.cursor_position
        if pos < len(self.ui.filter_text):
            self.ui.filter_text = self.ui.filter_text[:pos]
            self._refilter()

    def _confirm(self, event: KeyEvent) -> None:
        if not self.ui.filtered:
            return
        chosen = self.ui.filtered[self.ui.selected_index]
        self._finish(SelectorState.RESOLVED, chosen.name)

    def _cancel(self, event: KeyEvent) -> None:
        self._finish(SelectorState.CANCELLED, NO_SELECTION)

    # -- state helpers --------------------------------------------------

    def _refilter(self) -> None:
        # selection always goes back to the top; it does not follow a record
        self.ui.filtered = self.searcher.search(self.ui.filter_text)
        self.ui.selected_index = 0
        self.ui.scroll_offset = 0
        debug_selector(
            "refilter", text=self.ui.filter_text, matches=len(self.ui.filtered)
        )

    def _adjust_scroll(self) -> None:
        self.ui.scroll_offset = calculate_scroll_offset(
            self.ui.selected_index, self.data_page_size, self.ui.scroll_offset
        )

    def build_rows(self) -> list[str]:
        """Table lines for the current filtered list, chrome included."""
        layout = self.layout
        rows = [layout.border_top, layout.header, layout.border_mid]
        for index, profile in enumerate(self.ui.filtered):
            is_current = profile.name == self.current_profile
            if index == self.ui.selected_index:
                rows.append(layout.format_selected_row(profile, is_current))
            else:
                rows.append(layout.format_unselected_row(profile, is_current))
        rows.append(layout.border_bottom)
        return rows

    def render(self) -> None:
        self.renderer.render(
            Frame(
                filter_text=self.ui.filter_text,
                cursor_position=self.ui.cursor_position,
                rows=self.build_rows(),
                window_offset=self.ui.scroll_offset,
                window_size=self.page_size,
            )
        )

    # -- completion -----------------------------------------------------

    def _finish(self, state: SelectorState, value: Optional[str]) -> None:
        if self.state is not SelectorState.RUNNING:
            return
        self.state = state
        debug_selector("finished", state=state.value, value=value)
        self._teardown()
        if self._result is not None and not self._result.done():
            self._result.set_result(value)

    def _fail(self, exc: BaseException) -> None:
        if self.state is SelectorState.RUNNING:
            self.state = SelectorState.CANCELLED
        self._teardown()
        if self._result is not None and not self._result.done():
            self._result.set_exception(exc)

    def _teardown(self) -> None:
        """Stop input and restore the screen; runs once per run()."""
        if self._torn_down:
            return
        self._torn_down = True
        try:
            self.keyboard.stop()
        finally:
            self.renderer.clear()
