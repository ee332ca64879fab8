"""Tests for the interactive profile selector state machine."""

import asyncio
import io
import os
import random

import pytest

from awsp.cli.ui.keyboard import KeyboardDecoder, KeyEvent, KeyKind
from awsp.cli.ui.renderer import TerminalRenderer
from awsp.cli.ui.selector import (
    MIN_PAGE_SIZE,
    NO_SELECTION,
    ProfileSelector,
    SelectorState,
)
from awsp.core.layout import create_layout
from awsp.core.profiles import Profile
from awsp.core.search import FuzzySearcher
from awsp.utils.exceptions import NotATerminalError


class FakeKeyboard:
    """Stands in for KeyboardDecoder; tests push events through ``press``."""

    def __init__(self):
        self.handler = None
        self.on_error = None
        self.starts = 0
        self.stops = 0

    @property
    def active(self):
        return self.handler is not None

    def start(self, handler, on_error=None):
        self.starts += 1
        self.handler = handler
        self.on_error = on_error

    def stop(self):
        self.stops += 1
        self.handler = None
        self.on_error = None

    def press(self, kind, text=""):
        assert self.handler is not None, "keyboard is not running"
        self.handler(KeyEvent(kind, text))

    def type(self, text):
        for ch in text:
            self.press(KeyKind.CHAR, ch)


class FakeRenderer:
    """Records frames instead of writing to a terminal."""

    def __init__(self):
        self.frames = []
        self.clears = 0
        self.hidden = False

    def hide_cursor(self):
        self.hidden = True

    def show_cursor(self):
        self.hidden = False

    def render(self, frame):
        self.frames.append(frame)

    def clear(self):
        self.clears += 1
        self.hidden = False

    @property
    def last(self):
        return self.frames[-1]

    def visible_rows(self):
        frame = self.last
        start = frame.window_offset
        return list(frame.rows[start : start + frame.window_size])


def make_selector(profiles, page_size=20, current_profile=None):
    keyboard = FakeKeyboard()
    renderer = FakeRenderer()
    selector = ProfileSelector(
        FuzzySearcher(profiles),
        create_layout(profiles),
        page_size=page_size,
        current_profile=current_profile,
        keyboard=keyboard,
        renderer=renderer,
    )
    return selector, keyboard, renderer


async def start(selector):
    task = asyncio.create_task(selector.run())
    await asyncio.sleep(0)
    return task


def names(selector):
    return [p.name for p in selector.ui.filtered]


@pytest.fixture(autouse=True)
def isolated_config(mock_awsp_dir):
    yield mock_awsp_dir


@pytest.fixture
def many_profiles():
    return tuple(Profile(f"account-{i:02d}") for i in range(30))


class TestScenarios:
    @pytest.mark.asyncio
    async def test_filter_then_enter(self, profiles):
        selector, keyboard, _ = make_selector(profiles)
        task = await start(selector)

        keyboard.type("d")
        assert names(selector) == ["dev"]
        keyboard.press(KeyKind.ENTER)

        assert await task == "dev"
        assert selector.state is SelectorState.RESOLVED

    @pytest.mark.asyncio
    async def test_escape_cancels(self, profiles):
        selector, keyboard, _ = make_selector(profiles)
        task = await start(selector)

        keyboard.press(KeyKind.ESCAPE)

        assert await task is NO_SELECTION
        assert selector.state is SelectorState.CANCELLED

    @pytest.mark.asyncio
    async def test_enter_on_empty_list_keeps_running(self, profiles):
        selector, keyboard, _ = make_selector(profiles)
        task = await start(selector)

        keyboard.type("zzz")
        assert names(selector) == []
        keyboard.press(KeyKind.ENTER)
        await asyncio.sleep(0)
        assert not task.done()
        assert selector.state is SelectorState.RUNNING

        for _ in range(3):
            keyboard.press(KeyKind.BACKSPACE)
        assert names(selector) == ["dev", "prod", "staging"]
        assert selector.ui.selected_index == 0

        keyboard.press(KeyKind.ESCAPE)
        assert await task is NO_SELECTION

    @pytest.mark.asyncio
    async def test_scrolling_keeps_selection_at_window_bottom(self, many_profiles):
        selector, keyboard, renderer = make_selector(many_profiles, page_size=10)
        task = await start(selector)
        assert selector.data_page_size == 7

        offsets = []
        for _ in range(8):
            keyboard.press(KeyKind.DOWN)
            offsets.append(selector.ui.scroll_offset)

        assert selector.ui.selected_index == 8
        assert offsets == [0, 0, 0, 0, 0, 0, 1, 2]
        expected = selector.layout.format_selected_row(many_profiles[8], False)
        assert renderer.visible_rows()[-1] == expected

        keyboard.press(KeyKind.ENTER)
        assert await task == "account-08"


class TestNavigation:
    @pytest.mark.asyncio
    async def test_wraps_around(self, profiles):
        selector, keyboard, _ = make_selector(profiles)
        task = await start(selector)

        keyboard.press(KeyKind.UP)
        assert selector.ui.selected_index == 2
        keyboard.press(KeyKind.DOWN)
        assert selector.ui.selected_index == 0

        keyboard.press(KeyKind.ESCAPE)
        await task

    @pytest.mark.asyncio
    async def test_wrap_to_end_scrolls_window(self, many_profiles):
        selector, keyboard, _ = make_selector(many_profiles, page_size=10)
        task = await start(selector)

        keyboard.press(KeyKind.UP)
        assert selector.ui.selected_index == 29
        assert selector.ui.scroll_offset == 23

        keyboard.press(KeyKind.DOWN)
        assert selector.ui.selected_index == 0
        assert selector.ui.scroll_offset == 0

        keyboard.press(KeyKind.ESCAPE)
        await task

    @pytest.mark.asyncio
    async def test_arrows_on_empty_list_do_nothing(self, profiles):
        selector, keyboard, _ = make_selector(profiles)
        task = await start(selector)

        keyboard.type("zzz")
        keyboard.press(KeyKind.UP)
        keyboard.press(KeyKind.DOWN)
        assert selector.ui.selected_index == 0
        assert selector.ui.scroll_offset == 0

        keyboard.press(KeyKind.ESCAPE)
        await task

    @pytest.mark.asyncio
    async def test_tiny_page_size_keeps_selection_visible(self, many_profiles):
        selector, keyboard, renderer = make_selector(many_profiles, page_size=3)
        task = await start(selector)
        assert selector.page_size == MIN_PAGE_SIZE
        assert selector.data_page_size == 1

        for _ in range(2):
            keyboard.press(KeyKind.DOWN)

        expected = selector.layout.format_selected_row(many_profiles[2], False)
        assert expected in renderer.visible_rows()
        assert renderer.last.window_size == MIN_PAGE_SIZE

        keyboard.press(KeyKind.ESCAPE)
        await task

    @pytest.mark.asyncio
    async def test_refilter_resets_selection(self, many_profiles):
        selector, keyboard, _ = make_selector(many_profiles, page_size=10)
        task = await start(selector)

        for _ in range(10):
            keyboard.press(KeyKind.DOWN)
        keyboard.type("a")
        assert selector.ui.selected_index == 0
        assert selector.ui.scroll_offset == 0

        keyboard.press(KeyKind.ESCAPE)
        await task


class TestLineEditing:
    @pytest.mark.asyncio
    async def test_cursor_is_clamped(self, profiles):
        selector, keyboard, _ = make_selector(profiles)
        task = await start(selector)

        keyboard.press(KeyKind.LEFT)
        assert selector.ui.cursor_position == 0
        keyboard.type("pr")
        keyboard.press(KeyKind.RIGHT)
        assert selector.ui.cursor_position == 2

        keyboard.press(KeyKind.ESCAPE)
        await task

    @pytest.mark.asyncio
    async def test_insert_at_cursor(self, profiles):
        selector, keyboard, _ = make_selector(profiles)
        task = await start(selector)

        keyboard.type("pd")
        keyboard.press(KeyKind.LEFT)
        keyboard.type("ro")
        assert selector.ui.filter_text == "prod"
        assert selector.ui.cursor_position == 3
        assert names(selector) == ["prod"]

        keyboard.press(KeyKind.ESCAPE)
        await task

    @pytest.mark.asyncio
    async def test_backspace_at_start_is_noop(self, profiles):
        selector, keyboard, renderer = make_selector(profiles)
        task = await start(selector)

        keyboard.type("st")
        keyboard.press(KeyKind.WORD_START)
        keyboard.press(KeyKind.BACKSPACE)
        assert selector.ui.filter_text == "st"
        assert selector.ui.cursor_position == 0

        keyboard.press(KeyKind.WORD_END)
        assert selector.ui.cursor_position == 2
        keyboard.press(KeyKind.BACKSPACE)
        assert selector.ui.filter_text == "s"

        keyboard.press(KeyKind.ESCAPE)
        await task

    @pytest.mark.asyncio
    async def test_kill_to_end(self, profiles):
        selector, keyboard, _ = make_selector(profiles)
        task = await start(selector)

        keyboard.type("zzz")
        keyboard.press(KeyKind.LEFT)
        keyboard.press(KeyKind.LEFT)
        keyboard.press(KeyKind.KILL_TO_END)
        assert selector.ui.filter_text == "z"
        assert selector.ui.cursor_position == 1

        keyboard.press(KeyKind.ESCAPE)
        await task


class TestRendering:
    @pytest.mark.asyncio
    async def test_initial_frame(self, profiles):
        selector, keyboard, renderer = make_selector(profiles)
        task = await start(selector)

        assert renderer.hidden
        assert len(renderer.frames) == 1
        frame = renderer.last
        assert frame.filter_text == ""
        assert frame.window_offset == 0
        assert frame.window_size == 20
        # top, header, separator, three rows, bottom
        assert len(frame.rows) == 7

        keyboard.press(KeyKind.ESCAPE)
        await task

    @pytest.mark.asyncio
    async def test_one_frame_per_key(self, profiles):
        selector, keyboard, renderer = make_selector(profiles)
        task = await start(selector)

        keyboard.type("pro")
        keyboard.press(KeyKind.DOWN)
        assert len(renderer.frames) == 5

        keyboard.press(KeyKind.ESCAPE)
        await task
        # no repaint after completion
        assert len(renderer.frames) == 5

    @pytest.mark.asyncio
    async def test_current_profile_marked(self, profiles):
        selector, keyboard, renderer = make_selector(profiles, current_profile="prod")
        task = await start(selector)

        layout = selector.layout
        rows = renderer.last.rows
        assert rows[3] == layout.format_selected_row(profiles[0], False)
        assert rows[4] == layout.format_unselected_row(profiles[1], True)

        keyboard.press(KeyKind.DOWN)
        assert renderer.last.rows[4] == layout.format_selected_row(profiles[1], True)

        keyboard.press(KeyKind.ESCAPE)
        await task

    @pytest.mark.asyncio
    async def test_rows_follow_search_results(self, profiles):
        selector, keyboard, renderer = make_selector(profiles)
        task = await start(selector)

        keyboard.type("prod")
        expected = selector.searcher.search("prod")
        data_rows = renderer.last.rows[3:-1]
        assert len(data_rows) == len(expected)
        assert data_rows[0] == selector.layout.format_selected_row(expected[0], False)

        keyboard.press(KeyKind.ESCAPE)
        await task


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_teardown_on_completion(self, profiles):
        selector, keyboard, renderer = make_selector(profiles)
        task = await start(selector)
        assert keyboard.active

        keyboard.press(KeyKind.ENTER)
        await task

        assert not keyboard.active
        assert keyboard.stops == 1
        assert renderer.clears == 1
        assert not renderer.hidden

    @pytest.mark.asyncio
    async def test_completion_is_idempotent(self, profiles):
        selector, keyboard, _ = make_selector(profiles)
        task = await start(selector)
        handler = keyboard.handler

        handler(KeyEvent(KeyKind.ENTER))
        handler(KeyEvent(KeyKind.ESCAPE))
        handler(KeyEvent(KeyKind.DOWN))

        assert await task == "dev"
        assert selector.state is SelectorState.RESOLVED
        assert keyboard.stops == 1

    @pytest.mark.asyncio
    async def test_handler_error_rejects_and_cleans_up(self, profiles):
        selector, keyboard, renderer = make_selector(profiles)

        def broken(term):
            raise RuntimeError("search exploded")

        selector.searcher.search = broken
        task = await start(selector)

        keyboard.press(KeyKind.CHAR, "x")

        with pytest.raises(RuntimeError, match="search exploded"):
            await task
        assert keyboard.stops == 1
        assert renderer.clears == 1

    @pytest.mark.asyncio
    async def test_input_error_rejects(self, profiles):
        selector, keyboard, renderer = make_selector(profiles)
        task = await start(selector)

        keyboard.on_error(OSError("read failed"))

        with pytest.raises(OSError, match="read failed"):
            await task
        assert renderer.clears == 1

    @pytest.mark.asyncio
    async def test_not_a_terminal(self, profiles):
        read_fd, write_fd = os.pipe()
        renderer = FakeRenderer()
        try:
            selector = ProfileSelector(
                FuzzySearcher(profiles),
                create_layout(profiles),
                keyboard=KeyboardDecoder(fd=read_fd),
                renderer=renderer,
            )
            with pytest.raises(NotATerminalError):
                await selector.run()
        finally:
            os.close(read_fd)
            os.close(write_fd)
        assert renderer.frames == []

    @pytest.mark.asyncio
    async def test_real_renderer_cleared_on_exit(self, profiles):
        stream = io.StringIO()
        keyboard = FakeKeyboard()
        renderer = TerminalRenderer(stream)
        selector = ProfileSelector(
            FuzzySearcher(profiles),
            create_layout(profiles),
            keyboard=keyboard,
            renderer=renderer,
        )
        task = await start(selector)
        assert renderer.line_count == 8

        keyboard.press(KeyKind.ESCAPE)
        await task
        assert renderer.line_count == 0


def test_every_key_kind_has_a_transition(profiles):
    selector, _, _ = make_selector(profiles)
    assert set(selector._transitions) == set(KeyKind)


@pytest.mark.asyncio
async def test_random_key_sequences_keep_state_consistent(many_profiles):
    rng = random.Random(1234)
    kinds = [
        KeyKind.UP,
        KeyKind.DOWN,
        KeyKind.LEFT,
        KeyKind.RIGHT,
        KeyKind.BACKSPACE,
        KeyKind.CHAR,
        KeyKind.CHAR,
        KeyKind.WORD_START,
        KeyKind.WORD_END,
        KeyKind.KILL_TO_END,
    ]
    selector, keyboard, renderer = make_selector(many_profiles, page_size=10)
    task = await start(selector)

    for _ in range(400):
        kind = rng.choice(kinds)
        text = rng.choice("acnot0123-") if kind is KeyKind.CHAR else ""
        keyboard.press(kind, text)

        ui = selector.ui
        assert 0 <= ui.cursor_position <= len(ui.filter_text)
        assert ui.filtered == selector.searcher.search(ui.filter_text)
        if ui.filtered:
            assert 0 <= ui.selected_index < len(ui.filtered)
            assert ui.scroll_offset <= ui.selected_index
            assert ui.selected_index < ui.scroll_offset + selector.data_page_size
        else:
            assert ui.selected_index == 0
        assert renderer.last.filter_text == ui.filter_text

    keyboard.press(KeyKind.ESCAPE)
    assert await task is NO_SELECTION
