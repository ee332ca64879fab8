"""Shared console and scrolling helpers for the terminal UI."""

from rich.console import Console

console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)


def calculate_scroll_offset(cursor: int, max_visible: int, scroll_offset: int = 0) -> int:
    """Minimal scroll adjustment that keeps the cursor inside the window.

    Args:
        cursor: Index of the highlighted item
        max_visible: Number of items that fit in the window
        scroll_offset: Current first visible item

    Returns:
        New scroll offset; unchanged when the cursor is already visible
    """
    max_visible = max(1, max_visible)
    if cursor < scroll_offset:
        return cursor
    if cursor >= scroll_offset + max_visible:
        return cursor - max_visible + 1
    return scroll_offset
