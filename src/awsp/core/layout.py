"""Table layout for the profile list.

Column widths are computed once from the full record set so the table never
jitters while the list is filtered. Everything here is pure string building.
"""

from dataclasses import dataclass
from typing import Callable, Sequence

from awsp.core.profiles import Profile
from awsp.utils.ansi import display_width, pad, paint
from awsp.utils.constants import Colors, SessionLabel

# Rows above the first data row: top border, header, middle border
HEADER_ROWS = 3
# Rows below the body that are kept out of the scroll window
FOOTER_ROWS = 0

GUTTER_WIDTH = 2
CURRENT_MARKER = "●"


def session_label(profile: Profile) -> str:
    if not profile.sso_session:
        return SessionLabel.NONE
    return SessionLabel.ACTIVE if profile.session_active else SessionLabel.EXPIRED


@dataclass(frozen=True)
class Column:
    title: str
    value: Callable[[Profile], str]
    width: int


COLUMN_SPECS: tuple[tuple[str, Callable[[Profile], str]], ...] = (
    ("Profile", lambda p: p.name),
    ("Account ID", lambda p: p.account_id),
    ("Region", lambda p: p.region),
    ("SSO", session_label),
)


def _border(left: str, cross: str, right: str, columns: Sequence[Column]) -> str:
    segments = cross.join("─" * (column.width + 2) for column in columns)
    return " " * GUTTER_WIDTH + paint(Colors.BORDER, left + segments + right)


def _gutter(is_current: bool) -> str:
    if is_current:
        return paint(Colors.CURRENT_MARKER, CURRENT_MARKER) + " "
    return " " * GUTTER_WIDTH


def _session_style(label: str) -> str:
    if label == SessionLabel.ACTIVE:
        return Colors.SESSION_ACTIVE
    if label == SessionLabel.EXPIRED:
        return Colors.SESSION_EXPIRED
    return ""


@dataclass(frozen=True)
class Layout:
    """Precomputed table chrome and row formatters."""

    columns: tuple[Column, ...]
    header: str
    border_top: str
    border_mid: str
    border_bottom: str

    def format_unselected_row(self, profile: Profile, is_current: bool = False) -> str:
        """Plain row; the current profile gets a marker and a green name."""
        sep = paint(Colors.BORDER, " │ ")
        cells = []
        for index, column in enumerate(self.columns):
            text = pad(column.value(profile), column.width)
            if index == 0 and is_current:
                text = paint(Colors.CURRENT, text)
            elif column.value is session_label:
                style = _session_style(column.value(profile))
                text = paint(style, text) if style else text
            cells.append(text)
        return (
            _gutter(is_current)
            + paint(Colors.BORDER, "│ ")
            + sep.join(cells)
            + paint(Colors.BORDER, " │")
        )

    def format_selected_row(self, profile: Profile, is_current: bool = False) -> str:
        """Highlighted row with a thick left border.

        The current-profile marker and green name survive the highlight so
        both states stay visible at once.
        """
        cells = []
        for index, column in enumerate(self.columns):
            text = pad(column.value(profile), column.width)
            if index == 0 and is_current:
                cells.append(paint(Colors.SELECTED_CURRENT, text))
            else:
                cells.append(paint(Colors.SELECTED, text))
        sep = paint(Colors.SELECTED, " │ ")
        return (
            _gutter(is_current)
            + paint(Colors.SELECTED_BORDER, "┃")
            + paint(Colors.SELECTED, " ")
            + sep.join(cells)
            + paint(Colors.SELECTED, " ")
            + paint(Colors.SELECTED_BORDER, "┃")
        )


def create_layout(profiles: Sequence[Profile]) -> Layout:
    """Compute column widths and table chrome from the whole record set."""
    columns = tuple(
        Column(
            title=title,
            value=value,
            width=max(
                [display_width(title)] + [display_width(value(p)) for p in profiles]
            ),
        )
        for title, value in COLUMN_SPECS
    )

    sep = paint(Colors.BORDER, " │ ")
    header = (
        " " * GUTTER_WIDTH
        + paint(Colors.BORDER, "│ ")
        + sep.join(paint(Colors.HEADER, pad(c.title, c.width)) for c in columns)
        + paint(Colors.BORDER, " │")
    )

    return Layout(
        columns=columns,
        header=header,
        border_top=_border("┌", "┬", "┐", columns),
        border_mid=_border("├", "┼", "┤", columns),
        border_bottom=_border("└", "┴", "┘", columns),
    )
