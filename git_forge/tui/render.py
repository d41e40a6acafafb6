"""ANSI rendering for the selection screen and its help overlay.

Frames are built as one string of cursor-addressed rows and written in a
single call. Rendering reads controller state and only writes back the list
viewport height, which paging and prefetch depend on.
"""

from __future__ import annotations

from dataclasses import dataclass

from .controller import Focus, SelectionController
from .search_editor import grapheme_width, split_graphemes

RESET = "\033[0m"
BOLD = "\033[1m"
FOCUS = "\033[94m"
DIM = "\033[90m"

SEARCH_BAR_ROWS = 3
STATUS_ROWS = 2
MIN_LIST_ROWS = 3
SELECTED_PREFIX = "> "
UNSELECTED_PREFIX = "  "
SEARCH_PREFIX = "> "
HELP_HINT = "?: Show Help"
HELP_FOOTER = "Press any key to close Help..."

HELP_LINES: tuple[str, ...] = (
    f"{BOLD}List{RESET}",
    "  Up/Down          Navigate items",
    "  PgUp/PgDn        Navigate items by page",
    "  Tab              Focus the search bar",
    "  Enter            Select current item",
    "  Esc              Abort selection",
    "",
    f"{BOLD}Search Bar{RESET}",
    "  Up/Down          Navigate search history",
    "  Ctrl+Left/Right  Navigate words",
    "  Alt+Backspace    Delete word before cursor",
    "  Alt+Delete       Delete word after cursor",
    "  Tab              Focus the list",
    "  Enter            Start search",
    "  Esc              Clear search, if it exists, otherwise abort selection",
    "  Ctrl+L           Clear search",
    "  Ctrl+A/Home      Go to line start",
    "  Ctrl+E/End       Go to line end",
    "  <text>           Filter items with plain text query",
    "  @<key>=<value>   Add fetch option, e.g. @state=open",
    "",
    "  For instance, 'crash @author=alice' searches for items containing 'crash'",
    "  which were authored by the user 'alice'.",
)


def _sanitize(text: str) -> str:
    return "".join(ch if ch.isprintable() else " " for ch in text)


def text_width(text: str) -> int:
    return sum(grapheme_width(cluster) for cluster in split_graphemes(text))


def clip_text(text: str, max_cols: int) -> str:
    """Trim plain ``text`` to at most ``max_cols`` terminal columns."""
    if max_cols <= 0:
        return ""
    out: list[str] = []
    col = 0
    for cluster in split_graphemes(_sanitize(text)):
        width = grapheme_width(cluster)
        if col + width > max_cols:
            break
        out.append(cluster)
        col += width
    return "".join(out)


def wrap_text(text: str, max_cols: int) -> list[str]:
    """Break plain ``text`` into rows of at most ``max_cols`` columns.

    Rows break at the last space that fits, which is dropped. A word wider
    than a row is split between clusters. Leading indentation is kept.
    """
    if max_cols <= 0:
        return []
    rows: list[str] = []
    row: list[str] = []
    col = 0
    last_space = -1
    for cluster in split_graphemes(_sanitize(text)):
        width = grapheme_width(cluster)
        if row and col + width > max_cols:
            if cluster == " ":
                rows.append("".join(row))
                row, col, last_space = [], 0, -1
                continue
            if last_space >= 0:
                rows.append("".join(row[:last_space]))
                row = row[last_space + 1 :]
            else:
                rows.append("".join(row))
                row = []
            col = sum(grapheme_width(c) for c in row)
            last_space = -1
        row.append(cluster)
        col += width
        if cluster == " " and any(c != " " for c in row):
            last_space = len(row) - 1
    if row or not rows:
        rows.append("".join(row))
    return rows


@dataclass(frozen=True)
class Layout:
    list_rows: int
    search_top: int
    status_top: int


def compute_layout(rows: int) -> Layout:
    """Split ``rows`` into list, search bar, and status regions (1-based tops)."""
    list_rows = max(MIN_LIST_ROWS, rows - SEARCH_BAR_ROWS - STATUS_ROWS)
    search_top = list_rows + 1
    return Layout(list_rows=list_rows, search_top=search_top, status_top=search_top + SEARCH_BAR_ROWS)


def status_text(controller: SelectionController) -> str:
    if controller.is_fetching():
        return "  Loading items..."
    described = controller.current_options.describe()
    if described:
        return f"  Search: {described}"
    return ""


class SelectionScreen:
    """Draws frames for one session and remembers the list scroll offset."""

    def __init__(self) -> None:
        self.list_offset = 0

    def _scroll_to_selection(self, selected: int | None, list_rows: int) -> None:
        if selected is None:
            self.list_offset = 0
            return
        if selected < self.list_offset:
            self.list_offset = selected
        elif selected >= self.list_offset + list_rows:
            self.list_offset = selected - list_rows + 1

    def _list_rows(self, controller: SelectionController, columns: int, list_rows: int) -> list[str]:
        items = controller.items
        if not items.items:
            message = "  Loading items..." if controller.is_fetching() else "  No items found"
            return [f"{DIM}{clip_text(message, columns)}{RESET}"]

        selected = items.selected_index
        self._scroll_to_selection(selected, list_rows)
        list_focused = controller.focus is Focus.LIST
        out: list[str] = []
        for row in range(list_rows):
            index = self.list_offset + row
            if index >= len(items.items):
                if controller.pagination.has_more:
                    out.append(f"{DIM}·{RESET}")
                continue
            text = items.items[index].display_text()
            if index == selected:
                line = clip_text(SELECTED_PREFIX + text, columns)
                color = FOCUS if list_focused else ""
                out.append(f"{color}{BOLD}{line}{RESET}")
            else:
                out.append(clip_text(UNSELECTED_PREFIX + text, columns))
        return out

    def _search_rows(self, controller: SelectionController, columns: int) -> tuple[list[str], int]:
        """Return the three bar rows and the 1-based cursor column."""
        editor = controller.editor
        color = FOCUS if controller.focus is Focus.SEARCH_BAR else DIM
        rule = f"{color}{'─' * columns}{RESET}"
        available = max(1, columns - len(SEARCH_PREFIX) - 1)
        clusters = split_graphemes(editor.query)
        start = 0
        # Drop leading clusters until the cursor fits on screen.
        while start < editor.cursor and sum(grapheme_width(c) for c in clusters[start : editor.cursor]) > available:
            start += 1
        visible = clip_text("".join(clusters[start:]), available)
        cursor_col = len(SEARCH_PREFIX) + sum(grapheme_width(c) for c in clusters[start : editor.cursor]) + 1
        middle = f"{color}{SEARCH_PREFIX}{RESET}{visible}"
        return [rule, middle, rule], cursor_col

    def _status_rows(self, controller: SelectionController, columns: int) -> list[str]:
        left = status_text(controller)
        left_cols = max(0, columns - len(HELP_HINT) - 1)
        first = clip_text(left, left_cols)
        rest = left[len(first) :]
        padding = " " * max(0, columns - text_width(first) - len(HELP_HINT))
        rows = [f"{DIM}{first}{padding}{clip_text(HELP_HINT, columns)}{RESET}"]
        rows.append(f"{DIM}{clip_text(rest, columns)}{RESET}" if rest else "")
        return rows

    def render(self, controller: SelectionController, columns: int, rows: int) -> str:
        """Build one frame and record the list height on ``controller``."""
        if controller.mode.help:
            return render_help(columns, rows)

        layout = compute_layout(rows)
        controller.set_viewport_rows(layout.list_rows)
        lines = self._list_rows(controller, columns, layout.list_rows)
        lines += [""] * (layout.list_rows - len(lines))
        search_rows, cursor_col = self._search_rows(controller, columns)
        lines += search_rows
        lines += self._status_rows(controller, columns)

        out = ["\033[?25l"]
        for row, line in enumerate(lines[:rows], start=1):
            out.append(f"\033[{row};1H\033[2K{line}")
        if controller.focus is Focus.SEARCH_BAR:
            out.append(f"\033[{layout.search_top + 1};{cursor_col}H\033[?25h")
        return "".join(out)


def render_help(columns: int, rows: int) -> str:
    """Full-screen key reference with the close hint pinned to the last row.

    Lines wider than the terminal wrap onto the following rows.
    """
    body_rows = max(0, rows - 2)
    body: list[str] = []
    for line in HELP_LINES:
        plain = line.replace(BOLD, "").replace(RESET, "")
        for wrapped in wrap_text(" " + plain, columns):
            body.append(f"{BOLD}{wrapped}{RESET}" if line.startswith(BOLD) else wrapped)
    out = ["\033[?25l\033[H\033[J"]
    for row, text in enumerate(body[:body_rows], start=1):
        out.append(f"\033[{row};1H{text}")
    out.append(f"\033[{rows};1H{DIM}{clip_text(' ' + HELP_FOOTER, columns)}{RESET}")
    return "".join(out)


__all__ = [
    "HELP_FOOTER",
    "HELP_HINT",
    "SelectionScreen",
    "clip_text",
    "compute_layout",
    "render_help",
    "status_text",
    "text_width",
    "wrap_text",
]
