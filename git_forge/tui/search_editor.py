"""Single-line search buffer with cursor, word motions, and history recall.

All positions are grapheme-cluster indexes so combining marks and emoji
sequences are edited as one unit. Display width is measured per cluster.
"""

from __future__ import annotations

import grapheme
from wcwidth import wcwidth

MAX_HISTORY_SIZE = 100


def split_graphemes(text: str) -> list[str]:
    """Return ``text`` split into user-perceived characters."""
    return list(grapheme.graphemes(text))


def grapheme_width(cluster: str) -> int:
    """Return terminal columns used by one grapheme cluster.

    The widest code point wins, so a base character followed by zero-width
    marks keeps its own width. Non-printable code points count as zero.
    """
    widest = 0
    for ch in cluster:
        widest = max(widest, wcwidth(ch))
    return widest


def _is_space(cluster: str) -> bool:
    return cluster.isspace()


def _word_start_before(clusters: list[str], index: int) -> int:
    while index > 0 and _is_space(clusters[index - 1]):
        index -= 1
    while index > 0 and not _is_space(clusters[index - 1]):
        index -= 1
    return index


def _word_end_after(clusters: list[str], index: int) -> int:
    count = len(clusters)
    while index < count and _is_space(clusters[index]):
        index += 1
    while index < count and not _is_space(clusters[index]):
        index += 1
    return index


class SearchEditor:
    """Editable query line with shell-style history.

    ``cursor`` always lies in ``[0, grapheme_count()]``. ``history`` is kept
    oldest-first without duplicates, and ``history_cursor`` is ``None`` unless
    an entry is currently being recalled.
    """

    def __init__(self, max_history: int = MAX_HISTORY_SIZE) -> None:
        self.query = ""
        self.cursor = 0
        self.history: list[str] = []
        self.history_cursor: int | None = None
        self.max_history = max_history

    def graphemes(self) -> list[str]:
        return split_graphemes(self.query)

    def grapheme_count(self) -> int:
        return grapheme.length(self.query)

    def _replace(self, clusters: list[str], cursor: int) -> None:
        self.query = "".join(clusters)
        self.cursor = max(0, min(cursor, self.grapheme_count()))
        self.history_cursor = None

    # Editing

    def insert(self, text: str) -> None:
        """Insert ``text`` at the cursor and move the cursor past it."""
        clusters = self.graphemes()
        before = "".join(clusters[: self.cursor]) + text
        self.query = before + "".join(clusters[self.cursor :])
        # The inserted text may extend the cluster before the cursor.
        self.cursor = min(grapheme.length(before), self.grapheme_count())
        self.history_cursor = None

    def delete_before(self) -> None:
        clusters = self.graphemes()
        if self.cursor == 0:
            self.history_cursor = None
            return
        del clusters[self.cursor - 1]
        self._replace(clusters, self.cursor - 1)

    def delete_after(self) -> None:
        clusters = self.graphemes()
        if self.cursor >= len(clusters):
            self.history_cursor = None
            return
        del clusters[self.cursor]
        self._replace(clusters, self.cursor)

    def delete_word_before(self) -> None:
        clusters = self.graphemes()
        start = _word_start_before(clusters, self.cursor)
        del clusters[start : self.cursor]
        self._replace(clusters, start)

    def delete_word_after(self) -> None:
        clusters = self.graphemes()
        end = _word_end_after(clusters, self.cursor)
        del clusters[self.cursor : end]
        self._replace(clusters, self.cursor)

    def clear(self) -> None:
        self.query = ""
        self.cursor = 0
        self.history_cursor = None

    # Cursor movement

    def move_left(self) -> None:
        self.cursor = max(0, self.cursor - 1)

    def move_right(self) -> None:
        self.cursor = min(self.grapheme_count(), self.cursor + 1)

    def move_word_left(self) -> None:
        self.cursor = _word_start_before(self.graphemes(), self.cursor)

    def move_word_right(self) -> None:
        self.cursor = _word_end_after(self.graphemes(), self.cursor)

    def move_to_start(self) -> None:
        self.cursor = 0

    def move_to_end(self) -> None:
        self.cursor = self.grapheme_count()

    # History

    def _recall(self, index: int) -> None:
        self.history_cursor = index
        self.query = self.history[index]
        self.cursor = self.grapheme_count()

    def navigate_history_up(self) -> None:
        """Recall the next older entry; jumps to the newest when not browsing."""
        if not self.history:
            return
        if self.history_cursor is None:
            self._recall(len(self.history) - 1)
        elif self.history_cursor > 0:
            self._recall(self.history_cursor - 1)

    def navigate_history_down(self) -> None:
        """Recall the next newer entry; past the newest, leave browsing empty."""
        if self.history_cursor is None:
            return
        if self.history_cursor < len(self.history) - 1:
            self._recall(self.history_cursor + 1)
            return
        self.clear()

    def save_to_history(self) -> None:
        if not self.query:
            return
        if self.query in self.history:
            self.history.remove(self.query)
        self.history.append(self.query)
        overflow = len(self.history) - self.max_history
        if overflow > 0:
            del self.history[:overflow]
        self.history_cursor = None

    def display_width_up_to_cursor(self) -> int:
        return sum(grapheme_width(cluster) for cluster in self.graphemes()[: self.cursor])


__all__ = [
    "MAX_HISTORY_SIZE",
    "SearchEditor",
    "grapheme_width",
    "split_graphemes",
]
