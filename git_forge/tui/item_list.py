"""Loaded-item collection with a highlighted row, plus page bookkeeping."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Generic, Protocol, TypeVar


class ListableItem(Protocol):
    def display_text(self) -> str: ...


T = TypeVar("T")


class ItemList(Generic[T]):
    """Ordered items in page order with an optional selected index.

    ``selected_index`` is ``None`` or a valid index into ``items``.
    """

    def __init__(self) -> None:
        self.items: list[T] = []
        self.selected_index: int | None = None

    def __len__(self) -> int:
        return len(self.items)

    def replace(self, items: Iterable[T]) -> None:
        self.items = list(items)
        self.selected_index = 0 if self.items else None

    def append(self, items: Iterable[T]) -> None:
        self.items.extend(items)

    def _move_to(self, index: int) -> None:
        self.selected_index = max(0, min(index, len(self.items) - 1))

    def select_next(self) -> None:
        if not self.items:
            return
        if self.selected_index is None:
            self.selected_index = 0
            return
        self._move_to(self.selected_index + 1)

    def select_previous(self) -> None:
        if not self.items:
            return
        if self.selected_index is None:
            self.selected_index = 0
            return
        self._move_to(self.selected_index - 1)

    def select_page_down(self, rows: int) -> None:
        """Move down by ``rows - 1`` so the old bottom row stays visible."""
        if rows <= 0 or not self.items:
            return
        self._move_to((self.selected_index or 0) + max(0, rows - 1))

    def select_page_up(self, rows: int) -> None:
        if rows <= 0 or not self.items:
            return
        self._move_to((self.selected_index or 0) - max(0, rows - 1))


@dataclass
class PaginationTracker:
    """Pages fetched so far, visible list rows, and whether more pages exist.

    ``current_page`` is 0 until the first response merges.
    """

    current_page: int = 0
    viewport_rows: int = 0
    has_more: bool = True

    def reset(self) -> None:
        self.current_page = 0
        self.has_more = True

    def next_page(self) -> int:
        return self.current_page + 1

    def record(self, page: int, has_more: bool) -> None:
        self.current_page = page
        self.has_more = has_more


__all__ = ["ItemList", "ListableItem", "PaginationTracker"]
