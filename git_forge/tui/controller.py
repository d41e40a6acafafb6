"""Selection-screen state machine.

Routes key tokens by focus and help mode, drives the search editor and item
list, and decides each tick whether to prefetch the next page or merge a
finished fetch.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, replace
from enum import Enum
from typing import Generic, TypeVar, Union

from .fetch import (
    FetchCallback,
    FetchRequest,
    FetchScheduler,
    MergeMode,
    spawn_daemon_thread,
)
from .item_list import ItemList, PaginationTracker
from .keys import KeyBinding, KeyBindings, is_text_key
from .query import FetchOptions, parse
from .search_editor import SearchEditor

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Prefetch once fewer than this many items remain below the selection.
LOOKAHEAD_DISTANCE = 3


class Focus(Enum):
    LIST = "list"
    SEARCH_BAR = "search_bar"


@dataclass(frozen=True)
class Mode:
    """Focused region plus whether the help overlay is showing over it."""

    focus: Focus = Focus.LIST
    help: bool = False


@dataclass(frozen=True)
class Select:
    index: int


@dataclass(frozen=True)
class Quit:
    pass


Action = Union[Select, Quit]


class SelectionController(Generic[T]):
    """Own every piece of selection state for one session."""

    def __init__(
        self,
        fetch: FetchCallback,
        initial_options: Mapping[str, str] | None = None,
        spawn: Callable[[Callable[[], None]], None] = spawn_daemon_thread,
    ) -> None:
        self.editor = SearchEditor()
        self.items: ItemList[T] = ItemList()
        self.pagination = PaginationTracker()
        self.scheduler: FetchScheduler[T] = FetchScheduler(fetch, spawn=spawn)
        if initial_options:
            self.scheduler.current_options = FetchOptions(initial_options)
        self.mode = Mode()
        self._help_bindings: KeyBindings[Action] = KeyBindings(
            KeyBinding(("CTRL_C",), Quit),
        )
        self._list_bindings: KeyBindings[Action] = KeyBindings(
            KeyBinding(("ESC", "CTRL_C"), Quit),
            KeyBinding(("TAB", "SHIFT_TAB"), lambda: self._focus(Focus.SEARCH_BAR)),
            KeyBinding(("?",), self._open_help),
            KeyBinding(("UP",), self.items.select_previous),
            KeyBinding(("DOWN",), self.items.select_next),
            KeyBinding(("PAGE_UP",), lambda: self.items.select_page_up(self.pagination.viewport_rows)),
            KeyBinding(("PAGE_DOWN",), lambda: self.items.select_page_down(self.pagination.viewport_rows)),
            KeyBinding(("ENTER",), self._select_current),
        )
        editor = self.editor
        self._search_bindings: KeyBindings[Action] = KeyBindings(
            KeyBinding(("ESC",), self._escape_search),
            KeyBinding(("CTRL_C",), Quit),
            KeyBinding(("BACKSPACE",), editor.delete_before),
            KeyBinding(("ALT_BACKSPACE", "CTRL_W"), editor.delete_word_before),
            KeyBinding(("DELETE",), editor.delete_after),
            KeyBinding(("ALT_DELETE",), editor.delete_word_after),
            KeyBinding(("LEFT",), editor.move_left),
            KeyBinding(("RIGHT",), editor.move_right),
            KeyBinding(("CTRL_LEFT", "ALT_LEFT"), editor.move_word_left),
            KeyBinding(("CTRL_RIGHT", "ALT_RIGHT"), editor.move_word_right),
            KeyBinding(("UP",), editor.navigate_history_up),
            KeyBinding(("DOWN",), editor.navigate_history_down),
            KeyBinding(("HOME", "CTRL_A"), editor.move_to_start),
            KeyBinding(("END", "CTRL_E"), editor.move_to_end),
            KeyBinding(("CTRL_L",), editor.clear),
            KeyBinding(("?",), self._question_mark_in_search),
            KeyBinding(("TAB", "SHIFT_TAB"), lambda: self._focus(Focus.LIST)),
            KeyBinding(("ENTER",), self._submit_search),
        )

    @property
    def focus(self) -> Focus:
        return self.mode.focus

    def set_viewport_rows(self, rows: int) -> None:
        self.pagination.viewport_rows = max(0, rows)

    def is_fetching(self) -> bool:
        return self.scheduler.is_fetching()

    @property
    def current_options(self) -> FetchOptions:
        return self.scheduler.current_options

    # Key handling

    def handle_key(self, key: str) -> Action | None:
        """Apply one key press; return a terminal action when the session ends."""
        if not key:
            return None
        if self.mode.help:
            if key in self._help_bindings:
                return self._help_bindings.dispatch(key)
            self.mode = replace(self.mode, help=False)
            return None
        if self.mode.focus is Focus.LIST:
            if key in self._list_bindings:
                return self._list_bindings.dispatch(key)
            if is_text_key(key):
                self.editor.insert(key)
                self._focus(Focus.SEARCH_BAR)
            return None
        if key in self._search_bindings:
            return self._search_bindings.dispatch(key)
        if is_text_key(key):
            self.editor.insert(key)
        return None

    def _focus(self, focus: Focus) -> None:
        self.mode = Mode(focus=focus)

    def _open_help(self) -> None:
        self.mode = replace(self.mode, help=True)

    def _select_current(self) -> Action | None:
        if self.items.selected_index is None:
            return None
        return Select(self.items.selected_index)

    def _escape_search(self) -> Action | None:
        if self.editor.query:
            self.editor.clear()
            return None
        return Quit()

    def _question_mark_in_search(self) -> None:
        if self.editor.query:
            self.editor.insert("?")
        else:
            self._open_help()

    def _submit_search(self) -> None:
        options = parse(self.editor.query)
        self.editor.save_to_history()
        self.editor.clear()
        self._focus(Focus.LIST)
        self.start_search(options)

    # Fetching

    def start_search(self, options: FetchOptions) -> None:
        """Supersede any outstanding fetch with page 1 of a new search."""
        self.scheduler.reset()
        self.pagination.reset()
        self.scheduler.schedule(FetchRequest(page=1, options=options, mode=MergeMode.REPLACE))

    def wants_more(self) -> bool:
        if self.scheduler.is_fetching() or not self.pagination.has_more:
            return False
        if self.mode.focus is not Focus.LIST:
            return False
        selected = self.items.selected_index
        if selected is None:
            return True
        return len(self.items) - (selected + 1) < LOOKAHEAD_DISTANCE

    def update(self) -> None:
        """Run one tick: maybe prefetch, then merge at most one finished fetch.

        A failed fetch re-raises the callback's exception.
        """
        if self.wants_more():
            self.scheduler.schedule(
                FetchRequest(
                    page=self.pagination.next_page(),
                    options=self.scheduler.current_options,
                    mode=MergeMode.APPEND,
                )
            )

        outcome = self.scheduler.poll()
        if outcome is None:
            return
        response = outcome.unwrap()
        if outcome.request.mode is MergeMode.REPLACE:
            self.items.replace(response.items)
        else:
            self.items.append(response.items)
        self.pagination.record(outcome.request.page, response.has_more)
        if self.items.selected_index is None:
            self.items.select_next()
        logger.debug(
            "merged page %d (%d items, has_more=%s)",
            outcome.request.page,
            len(response.items),
            response.has_more,
        )


__all__ = [
    "Action",
    "Focus",
    "LOOKAHEAD_DISTANCE",
    "Mode",
    "Quit",
    "Select",
    "SelectionController",
]
