"""Tests for the selection state machine, prefetching, and result merging."""

from __future__ import annotations

import os
import unittest
from collections.abc import Callable
from dataclasses import dataclass

from git_forge.tui.controller import (
    Focus,
    Mode,
    Quit,
    Select,
    SelectionController,
)
from git_forge.tui.fetch import FetchResponse
from git_forge.tui.input import KeyReader
from git_forge.tui.query import FetchOptions


@dataclass(frozen=True)
class FakeItem:
    number: int

    def display_text(self) -> str:
        return f"{self.number}: item"


class FakeForge:
    """Fetch callback whose workers only run when the test says so."""

    def __init__(self, pages: dict[int, FetchResponse] | None = None) -> None:
        self.pages = pages or {}
        self.calls: list[tuple[int, dict[str, str]]] = []
        self.jobs: list[Callable[[], None]] = []

    def fetch(self, page: int, options: FetchOptions) -> FetchResponse:
        self.calls.append((page, dict(options)))
        return self.pages.get(page, FetchResponse(items=[], has_more=False))

    def spawn(self, job: Callable[[], None]) -> None:
        self.jobs.append(job)

    def run_all(self) -> None:
        jobs, self.jobs = self.jobs, []
        for job in jobs:
            job()


def _page(start: int, count: int, has_more: bool) -> FetchResponse:
    return FetchResponse(items=[FakeItem(n) for n in range(start, start + count)], has_more=has_more)


def _controller(forge: FakeForge, **kwargs) -> SelectionController[FakeItem]:
    return SelectionController(forge.fetch, spawn=forge.spawn, **kwargs)


def _type(controller: SelectionController, text: str) -> None:
    for ch in text:
        controller.handle_key(ch)


class PrefetchTests(unittest.TestCase):
    def test_first_tick_loads_first_page_and_selects_first_item(self) -> None:
        forge = FakeForge({1: _page(0, 30, True)})
        controller = _controller(forge)

        controller.update()
        self.assertTrue(controller.is_fetching())
        forge.run_all()
        controller.update()

        self.assertEqual(len(controller.items), 30)
        self.assertEqual(controller.items.selected_index, 0)
        self.assertEqual(controller.pagination.current_page, 1)
        self.assertEqual(forge.calls, [(1, {})])

    def test_lookahead_fetches_next_page_once_and_stops_when_exhausted(self) -> None:
        forge = FakeForge({1: _page(0, 30, True), 2: _page(30, 10, False)})
        controller = _controller(forge)
        controller.update()
        forge.run_all()
        controller.update()

        for _ in range(26):
            controller.handle_key("DOWN")
        controller.update()
        self.assertEqual(len(forge.jobs), 0)

        controller.handle_key("DOWN")
        self.assertEqual(controller.items.selected_index, 27)
        controller.update()
        controller.update()
        self.assertEqual(len(forge.jobs), 1)

        forge.run_all()
        controller.update()
        self.assertEqual(len(controller.items), 40)
        self.assertFalse(controller.pagination.has_more)

        for _ in range(20):
            controller.handle_key("DOWN")
        controller.update()
        self.assertEqual(controller.items.selected_index, 39)
        self.assertEqual(forge.jobs, [])
        self.assertEqual([page for page, _ in forge.calls], [1, 2])

    def test_no_prefetch_while_search_bar_has_focus(self) -> None:
        forge = FakeForge({1: _page(0, 2, True)})
        controller = _controller(forge)
        controller.handle_key("TAB")
        controller.update()
        self.assertFalse(controller.is_fetching())
        controller.handle_key("TAB")
        controller.update()
        self.assertTrue(controller.is_fetching())

    def test_initial_options_filter_first_page(self) -> None:
        forge = FakeForge()
        controller = _controller(forge, initial_options={"author": "alice"})
        controller.update()
        forge.run_all()
        self.assertEqual(forge.calls, [(1, {"author": "alice"})])

    def test_fetch_failure_propagates_from_update(self) -> None:
        def fetch(page: int, options: FetchOptions) -> FetchResponse:
            raise RuntimeError("401 Unauthorized")

        jobs: list[Callable[[], None]] = []
        controller: SelectionController[FakeItem] = SelectionController(fetch, spawn=jobs.append)
        controller.update()
        jobs[0]()
        with self.assertRaisesRegex(RuntimeError, "401"):
            controller.update()


class SearchSubmitTests(unittest.TestCase):
    def test_enter_parses_query_saves_history_and_replaces_from_page_one(self) -> None:
        forge = FakeForge({1: _page(0, 30, True), 2: _page(30, 30, True)})
        controller = _controller(forge)
        controller.update()
        forge.run_all()
        controller.update()
        for _ in range(28):
            controller.handle_key("DOWN")
        controller.update()
        forge.run_all()
        controller.update()
        self.assertEqual(controller.pagination.current_page, 2)

        controller.handle_key("TAB")
        _type(controller, "bug @author=alice")
        controller.handle_key("ENTER")

        self.assertEqual(controller.mode, Mode(focus=Focus.LIST))
        self.assertEqual(controller.editor.query, "")
        self.assertEqual(controller.editor.history, ["bug @author=alice"])
        self.assertEqual(controller.pagination.current_page, 0)
        self.assertTrue(controller.pagination.has_more)

        forge.pages = {1: _page(100, 3, False)}
        forge.run_all()
        self.assertEqual(forge.calls[-1], (1, {"query": "bug", "author": "alice"}))
        controller.update()
        self.assertEqual([item.number for item in controller.items.items], [100, 101, 102])
        self.assertEqual(controller.items.selected_index, 0)
        self.assertEqual(controller.current_options, {"query": "bug", "author": "alice"})

    def test_stale_lookahead_result_never_reaches_list(self) -> None:
        forge = FakeForge({1: _page(0, 5, True)})
        controller = _controller(forge)
        controller.update()
        stale_job = forge.jobs.pop()

        controller.handle_key("TAB")
        _type(controller, "fresh")
        controller.handle_key("ENTER")
        fresh_job = forge.jobs.pop()

        forge.pages = {1: _page(500, 2, False)}
        fresh_job()
        forge.pages = {1: _page(0, 5, True)}
        stale_job()

        controller.update()
        self.assertEqual([item.number for item in controller.items.items], [500, 501])
        self.assertFalse(controller.pagination.has_more)
        controller.update()
        self.assertEqual(len(controller.items), 2)

    def test_late_stale_result_after_fresh_one_is_ignored(self) -> None:
        forge = FakeForge({1: _page(0, 5, True)})
        controller = _controller(forge)
        controller.update()
        stale_job = forge.jobs.pop()
        controller.handle_key("TAB")
        controller.handle_key("x")
        controller.handle_key("ENTER")
        forge.pages = {1: _page(900, 1, False)}
        forge.run_all()
        controller.update()
        forge.pages = {1: _page(0, 5, True)}
        stale_job()
        controller.update()
        self.assertEqual([item.number for item in controller.items.items], [900])


class KeyRoutingTests(unittest.TestCase):
    def setUp(self) -> None:
        self.forge = FakeForge({1: _page(0, 12, False)})
        self.controller = _controller(self.forge)
        self.controller.update()
        self.forge.run_all()
        self.controller.update()

    def test_escape_and_ctrl_c_quit_from_list(self) -> None:
        self.assertEqual(self.controller.handle_key("ESC"), Quit())
        self.assertEqual(self.controller.handle_key("CTRL_C"), Quit())

    def test_enter_selects_highlighted_item(self) -> None:
        self.controller.handle_key("DOWN")
        self.controller.handle_key("DOWN")
        self.assertEqual(self.controller.handle_key("ENTER"), Select(2))

    def test_enter_without_selection_is_noop(self) -> None:
        controller = _controller(FakeForge())
        self.assertIsNone(controller.handle_key("ENTER"))

    def test_typing_in_list_moves_text_into_search_bar(self) -> None:
        self.controller.handle_key("b")
        self.assertEqual(self.controller.focus, Focus.SEARCH_BAR)
        self.assertEqual(self.controller.editor.query, "b")

    def test_page_keys_use_viewport_rows(self) -> None:
        self.controller.set_viewport_rows(5)
        self.controller.handle_key("PAGE_DOWN")
        self.assertEqual(self.controller.items.selected_index, 4)
        self.controller.handle_key("PAGE_UP")
        self.assertEqual(self.controller.items.selected_index, 0)

    def test_escape_in_search_bar_clears_before_quitting(self) -> None:
        self.controller.handle_key("TAB")
        _type(self.controller, "abc")
        self.assertIsNone(self.controller.handle_key("ESC"))
        self.assertEqual(self.controller.editor.query, "")
        self.assertEqual(self.controller.focus, Focus.SEARCH_BAR)
        self.assertEqual(self.controller.handle_key("ESC"), Quit())

    def test_search_bar_editing_keys(self) -> None:
        controller = self.controller
        controller.handle_key("TAB")
        _type(controller, "fix the bug")
        controller.handle_key("ALT_BACKSPACE")
        self.assertEqual(controller.editor.query, "fix the ")
        controller.handle_key("CTRL_A")
        self.assertEqual(controller.editor.cursor, 0)
        controller.handle_key("DELETE")
        self.assertEqual(controller.editor.query, "ix the ")
        controller.handle_key("CTRL_RIGHT")
        self.assertEqual(controller.editor.cursor, 2)
        controller.handle_key("END")
        controller.handle_key("BACKSPACE")
        self.assertEqual(controller.editor.query, "ix the")
        controller.handle_key("CTRL_L")
        self.assertEqual(controller.editor.query, "")

    def test_search_bar_history_keys(self) -> None:
        controller = self.controller
        controller.editor.history = ["bug", "fix"]
        controller.handle_key("TAB")
        controller.handle_key("UP")
        controller.handle_key("UP")
        self.assertEqual(controller.editor.query, "bug")
        controller.handle_key("DOWN")
        controller.handle_key("DOWN")
        self.assertEqual(controller.editor.query, "")

    def test_question_mark_opens_help_only_on_empty_query(self) -> None:
        controller = self.controller
        controller.handle_key("TAB")
        _type(controller, "why")
        controller.handle_key("?")
        self.assertEqual(controller.editor.query, "why?")
        self.assertFalse(controller.mode.help)

        controller.handle_key("CTRL_L")
        controller.handle_key("?")
        self.assertEqual(controller.mode, Mode(focus=Focus.SEARCH_BAR, help=True))

    def test_help_restores_remembered_focus_on_any_key(self) -> None:
        controller = self.controller
        controller.handle_key("?")
        self.assertEqual(controller.mode, Mode(focus=Focus.LIST, help=True))
        self.assertIsNone(controller.handle_key("ESC"))
        self.assertEqual(controller.mode, Mode(focus=Focus.LIST))

        controller.handle_key("TAB")
        controller.handle_key("?")
        controller.handle_key("j")
        self.assertEqual(controller.mode, Mode(focus=Focus.SEARCH_BAR))
        self.assertEqual(controller.editor.query, "")

    def test_ctrl_c_quits_from_help(self) -> None:
        self.controller.handle_key("?")
        self.assertEqual(self.controller.handle_key("CTRL_C"), Quit())

    def test_tab_toggles_focus_without_editing(self) -> None:
        self.controller.handle_key("SHIFT_TAB")
        self.assertEqual(self.controller.focus, Focus.SEARCH_BAR)
        self.controller.handle_key("TAB")
        self.assertEqual(self.controller.focus, Focus.LIST)
        self.assertEqual(self.controller.editor.query, "")

    def test_empty_key_is_ignored(self) -> None:
        self.assertIsNone(self.controller.handle_key(""))
        self.assertEqual(self.controller.mode, Mode())

    def test_alt_letter_from_terminal_types_instead_of_quitting(self) -> None:
        read_fd, write_fd = os.pipe()
        self.addCleanup(os.close, read_fd)
        self.addCleanup(os.close, write_fd)
        os.write(write_fd, b"\x1bjab")
        reader = KeyReader(read_fd)

        for _ in range(3):
            self.assertIsNone(self.controller.handle_key(reader.read_key(timeout_ms=20)))

        self.assertEqual(self.controller.focus, Focus.SEARCH_BAR)
        self.assertEqual(self.controller.editor.query, "jab")


if __name__ == "__main__":
    unittest.main()
