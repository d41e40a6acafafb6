"""Blocking entry point that runs one interactive selection session."""

from __future__ import annotations

import logging
import sys
import termios
from collections.abc import Mapping
from typing import TypeVar

from ..errors import InvalidSelection, SelectionAborted, SelectionError
from .controller import Quit, Select, SelectionController
from .fetch import FetchCallback
from .input import KeyReader
from .render import SelectionScreen
from .terminal import TerminalController

logger = logging.getLogger(__name__)

T = TypeVar("T")

INPUT_POLL_TIMEOUT_MS = 100


def run_selection(
    controller: SelectionController[T],
    terminal: TerminalController,
    keys: KeyReader,
) -> T:
    """Drive ``controller`` until the user selects or quits.

    Each pass renders, runs one controller tick, then waits up to
    ``INPUT_POLL_TIMEOUT_MS`` for a key.
    """
    screen = SelectionScreen()
    while True:
        columns, rows = terminal.size()
        terminal.write(screen.render(controller, columns, rows))
        controller.update()
        action = controller.handle_key(keys.read_key(timeout_ms=INPUT_POLL_TIMEOUT_MS))
        if isinstance(action, Quit):
            raise SelectionAborted()
        if isinstance(action, Select):
            items = controller.items.items
            if not 0 <= action.index < len(items):
                raise InvalidSelection(action.index)
            logger.debug("selected item %d of %d", action.index, len(items))
            return items[action.index]


def select_item_with(
    fetch: FetchCallback,
    initial_options: Mapping[str, str] | None = None,
) -> T:
    """Let the user pick one item from a paginated, searchable collection.

    ``fetch(page, options)`` runs on worker threads and returns a
    ``FetchResponse``. ``initial_options`` filter the first page. Raises
    ``SelectionAborted`` on cancel, ``InvalidSelection`` on a stale index,
    and re-raises whatever ``fetch`` raised.
    """
    stdin_fd = sys.stdin.fileno()
    stdout_fd = sys.stdout.fileno()
    sys.stdout.flush()
    try:
        terminal = TerminalController(stdin_fd, stdout_fd)
    except termios.error as exc:
        raise SelectionError("Interactive selection requires a terminal") from exc
    controller: SelectionController[T] = SelectionController(fetch, initial_options)
    with terminal.raw_mode():
        return run_selection(controller, terminal, KeyReader(stdin_fd))


__all__ = ["INPUT_POLL_TIMEOUT_MS", "run_selection", "select_item_with"]
