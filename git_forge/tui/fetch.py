"""Background page fetching through a single replaceable result slot.

Each scheduled fetch runs on its own daemon thread and reports into a fresh
one-item queue. Only the most recently installed queue is ever polled, so a
worker whose slot was replaced finishes into a queue nobody reads.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from queue import Empty, Queue
from typing import Generic, TypeVar

from .query import FetchOptions

logger = logging.getLogger(__name__)

T = TypeVar("T")


class MergeMode(Enum):
    APPEND = "append"
    REPLACE = "replace"


@dataclass(frozen=True)
class FetchRequest:
    """One page request and how its items merge into the list."""

    page: int
    options: FetchOptions
    mode: MergeMode


@dataclass(frozen=True)
class FetchResponse(Generic[T]):
    """Items for one page and whether a further page exists."""

    items: Sequence[T] = field(default_factory=list)
    has_more: bool = False


@dataclass(frozen=True)
class FetchOutcome(Generic[T]):
    """Completed fetch tagged with its originating request."""

    request: FetchRequest
    response: FetchResponse[T] | None = None
    error: BaseException | None = None

    def unwrap(self) -> FetchResponse[T]:
        """Return the response, re-raising the callback's exception on failure."""
        if self.error is not None:
            raise self.error
        assert self.response is not None
        return self.response


FetchCallback = Callable[[int, FetchOptions], FetchResponse]


def spawn_daemon_thread(job: Callable[[], None]) -> None:
    worker = threading.Thread(target=job, name="git-forge-fetch", daemon=True)
    worker.start()


class FetchScheduler(Generic[T]):
    """Owns at most one in-flight fetch; last scheduled wins.

    ``spawn`` runs a zero-argument job off the calling thread. Tests may pass
    their own to control when workers start.
    """

    def __init__(
        self,
        fetch: FetchCallback,
        spawn: Callable[[Callable[[], None]], None] = spawn_daemon_thread,
    ) -> None:
        self._fetch = fetch
        self._spawn = spawn
        self._slot: Queue[FetchOutcome[T]] | None = None
        self._in_flight: FetchRequest | None = None
        self.current_options = FetchOptions()

    def schedule(self, request: FetchRequest) -> None:
        self.current_options = request.options
        slot: Queue[FetchOutcome[T]] = Queue(maxsize=1)
        if self._in_flight is not None:
            logger.debug("superseding in-flight fetch for page %d", self._in_flight.page)
        self._slot = slot
        self._in_flight = request
        logger.debug("scheduling %s fetch for page %d", request.mode.value, request.page)
        self._spawn(lambda: self._run(request, slot))

    def _run(self, request: FetchRequest, slot: Queue[FetchOutcome[T]]) -> None:
        try:
            response = self._fetch(request.page, request.options)
        except BaseException as exc:
            # Delivered to the UI thread, which re-raises it from unwrap().
            outcome: FetchOutcome[T] = FetchOutcome(request=request, error=exc)
        else:
            outcome = FetchOutcome(request=request, response=response)
        slot.put_nowait(outcome)

    def poll(self) -> FetchOutcome[T] | None:
        """Return the current slot's outcome if ready, freeing the slot."""
        if self._slot is None:
            return None
        try:
            outcome = self._slot.get_nowait()
        except Empty:
            return None
        self._slot = None
        self._in_flight = None
        return outcome

    def reset(self) -> None:
        """Forget the current slot; its worker keeps running unobserved."""
        if self._in_flight is not None:
            logger.debug("discarding fetch for page %d", self._in_flight.page)
        self._slot = None
        self._in_flight = None

    def is_fetching(self) -> bool:
        return self._slot is not None


__all__ = [
    "FetchCallback",
    "FetchOutcome",
    "FetchRequest",
    "FetchResponse",
    "FetchScheduler",
    "MergeMode",
    "spawn_daemon_thread",
]
