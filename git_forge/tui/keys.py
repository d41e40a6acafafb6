"""Key-token dispatch tables for the selection screen."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

R = TypeVar("R")


@dataclass(frozen=True)
class KeyBinding(Generic[R]):
    """One or more key tokens mapped to a single handler."""

    combos: tuple[str, ...]
    handler: Callable[[], R | None]


class KeyBindings(Generic[R]):
    """Exact-match key dispatch; later bindings override earlier ones."""

    def __init__(self, *bindings: KeyBinding[R]) -> None:
        self._handlers: dict[str, Callable[[], R | None]] = {}
        for binding in bindings:
            self.bind(binding)

    def bind(self, binding: KeyBinding[R]) -> KeyBindings[R]:
        for combo in binding.combos:
            self._handlers[combo] = binding.handler
        return self

    def __contains__(self, key: str) -> bool:
        return key in self._handlers

    def dispatch(self, key: str) -> R | None:
        """Run the handler bound to ``key``; unbound keys return ``None``."""
        handler = self._handlers.get(key)
        if handler is None:
            return None
        return handler()


def is_text_key(key: str) -> bool:
    """Return whether ``key`` is typed text rather than a named key token."""
    return len(key) == 1 and key.isprintable()


__all__ = ["KeyBinding", "KeyBindings", "is_text_key"]
