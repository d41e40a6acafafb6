"""Search-bar query parsing into structured fetch options.

Tokens shaped like ``@key=value`` become filters; everything else is free
text stored under the reserved ``query`` key.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from enum import Enum
from typing import TypeVar

QUERY_KEY = "query"

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)


class FetchOptions(dict[str, str]):
    """Filter-key to filter-value mapping handed to the fetch callback."""

    def parse_str(self, key: str) -> str | None:
        value = self.get(key)
        return value if value else None

    def parse_enum(self, key: str, enum_type: type[E]) -> E | None:
        """Return the member of ``enum_type`` whose value matches, ignoring case."""
        value = self.get(key)
        if value is None:
            return None
        lowered = value.lower()
        for member in enum_type:
            if str(member.value).lower() == lowered:
                return member
        logger.debug("ignoring unknown %s filter value %r", key, value)
        return None

    def parse_list(self, key: str) -> list[str]:
        value = self.get(key)
        if not value:
            return []
        return [part.strip() for part in value.split(",") if part.strip()]

    def describe(self) -> str:
        """Render options back into search-bar syntax for the status line."""
        parts: list[str] = []
        free_text = self.get(QUERY_KEY)
        if free_text:
            parts.append(free_text)
        for key, value in self.items():
            if key != QUERY_KEY:
                parts.append(f"@{key}={value}")
        return " ".join(parts)


def parse(raw: str) -> FetchOptions:
    """Split ``raw`` into ``@key=value`` filters and free-text words."""
    options = FetchOptions()
    words: list[str] = []
    for token in raw.split():
        if token.startswith("@") and "=" in token:
            key, value = token[1:].split("=", 1)
            options[key] = value
            continue
        words.append(token)
    if words:
        options[QUERY_KEY] = " ".join(words)
    return options


def build_fetch_options(**values: object) -> FetchOptions:
    """Seed options from command-line filters.

    ``None``, empty strings, and empty lists are skipped; lists are joined
    with commas and enum members contribute their value.
    """
    options = FetchOptions()
    for key, value in values.items():
        if value is None or value == "" or value is False:
            continue
        if value is True:
            options[key] = "true"
        elif isinstance(value, Enum):
            options[key] = str(value.value)
        elif isinstance(value, Iterable) and not isinstance(value, str):
            joined = ",".join(str(item) for item in value)
            if joined:
                options[key] = joined
        else:
            options[key] = str(value)
    return options


__all__ = ["FetchOptions", "QUERY_KEY", "build_fetch_options", "parse"]
