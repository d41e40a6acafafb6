"""Interactive paginated search-and-select screen.

``select_item_with`` is the entry point; the remaining exports let callers
shape fetch options and responses.
"""

from __future__ import annotations

from .fetch import FetchResponse
from .item_list import ListableItem
from .query import FetchOptions, build_fetch_options
from .session import select_item_with

__all__ = [
    "FetchOptions",
    "FetchResponse",
    "ListableItem",
    "build_fetch_options",
    "select_item_with",
]
