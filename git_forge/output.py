"""Render issues and pull requests as TSV, CSV or JSON."""

from __future__ import annotations

import csv
import io
import json
from collections.abc import Iterable, Sequence
from enum import Enum
from typing import Protocol

from pygments import highlight
from pygments.formatters import TerminalFormatter
from pygments.lexers import JsonLexer


class OutputFormat(Enum):
    CSV = "csv"
    TSV = "tsv"
    JSON = "json"


class Record(Protocol):
    def field_value(self, name: str) -> object: ...


def stringify(value: object) -> str:
    """Flatten a field value into one delimited-output cell."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join(stringify(item) for item in value)
    return str(value)


def _format_delimited(items: Iterable[Record], fields: Sequence[str], delimiter: str) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, delimiter=delimiter, lineterminator="\n")
    for item in items:
        writer.writerow([stringify(item.field_value(name)) for name in fields])
    return buffer.getvalue().removesuffix("\n")


def _format_json(items: Iterable[Record], fields: Sequence[str]) -> str:
    rows = [{name: item.field_value(name) for name in fields} for item in items]
    return json.dumps(rows, indent=2, ensure_ascii=False)


def format_items(items: Iterable[Record], fields: Sequence[str], output_format: OutputFormat) -> str:
    """Serialize ``items`` restricted to ``fields`` in order, without headers."""
    if output_format is OutputFormat.JSON:
        return _format_json(items, fields)
    delimiter = "\t" if output_format is OutputFormat.TSV else ","
    return _format_delimited(items, fields, delimiter)


def colorize_json(text: str) -> str:
    return highlight(text, JsonLexer(), TerminalFormatter()).rstrip("\n")


def render(
    items: Sequence[Record],
    fields: Sequence[str],
    output_format: OutputFormat,
    color: bool = False,
) -> str:
    text = format_items(items, fields, output_format)
    if color and output_format is OutputFormat.JSON:
        return colorize_json(text)
    return text


__all__ = ["OutputFormat", "colorize_json", "format_items", "render", "stringify"]
