"""``web``: print the URL of a repository page."""

from __future__ import annotations

import argparse

from ..forge import ApiType
from ..forge.types import WebTarget
from .common import prepare

CONFIG_FIELDS = {"api": ApiType}


def web(args: argparse.Namespace) -> None:
    _, _, client = prepare(args, "web", CONFIG_FIELDS)
    print(client.url_for_target(args.target or WebTarget.REPOSITORY))


__all__ = ["web"]
