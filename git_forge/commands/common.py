"""Helpers shared by the subcommands: remote/config resolution and output."""

from __future__ import annotations

import argparse
import logging
import sys
import webbrowser
from collections.abc import Mapping, Sequence

from .. import git
from ..config import Config, merge_into_args
from ..errors import GitForgeError
from ..forge import ForgeClient, create_client
from ..git import GitRemoteData
from ..output import OutputFormat, Record, render

logger = logging.getLogger(__name__)

DEFAULT_REMOTE = "origin"
DEFAULT_PER_PAGE = 30


def resolve_remote(config: Config, args: argparse.Namespace, command_path: str) -> GitRemoteData:
    """Pick ``--remote``, else the configured remote, else ``origin``, and parse its URL."""
    remote_name = args.remote or config.get_string(f"{command_path}/remote") or DEFAULT_REMOTE
    args.remote = remote_name
    return git.get_remote_data(remote_name)


def prepare(
    args: argparse.Namespace,
    command_path: str,
    fields: Mapping[str, object],
) -> tuple[Config, GitRemoteData, ForgeClient]:
    """Load config, resolve the remote, merge config defaults and build the client."""
    config = Config.load()
    remote = resolve_remote(config, args, command_path)
    merge_into_args(config, args, remote, command_path, fields)
    client = create_client(remote, getattr(args, "api", None), getattr(args, "api_url", None))
    logger.info("using %s client for %s", client.name, remote.host_with_port)
    return config, remote, client


def open_url(url: str) -> None:
    logger.info("opening %s", url)
    if not webbrowser.open(url):
        raise GitForgeError(f"Failed to open a web browser for {url}")


def emit_items(items: Sequence[Record], fields: Sequence[str], output_format: OutputFormat) -> None:
    if not items:
        return
    print(render(items, fields, output_format, color=sys.stdout.isatty()))


__all__ = [
    "DEFAULT_PER_PAGE",
    "DEFAULT_REMOTE",
    "emit_items",
    "open_url",
    "prepare",
    "resolve_remote",
]
