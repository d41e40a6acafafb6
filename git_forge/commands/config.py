"""``config get|set|unset|edit``."""

from __future__ import annotations

import argparse
import logging
import sys

from .. import git
from ..config import CONFIG_PATH, Config, ConfigScope, host_key, remote_key
from ..editor import edit_file
from ..errors import ConfigError, GitError
from ..git import GitRemoteData
from .common import DEFAULT_REMOTE

logger = logging.getLogger(__name__)


def remote_for_scope(scope: ConfigScope, remote_name: str | None) -> GitRemoteData | None:
    """Host and remote scopes are keyed by the remote; global needs none."""
    if scope is ConfigScope.GLOBAL:
        return None
    name = remote_name or DEFAULT_REMOTE
    try:
        return git.get_remote_data(name)
    except GitError as exc:
        raise ConfigError(f"Failed to get remote URL for remote '{name}': {exc}") from exc


def _optional_remote(remote_name: str | None) -> GitRemoteData | None:
    try:
        return git.get_remote_data(remote_name or DEFAULT_REMOTE)
    except GitError as exc:
        logger.debug("no remote data, showing global values only: %s", exc)
        return None


def _scope_entries(config: Config, scope: ConfigScope, remote: GitRemoteData | None) -> list[tuple[str, str]]:
    if scope is ConfigScope.GLOBAL:
        table = config.global_values
    elif scope is ConfigScope.HOST:
        table = config.host.get(host_key(remote), {})
    else:
        table = config.remote.get(remote_key(remote), {})
    return sorted(table.items())


def config_get(args: argparse.Namespace) -> None:
    config = Config.load()
    if args.scope is not None:
        remote = remote_for_scope(args.scope, args.remote)
        if args.path is None:
            for path, value in _scope_entries(config, args.scope, remote):
                print(f"{path} = {value}")
            return
        value = config.get_value_from_scope(args.path, args.scope, remote)
        if value is None:
            print(f"No value found for '{args.path}' in {args.scope}", file=sys.stderr)
        else:
            print(value)
        return

    remote = _optional_remote(args.remote)
    if args.path is None:
        for path, value, scope in config.effective_entries(remote):
            print(f"{path} = {value} ({scope})")
        return
    found = config.get_value_effective(args.path, remote)
    if found is None:
        print(f"No value found for '{args.path}'", file=sys.stderr)
    else:
        print(found[0])


def config_set(args: argparse.Namespace) -> None:
    config = Config.load()
    scope = args.scope or ConfigScope.GLOBAL
    config.set_value(args.path, args.value, scope, remote_for_scope(scope, args.remote))
    config.save()


def config_unset(args: argparse.Namespace) -> None:
    config = Config.load()
    scope = args.scope or ConfigScope.GLOBAL
    if config.unset_value(args.path, scope, remote_for_scope(scope, args.remote)):
        config.save()
        print(f"Unset '{args.path}' from {scope}")
    else:
        print(f"No value found for '{args.path}' in {scope}", file=sys.stderr)


def config_edit(args: argparse.Namespace) -> None:
    config = Config.load()
    if not CONFIG_PATH.exists():
        config.save()
    edit_file(CONFIG_PATH, config.global_values.get("editor-command"))
    try:
        Config.load()
    except ConfigError as exc:
        raise ConfigError(f"The config file may be corrupted. Please check the JSON file. ({exc})") from exc
    print("Configuration saved successfully.")


__all__ = ["config_edit", "config_get", "config_set", "config_unset", "remote_for_scope"]
