"""Scoped persistent configuration.

Values live in a JSON file under the platform config dir and are plain
strings keyed by a path of the form ``[<command path>/]<flag>``, such as
``editor``, ``pr/editor`` or ``pr/create/editor``. A lookup tries the full path
and then progressively shorter command paths within one scope before moving
to the next scope: remote, then host, then global.
"""

from __future__ import annotations

import argparse
import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TypeVar

from platformdirs import user_config_dir

from .errors import ConfigError
from .git import GitRemoteData

logger = logging.getLogger(__name__)

APP_NAME = "git-forge"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME

E = TypeVar("E", bound=Enum)


class ConfigScope(Enum):
    GLOBAL = "global"
    HOST = "host"
    REMOTE = "remote"

    def __str__(self) -> str:
        return f"{self.value} scope"


@dataclass(frozen=True)
class Choices:
    """Comma-separated list restricted to ``values``; used for ``--fields``."""

    values: tuple[str, ...]


def host_key(remote: GitRemoteData) -> str:
    return remote.host_with_port


def remote_key(remote: GitRemoteData) -> str:
    return f"{remote.host_with_port}/{remote.path}"


def get_path_variants(path: str) -> list[str]:
    """``pr/create/editor`` -> ``[pr/create/editor, pr/editor, editor]``."""
    parts = path.split("/")
    flag = parts[-1]
    command_parts = parts[:-1]
    if not command_parts:
        return [flag]
    variants = [path]
    for end in range(len(command_parts) - 1, 0, -1):
        variants.append("/".join([*command_parts[:end], flag]))
    variants.append(flag)
    return variants


def _string_table(value: object, where: str) -> dict[str, str]:
    if not isinstance(value, dict):
        raise ConfigError(f"Invalid configuration: '{where}' must be an object")
    table: dict[str, str] = {}
    for key, item in value.items():
        if not isinstance(item, str):
            raise ConfigError(f"Invalid configuration: '{where}.{key}' must be a string")
        table[str(key)] = item
    return table


@dataclass
class Config:
    global_values: dict[str, str] = field(default_factory=dict)
    host: dict[str, dict[str, str]] = field(default_factory=dict)
    remote: dict[str, dict[str, str]] = field(default_factory=dict)

    # Persistence

    @classmethod
    def from_dict(cls, data: object) -> Config:
        if not isinstance(data, dict):
            raise ConfigError("Invalid configuration: top level must be an object")
        unknown = set(data) - {"global", "host", "remote"}
        if unknown:
            raise ConfigError(f"Invalid configuration: unknown section(s) {', '.join(sorted(unknown))}")
        hosts = data.get("host", {})
        remotes = data.get("remote", {})
        if not isinstance(hosts, dict) or not isinstance(remotes, dict):
            raise ConfigError("Invalid configuration: 'host' and 'remote' must be objects")
        return cls(
            global_values=_string_table(data.get("global", {}), "global"),
            host={key: _string_table(value, f"host.{key}") for key, value in hosts.items()},
            remote={key: _string_table(value, f"remote.{key}") for key, value in remotes.items()},
        )

    def to_dict(self) -> dict[str, object]:
        return {"global": self.global_values, "host": self.host, "remote": self.remote}

    @classmethod
    def load(cls, path: Path | None = None) -> Config:
        """Read the config file; a missing file is an empty config."""
        config_path = path or CONFIG_PATH
        try:
            text = config_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return cls()
        except OSError as exc:
            raise ConfigError(f"Failed to read configuration {config_path}: {exc}") from exc
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Failed to parse configuration {config_path}: {exc}") from exc
        return cls.from_dict(data)

    def save(self, path: Path | None = None) -> None:
        config_path = path or CONFIG_PATH
        try:
            config_path.parent.mkdir(parents=True, exist_ok=True)
            config_path.write_text(json.dumps(self.to_dict(), indent=2, sort_keys=True) + "\n", encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"Failed to save configuration {config_path}: {exc}") from exc

    # Lookup

    def scope_table(self, scope: ConfigScope, remote: GitRemoteData | None) -> dict[str, str]:
        if scope is ConfigScope.GLOBAL:
            return self.global_values
        if remote is None:
            raise ConfigError(f"Remote data required for {scope}")
        if scope is ConfigScope.HOST:
            return self.host.get(host_key(remote), {})
        return self.remote.get(remote_key(remote), {})

    def get_value_from_scope(self, path: str, scope: ConfigScope, remote: GitRemoteData | None) -> str | None:
        table = self.scope_table(scope, remote)
        for variant in get_path_variants(path):
            if variant in table:
                return table[variant]
        return None

    def get_value_effective(self, path: str, remote: GitRemoteData | None) -> tuple[str, ConfigScope] | None:
        scopes = [ConfigScope.REMOTE, ConfigScope.HOST] if remote is not None else []
        for scope in [*scopes, ConfigScope.GLOBAL]:
            value = self.get_value_from_scope(path, scope, remote)
            if value is not None:
                return value, scope
        return None

    def get_string(self, path: str, remote: GitRemoteData | None = None) -> str | None:
        found = self.get_value_effective(path, remote)
        return found[0] if found else None

    def get_bool(self, path: str, remote: GitRemoteData | None = None) -> bool | None:
        found = self.get_value_effective(path, remote)
        if found is None:
            return None
        value, scope = found
        if value in ("true", "false"):
            return value == "true"
        logger.warning(
            "Invalid boolean value for '%s' in %s: '%s' (expected 'true' or 'false')", path, scope, value
        )
        return None

    def get_int(self, path: str, remote: GitRemoteData | None = None) -> int | None:
        found = self.get_value_effective(path, remote)
        if found is None:
            return None
        value, scope = found
        if value.isdigit():
            return int(value)
        logger.warning(
            "Invalid number value for '%s' in %s: '%s' (expected a positive integer)", path, scope, value
        )
        return None

    def get_enum(self, path: str, enum_type: type[E], remote: GitRemoteData | None = None) -> E | None:
        found = self.get_value_effective(path, remote)
        if found is None:
            return None
        value, scope = found
        for member in enum_type:
            if member.value == value.strip().lower():
                return member
        logger.warning(
            "Invalid value for '%s' in %s: '%s' (expected one of: %s)",
            path,
            scope,
            value,
            ", ".join(member.value for member in enum_type),
        )
        return None

    def get_choices(self, path: str, choices: Choices, remote: GitRemoteData | None = None) -> list[str] | None:
        found = self.get_value_effective(path, remote)
        if found is None:
            return None
        value, scope = found
        picked: list[str] = []
        for part in value.split(","):
            item = part.strip().lower()
            if item in choices.values:
                picked.append(item)
            else:
                logger.warning(
                    "Invalid value '%s' in list for '%s' in %s (expected one of: %s)",
                    part.strip(),
                    path,
                    scope,
                    ", ".join(choices.values),
                )
        return picked

    # Mutation

    def set_value(self, path: str, value: str, scope: ConfigScope, remote: GitRemoteData | None = None) -> None:
        if scope is ConfigScope.GLOBAL:
            self.global_values[path] = value
            return
        if remote is None:
            raise ConfigError(f"Remote data required for {scope}")
        tables = self.host if scope is ConfigScope.HOST else self.remote
        key = host_key(remote) if scope is ConfigScope.HOST else remote_key(remote)
        tables.setdefault(key, {})[path] = value

    def unset_value(self, path: str, scope: ConfigScope, remote: GitRemoteData | None = None) -> bool:
        """Remove ``path`` from one scope; report whether anything was there."""
        if scope is ConfigScope.GLOBAL:
            return self.global_values.pop(path, None) is not None
        if remote is None:
            raise ConfigError(f"Remote data required for {scope}")
        tables = self.host if scope is ConfigScope.HOST else self.remote
        key = host_key(remote) if scope is ConfigScope.HOST else remote_key(remote)
        table = tables.get(key)
        if table is None or path not in table:
            return False
        del table[path]
        if not table:
            del tables[key]
        return True

    def effective_entries(self, remote: GitRemoteData | None) -> list[tuple[str, str, ConfigScope]]:
        """Every known path with its winning value and scope, sorted by path."""
        paths = set(self.global_values)
        if remote is not None:
            paths.update(self.host.get(host_key(remote), {}))
            paths.update(self.remote.get(remote_key(remote), {}))
        entries: list[tuple[str, str, ConfigScope]] = []
        for path in sorted(paths):
            found = self.get_value_effective(path, remote)
            if found is not None:
                entries.append((path, found[0], found[1]))
        return entries


def _is_unset(value: object) -> bool:
    return value is None or value is False or (isinstance(value, list) and not value)


def merge_into_args(
    config: Config,
    args: argparse.Namespace,
    remote: GitRemoteData | None,
    command_path: str,
    fields: Mapping[str, object],
) -> None:
    """Fill unset ``args`` attributes from config.

    ``fields`` maps attribute names to their kind: ``str``, ``int``, ``bool``,
    an ``Enum`` subclass, or ``Choices``. The config path for ``per_page`` under
    ``issue/list`` is ``issue/list/per-page``.
    """
    for name, kind in fields.items():
        if not _is_unset(getattr(args, name, None)):
            continue
        path = f"{command_path}/{name.replace('_', '-')}"
        value: object
        if kind is bool:
            value = config.get_bool(path, remote)
        elif kind is int:
            value = config.get_int(path, remote)
        elif kind is str:
            value = config.get_string(path, remote)
        elif isinstance(kind, Choices):
            value = config.get_choices(path, kind, remote)
        elif isinstance(kind, type) and issubclass(kind, Enum):
            value = config.get_enum(path, kind, remote)
        else:
            raise TypeError(f"unsupported config kind for {name}: {kind!r}")
        if value is not None:
            setattr(args, name, value)


__all__ = [
    "APP_NAME",
    "CONFIG_PATH",
    "Choices",
    "Config",
    "ConfigScope",
    "get_path_variants",
    "host_key",
    "merge_into_args",
    "remote_key",
]
