"""Git subprocess helpers and remote URL parsing.

All commands run in the current working directory. Failures raise
``GitError`` carrying git's stderr.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass

from .errors import GitError

logger = logging.getLogger(__name__)

MAX_PORT = 65535


@dataclass(frozen=True)
class GitRemoteData:
    """Host, repository path and optional port parsed from a remote URL."""

    host: str
    path: str
    port: int | None = None

    @property
    def host_with_port(self) -> str:
        if self.port is None:
            return self.host
        return f"{self.host}:{self.port}"


def _parse_host_port(value: str) -> tuple[str, int | None] | None:
    host, sep, port_text = value.rpartition(":")
    if not sep:
        return value, None
    if not port_text.isdigit() or int(port_text) > MAX_PORT:
        return None
    return host, int(port_text)


def _strip_git_suffix(path: str) -> str:
    return path[: -len(".git")] if path.endswith(".git") else path


def parse_remote_url(url: str) -> GitRemoteData | None:
    """Parse an https, ``ssh://git@`` or scp-style ``git@host:path`` remote.

    Returns ``None`` for anything else, including an invalid port.
    """
    for prefix in ("https://", "ssh://git@"):
        if url.startswith(prefix):
            authority, sep, path = url[len(prefix):].partition("/")
            if not sep:
                return None
            parsed = _parse_host_port(authority)
            if parsed is None:
                return None
            host, port = parsed
            return GitRemoteData(host=host, path=_strip_git_suffix(path), port=port)

    if url.startswith("git@"):
        host, sep, path = url[len("git@"):].partition(":")
        if not sep:
            return None
        return GitRemoteData(host=host, path=_strip_git_suffix(path))

    return None


def _run_git(args: list[str], action: str) -> str:
    """Run ``git *args`` and return stripped stdout, raising on failure."""
    logger.debug("running git %s", " ".join(args))
    try:
        proc = subprocess.run(
            ["git", *args],
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
        )
    except OSError as exc:
        raise GitError(f"Failed to execute git: {exc}") from exc
    if proc.returncode != 0:
        raise GitError(f"{action}: {proc.stderr.strip()}")
    return proc.stdout.strip()


def _git_succeeds(args: list[str]) -> bool:
    logger.debug("probing git %s", " ".join(args))
    try:
        proc = subprocess.run(
            ["git", *args],
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            text=True,
            check=False,
        )
    except OSError as exc:
        raise GitError(f"Failed to execute git: {exc}") from exc
    return proc.returncode == 0


def get_remote_url(remote: str) -> str:
    return _run_git(["remote", "get-url", remote], f"Failed to get URL for remote '{remote}'")


def get_remote_data(remote: str) -> GitRemoteData:
    remote_url = get_remote_url(remote)
    data = parse_remote_url(remote_url)
    if data is None:
        raise GitError(
            "Couldn't parse git remote URL. Unrecognized format. "
            f"Supported: https and ssh. Found remote URL: {remote_url}"
        )
    return data


def fetch_pull_request(pr_ref: str, branch_name: str, remote: str) -> None:
    _run_git(["fetch", remote, f"{pr_ref}:{branch_name}"], f"Failed to fetch pull request ref {pr_ref}")


def checkout_branch(branch_name: str) -> None:
    _run_git(["checkout", branch_name], f'Failed to checkout branch "{branch_name}"')


def get_current_branch() -> str:
    branch = _run_git(["branch", "--show-current"], "Failed to get current branch")
    if not branch:
        raise GitError("No branch checked out.")
    return branch


def get_default_branch(remote: str) -> str:
    """Return the remote's default branch name.

    Reads ``refs/remotes/<remote>/HEAD`` and falls back to whichever of
    ``main`` or ``master`` exists on the remote.
    """
    try:
        ref_name = _run_git(["symbolic-ref", f"refs/remotes/{remote}/HEAD"], "symbolic-ref")
    except GitError:
        ref_name = ""
    if ref_name:
        return ref_name.rsplit("/", 1)[-1]

    for branch in ("main", "master"):
        if _git_succeeds(["rev-parse", "--verify", "--quiet", f"{remote}/{branch}"]):
            return branch
    raise GitError("Couldn't determine default branch")


def push_branch(branch: str, remote: str, set_upstream: bool = True) -> None:
    args = ["push", remote, branch]
    if set_upstream:
        args.append("-u")
    _run_git(args, f'Failed to push branch "{branch}" to {remote}')


def rev_parse(arg: str) -> str:
    sha = _run_git(["rev-parse", arg], f"Failed to git rev-parse {arg}")
    if not sha:
        raise GitError("No commit hash")
    return sha


def get_repo_root() -> str:
    return rev_parse("--show-toplevel")


__all__ = [
    "GitRemoteData",
    "checkout_branch",
    "fetch_pull_request",
    "get_current_branch",
    "get_default_branch",
    "get_remote_data",
    "get_remote_url",
    "get_repo_root",
    "parse_remote_url",
    "push_branch",
    "rev_parse",
]
