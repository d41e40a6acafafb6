"""``browse``: open (or print) a repository page, commit, file, issue or PR."""

from __future__ import annotations

import argparse
from pathlib import Path

from .. import git
from ..errors import GitForgeError
from ..forge import ApiType, ForgeClient
from .common import open_url, prepare

CONFIG_FIELDS = {
    "api": ApiType,
    "no_browser": bool,
}

# ``-i``/``-p`` without a number: open the listing page.
LIST_PAGE = True


def split_line_number(path: str) -> tuple[str, int | None]:
    """``src/main.py:12`` -> ``("src/main.py", 12)``; anything else is all path."""
    file_part, sep, line_part = path.rpartition(":")
    if sep and line_part.isdigit():
        return file_part, int(line_part)
    return path, None


def repo_relative_path(path: str) -> str:
    """Resolve ``path`` against the cwd and express it relative to the repo root."""
    try:
        absolute = Path(path).resolve(strict=True)
    except OSError as exc:
        raise GitForgeError(f"Failed to canonicalize the given file path: {path}") from exc
    root = Path(git.get_repo_root()).resolve()
    try:
        relative = absolute.relative_to(root)
    except ValueError as exc:
        raise GitForgeError("Failed to resolve relative file path") from exc
    return relative.as_posix() if relative.parts else ""


def url_for_path(client: ForgeClient, path: str, commit_ish: str | None) -> str:
    file_path, line = split_line_number(path)
    relative = repo_relative_path(file_path)
    if commit_ish is None:
        commit = "HEAD"
    else:
        try:
            commit = git.rev_parse(commit_ish)
        except GitForgeError as exc:
            raise GitForgeError(f"Failed to resolve commit-ish: {commit_ish} ({exc})") from exc
    return client.url_for_path(relative, commit, line)


def browse_url(client: ForgeClient, args: argparse.Namespace) -> str:
    """Pick the URL the arguments ask for; path beats commit beats issues beats PRs."""
    if args.path is not None:
        return url_for_path(client, args.path, args.commit)
    if args.commit is not None:
        return client.url_for_commit(git.rev_parse(args.commit))
    if args.issues is not None:
        if args.issues is LIST_PAGE:
            return client.url_for_issues()
        return client.url_for_issue(args.issues)
    if args.prs is not None:
        if args.prs is LIST_PAGE:
            return client.url_for_prs()
        return client.url_for_pr(args.prs)
    return client.url_for_home()


def print_or_open(url: str, no_browser: bool) -> None:
    if no_browser:
        print(url)
    else:
        open_url(url)


def browse(args: argparse.Namespace) -> None:
    _, _, client = prepare(args, "browse", CONFIG_FIELDS)
    print_or_open(browse_url(client, args), args.no_browser)


__all__ = ["LIST_PAGE", "browse", "browse_url", "split_line_number"]
