"""Command-line front door for git-forge.

Builds the argparse tree (``issue``, ``pr``, ``browse``, ``web``, ``config``,
``completions``), configures logging, and dispatches to the handler stored on
each subparser.
User-facing failures become ``Error: <message>`` and a non-zero exit.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from collections.abc import Callable, Sequence
from enum import Enum

import argcomplete

from . import __version__
from .commands import browse, config, issue, pr, web
from .config import ConfigScope
from .errors import GitForgeError
from .forge import ApiType
from .forge.types import ISSUE_FIELDS, PR_FIELDS, IssueState, PrState, WebTarget
from .output import OutputFormat

LOG_LEVEL_ENV = "GIT_FORGE_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
PROG = "git-forge"
COMPLETION_SHELLS = ("bash", "zsh", "fish", "tcsh", "powershell")


def _positive_int(value: str) -> int:
    """argparse type for positive integer values."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be >= 1")
    return parsed


def _enum_type(enum_type: type[Enum]) -> Callable[[str], Enum]:
    choices = ", ".join(member.value for member in enum_type)

    def parse(value: str) -> Enum:
        try:
            return enum_type(value.strip().lower())
        except ValueError as exc:
            raise argparse.ArgumentTypeError(f"invalid choice: {value!r} (choose from {choices})") from exc

    return parse


def _comma_list(value: str) -> list[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


def _fields_type(allowed: Sequence[str]) -> Callable[[str], list[str]]:
    def parse(value: str) -> list[str]:
        fields = [part.lower() for part in _comma_list(value)]
        unknown = [name for name in fields if name not in allowed]
        if unknown:
            raise argparse.ArgumentTypeError(
                f"invalid field(s): {', '.join(unknown)} (choose from {', '.join(allowed)})"
            )
        return fields

    return parse


def _resolve_level(verbose: int) -> int:
    override = os.environ.get(LOG_LEVEL_ENV)
    if override:
        name = override.strip().upper()
        if name.isdigit():
            return int(name)
        level = logging.getLevelName(name)
        if isinstance(level, int):
            return level
    if verbose >= 2:
        return logging.DEBUG
    if verbose == 1:
        return logging.INFO
    return logging.WARNING


def configure_logging(verbose: int = 0, log_file: str | None = None) -> None:
    """Route log records to stderr, or to ``log_file`` so the TUI stays clean."""
    handler: logging.Handler
    if log_file:
        handler = logging.FileHandler(log_file, encoding="utf-8")
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(_resolve_level(verbose))


def _add_api_args(parser: argparse.ArgumentParser, api_url: bool = True) -> None:
    parser.add_argument(
        "--api",
        type=_enum_type(ApiType),
        metavar="TYPE",
        help="Forge type, which selects the API schema (github, gitlab, gitea, forgejo).",
    )
    if api_url:
        parser.add_argument(
            "--api-url",
            help="Base API URL (e.g. https://gitlab.com/api/v4) instead of the auto-detected one.",
        )
    parser.add_argument("--remote", help="Git remote to use (default: origin).")


def _add_list_args(parser: argparse.ArgumentParser, fields: Sequence[str], state: type[Enum]) -> None:
    _add_api_args(parser)
    parser.add_argument(
        "--auth",
        action="store_true",
        help="Authenticate with GIT_FORGE_GITHUB_TOKEN, GIT_FORGE_GITLAB_TOKEN or GIT_FORGE_GITEA_TOKEN.",
    )
    parser.add_argument("--author", metavar="USERNAME", help="Filter by author.")
    parser.add_argument(
        "-f",
        "--fields",
        type=_fields_type(fields),
        help=f"Fields to include in output, comma-separated ({', '.join(fields)}).",
    )
    parser.add_argument("--format", type=_enum_type(OutputFormat), help="Output format (csv, tsv, json).")
    parser.add_argument("--labels", type=_comma_list, help="Filter by labels, comma-separated.")
    parser.add_argument(
        "--per-page",
        "--limit",
        "-l",
        dest="per_page",
        type=_positive_int,
        metavar="NUMBER",
        help="Number of entries per page (default: 30).",
    )
    parser.add_argument("-q", "--query", help="Search keywords.")
    states = ", ".join(member.value for member in state)
    parser.add_argument("--state", type=_enum_type(state), help=f"Filter by state ({states}).")
    parser.add_argument("-w", "--web", action="store_true", help="Open the result in the web browser.")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "-i",
        "--interactive",
        action="store_true",
        help="Search and select an entry interactively.",
    )
    mode.add_argument("--page", type=_positive_int, default=1, metavar="NUMBER", help="Page number to fetch.")


def _add_issue_parser(subparsers) -> None:
    parser = subparsers.add_parser("issue", aliases=["i"], help="List and create issues.")
    commands = parser.add_subparsers(dest="issue_command", metavar="COMMAND", required=True)

    list_parser = commands.add_parser("list", aliases=["ls"], help="List issues.")
    _add_list_args(list_parser, ISSUE_FIELDS, IssueState)
    list_parser.add_argument("--assignee", metavar="USERNAME", help="Filter by assignee.")
    list_parser.set_defaults(func=issue.list_issues)

    create_parser = commands.add_parser("create", aliases=["cr"], help="Create an issue.")
    _add_api_args(create_parser)
    create_parser.add_argument("-b", "--body", help="Issue description.")
    create_parser.add_argument("-e", "--editor", action="store_true", help="Write the issue message in your editor.")
    create_parser.add_argument(
        "-n", "--no-browser", action="store_true", help="Print the issue URL instead of opening it."
    )
    create_parser.add_argument("-t", "--title", help="Issue title.")
    create_parser.add_argument("-w", "--web", action="store_true", help="Create the issue in the web browser.")
    create_parser.set_defaults(func=issue.create_issue)


def _add_pr_parser(subparsers) -> None:
    parser = subparsers.add_parser("pr", aliases=["p", "mr"], help="List, create and check out pull requests.")
    commands = parser.add_subparsers(dest="pr_command", metavar="COMMAND", required=True)

    list_parser = commands.add_parser("list", aliases=["ls"], help="List pull requests.")
    _add_list_args(list_parser, PR_FIELDS, PrState)
    list_parser.add_argument("--draft", action="store_true", help="Only list draft pull requests.")
    list_parser.set_defaults(func=pr.list_prs)

    create_parser = commands.add_parser("create", aliases=["cr"], help="Create a pull request.")
    _add_api_args(create_parser)
    create_parser.add_argument("-b", "--body", help="Pull request description.")
    create_parser.add_argument("--draft", action="store_true", help="Create as a draft.")
    create_parser.add_argument("-e", "--editor", action="store_true", help="Write the PR message in your editor.")
    create_parser.add_argument(
        "-n", "--no-browser", action="store_true", help="Print the PR URL instead of opening it."
    )
    create_parser.add_argument(
        "--push",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Push the current branch to the remote first (default: on).",
    )
    create_parser.add_argument("--target", help="Target branch (default: the remote's default branch).")
    create_parser.add_argument("-t", "--title", help="PR title (default: the current branch name).")
    create_parser.set_defaults(func=pr.create_pr)

    checkout_parser = commands.add_parser("checkout", aliases=["co"], help="Check out a pull request locally.")
    _add_api_args(checkout_parser)
    checkout_parser.add_argument("number", nargs="?", type=_positive_int, help="Pull request number.")
    checkout_parser.add_argument(
        "-i", "--interactive", action="store_true", help="Search and select the pull request interactively."
    )
    checkout_parser.add_argument(
        "--auth", action="store_true", help="Authenticate when listing pull requests interactively."
    )
    checkout_parser.add_argument(
        "--per-page",
        "--limit",
        "-l",
        dest="per_page",
        type=_positive_int,
        metavar="NUMBER",
        help="Number of entries per page in the interactive list.",
    )
    checkout_parser.set_defaults(func=pr.checkout_pr)


def _add_browse_parser(subparsers) -> None:
    parser = subparsers.add_parser("browse", aliases=["b"], help="Open repository pages in the web browser.")
    _add_api_args(parser, api_url=False)
    parser.add_argument("path", nargs="?", metavar="PATH[:LINE]", help="File or directory to open.")
    parser.add_argument(
        "-n", "--no-browser", action="store_true", help="Print the URL instead of opening it."
    )
    target = parser.add_mutually_exclusive_group()
    target.add_argument(
        "-c",
        "--commit",
        metavar="COMMIT_ISH",
        help="Open this commit, or the file at this commit when PATH is given.",
    )
    target.add_argument(
        "-i",
        "--issues",
        nargs="?",
        const=browse.LIST_PAGE,
        type=_positive_int,
        metavar="NUMBER",
        help="Open the issues page, or one issue.",
    )
    target.add_argument(
        "-p",
        "--prs",
        "-m",
        "--mrs",
        dest="prs",
        nargs="?",
        const=browse.LIST_PAGE,
        type=_positive_int,
        metavar="NUMBER",
        help="Open the pull requests page, or one pull request.",
    )
    parser.set_defaults(func=browse.browse)


def _add_web_parser(subparsers) -> None:
    parser = subparsers.add_parser("web", aliases=["w"], help="Print the web URL of the repository.")
    _add_api_args(parser, api_url=False)
    parser.add_argument(
        "--target",
        type=_enum_type(WebTarget),
        help="Page to print (repository, issues, prs, mrs).",
    )
    parser.set_defaults(func=web.web)


def _add_scope_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--scope", type=_enum_type(ConfigScope), help="Config scope (global, host, remote).")
    parser.add_argument("--remote", help="Git remote that keys the host and remote scopes (default: origin).")


def _add_config_parser(subparsers) -> None:
    parser = subparsers.add_parser("config", help="Read and write git-forge configuration.")
    commands = parser.add_subparsers(dest="config_command", metavar="COMMAND", required=True)

    get_parser = commands.add_parser("get", help="Print a value, or every value when PATH is omitted.")
    get_parser.add_argument("path", nargs="?", help="Config path such as pr/create/editor.")
    _add_scope_args(get_parser)
    get_parser.set_defaults(func=config.config_get)

    set_parser = commands.add_parser("set", help="Set a value (global scope by default).")
    set_parser.add_argument("path")
    set_parser.add_argument("value")
    _add_scope_args(set_parser)
    set_parser.set_defaults(func=config.config_set)

    unset_parser = commands.add_parser("unset", aliases=["delete"], help="Remove a value.")
    unset_parser.add_argument("path")
    _add_scope_args(unset_parser)
    unset_parser.set_defaults(func=config.config_unset)

    edit_parser = commands.add_parser("edit", help="Open the config file in your editor.")
    edit_parser.set_defaults(func=config.config_edit)


def print_completions(args: argparse.Namespace) -> None:
    """Print the completion script for ``args.shell``.

    The script calls back into git-forge, which answers through
    ``argcomplete.autocomplete`` in ``main``.
    """
    print(argcomplete.shellcode([PROG], shell=args.shell), end="")


def _add_completions_parser(subparsers) -> None:
    parser = subparsers.add_parser("completions", help="Print a shell completion script.")
    parser.add_argument("shell", choices=COMPLETION_SHELLS, help="Shell to generate completions for.")
    parser.set_defaults(func=print_completions)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROG,
        description="Work with issues and pull requests on GitHub, GitLab, Gitea and Forgejo.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Log more (-v info, -vv debug).")
    parser.add_argument("--log-file", metavar="PATH", help="Write logs to PATH instead of stderr.")
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND", required=True)
    _add_issue_parser(subparsers)
    _add_pr_parser(subparsers)
    _add_browse_parser(subparsers)
    _add_web_parser(subparsers)
    _add_config_parser(subparsers)
    _add_completions_parser(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> None:
    """Parse ``argv`` (default ``sys.argv[1:]``) and run the chosen command."""
    parser = build_parser()
    argcomplete.autocomplete(parser)
    args = parser.parse_args(argv)
    configure_logging(args.verbose, args.log_file)
    try:
        args.func(args)
    except GitForgeError as exc:
        raise SystemExit(f"Error: {exc}") from exc
    except KeyboardInterrupt:
        raise SystemExit(130) from None


if __name__ == "__main__":
    main()
