"""``pr list``, ``pr create`` and ``pr checkout``."""

from __future__ import annotations

import argparse
import logging
import sys

from .. import git
from ..config import Choices
from ..editor import prompt_message
from ..errors import GitForgeError
from ..forge import ApiType, ForgeClient
from ..forge.types import (
    DEFAULT_FIELDS,
    PR_FIELDS,
    CreatePrOptions,
    ListPrsFilters,
    Pr,
    PrState,
)
from ..output import OutputFormat
from ..tui import FetchOptions, FetchResponse, build_fetch_options, select_item_with
from .common import DEFAULT_PER_PAGE, emit_items, open_url, prepare

logger = logging.getLogger(__name__)

LIST_CONFIG_FIELDS = {
    "api": ApiType,
    "api_url": str,
    "auth": bool,
    "fields": Choices(PR_FIELDS),
    "format": OutputFormat,
    "per_page": int,
    "state": PrState,
    "interactive": bool,
}
CREATE_CONFIG_FIELDS = {
    "api": ApiType,
    "api_url": str,
    "draft": bool,
    "editor": bool,
    "no_browser": bool,
    "target": str,
}
CHECKOUT_CONFIG_FIELDS = {
    "api": ApiType,
    "api_url": str,
    "auth": bool,
    "per_page": int,
}


def pr_fetcher(client: ForgeClient, per_page: int, use_auth: bool):
    """Adapt ``client.list_prs`` to the selection screen's fetch callback."""

    def fetch(page: int, options: FetchOptions) -> FetchResponse[Pr]:
        filters = ListPrsFilters(
            page=page,
            per_page=per_page,
            state=options.parse_enum("state", PrState) or PrState.OPEN,
            author=options.parse_str("author"),
            labels=tuple(options.parse_list("labels")),
            query=options.parse_str("query"),
            draft=options.parse_str("draft") == "true",
        )
        response = client.list_prs(filters, use_auth=use_auth)
        return FetchResponse(items=response.items, has_more=response.has_next_page)

    return fetch


def _select_pr(client: ForgeClient, args: argparse.Namespace) -> Pr:
    initial = build_fetch_options(
        author=getattr(args, "author", None),
        labels=getattr(args, "labels", None),
        query=getattr(args, "query", None),
        state=getattr(args, "state", None),
        draft=getattr(args, "draft", False),
    )
    print("Loading pull requests...", file=sys.stderr)
    per_page = args.per_page or DEFAULT_PER_PAGE
    return select_item_with(pr_fetcher(client, per_page, args.auth), initial)


def list_prs(args: argparse.Namespace) -> None:
    _, _, client = prepare(args, "pr/list", LIST_CONFIG_FIELDS)
    fields = args.fields or list(DEFAULT_FIELDS)
    output_format = args.format or OutputFormat.TSV

    if args.interactive:
        pr = _select_pr(client, args)
        emit_items([pr], fields, output_format)
        if args.web:
            open_url(pr.url)
        return

    if args.web:
        open_url(client.url_for_prs())
        return

    filters = ListPrsFilters(
        page=args.page,
        per_page=args.per_page or DEFAULT_PER_PAGE,
        state=args.state or PrState.OPEN,
        author=args.author,
        labels=tuple(args.labels or ()),
        query=args.query,
        draft=args.draft,
    )
    response = client.list_prs(filters, use_auth=args.auth)
    emit_items(response.items, fields, output_format)


def checkout_pr(args: argparse.Namespace) -> None:
    _, _, client = prepare(args, "pr/checkout", CHECKOUT_CONFIG_FIELDS)
    if args.number is None:
        if not args.interactive:
            raise GitForgeError("Provide a pull request number or use --interactive")
        number = _select_pr(client, args).id
    else:
        number = args.number

    branch_name = f"pr-{number}"
    git.fetch_pull_request(client.pr_ref(number), branch_name, args.remote)
    git.checkout_branch(branch_name)
    print(f'Successfully checked out PR "{number}" to branch "{branch_name}"', file=sys.stderr)


def create_pr(args: argparse.Namespace) -> None:
    config, _, client = prepare(args, "pr/create", CREATE_CONFIG_FIELDS)
    current_branch = git.get_current_branch()
    if args.target:
        target_branch = args.target
    else:
        try:
            target_branch = git.get_default_branch(args.remote)
        except GitForgeError as exc:
            raise GitForgeError(f"Couldn't create a PR. You can provide a --target explicitly. ({exc})") from exc

    if current_branch == target_branch:
        raise GitForgeError(f'Cannot create PR: current branch "{current_branch}" is the same as target branch.')

    if args.editor:
        message = prompt_message(config.get_string("editor-command"))
        if not message.title:
            raise GitForgeError("PR title cannot be empty. Please provide a title on the first line.")
        title, body = message.title, message.body
    else:
        title = args.title or current_branch
        body = args.body or ""

    if args.push:
        logger.info("pushing %s to %s", current_branch, args.remote)
        git.push_branch(current_branch, args.remote, set_upstream=True)

    pr = client.create_pr(
        CreatePrOptions(
            title=title,
            source_branch=current_branch,
            target_branch=target_branch,
            body=body,
            draft=args.draft,
        )
    )
    if args.no_browser:
        print(f"PR created at {pr.url}")
    else:
        open_url(pr.url)


__all__ = ["checkout_pr", "create_pr", "list_prs", "pr_fetcher"]
