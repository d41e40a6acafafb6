"""``issue list`` and ``issue create``."""

from __future__ import annotations

import argparse
import sys

from ..config import Choices
from ..editor import prompt_message
from ..errors import GitForgeError
from ..forge import ApiType, ForgeClient
from ..forge.types import (
    DEFAULT_FIELDS,
    ISSUE_FIELDS,
    CreateIssueOptions,
    Issue,
    IssueState,
    ListIssueFilters,
)
from ..output import OutputFormat
from ..tui import FetchOptions, FetchResponse, build_fetch_options, select_item_with
from .common import DEFAULT_PER_PAGE, emit_items, open_url, prepare

LIST_CONFIG_FIELDS = {
    "api": ApiType,
    "api_url": str,
    "auth": bool,
    "fields": Choices(ISSUE_FIELDS),
    "format": OutputFormat,
    "per_page": int,
    "state": IssueState,
    "interactive": bool,
}
CREATE_CONFIG_FIELDS = {
    "api": ApiType,
    "api_url": str,
    "editor": bool,
    "no_browser": bool,
    "web": bool,
}


def issue_fetcher(client: ForgeClient, per_page: int, use_auth: bool):
    """Adapt ``client.list_issues`` to the selection screen's fetch callback."""

    def fetch(page: int, options: FetchOptions) -> FetchResponse[Issue]:
        filters = ListIssueFilters(
            page=page,
            per_page=per_page,
            state=options.parse_enum("state", IssueState) or IssueState.OPEN,
            author=options.parse_str("author"),
            assignee=options.parse_str("assignee"),
            labels=tuple(options.parse_list("labels")),
            query=options.parse_str("query"),
        )
        response = client.list_issues(filters, use_auth=use_auth)
        return FetchResponse(items=response.items, has_more=response.has_next_page)

    return fetch


def list_issues(args: argparse.Namespace) -> None:
    _, _, client = prepare(args, "issue/list", LIST_CONFIG_FIELDS)
    per_page = args.per_page or DEFAULT_PER_PAGE
    fields = args.fields or list(DEFAULT_FIELDS)
    output_format = args.format or OutputFormat.TSV

    if args.interactive:
        initial = build_fetch_options(
            assignee=args.assignee,
            author=args.author,
            labels=args.labels,
            query=args.query,
            state=args.state,
        )
        print("Loading issues...", file=sys.stderr)
        issue: Issue = select_item_with(issue_fetcher(client, per_page, args.auth), initial)
        emit_items([issue], fields, output_format)
        if args.web:
            open_url(issue.url)
        return

    if args.web:
        open_url(client.url_for_issues())
        return

    filters = ListIssueFilters(
        page=args.page,
        per_page=per_page,
        state=args.state or IssueState.OPEN,
        author=args.author,
        assignee=args.assignee,
        labels=tuple(args.labels or ()),
        query=args.query,
    )
    response = client.list_issues(filters, use_auth=args.auth)
    emit_items(response.items, fields, output_format)


def _read_title() -> str:
    try:
        return input("Enter issue title: ").strip()
    except EOFError as exc:
        raise GitForgeError("No issue title provided") from exc


def create_issue(args: argparse.Namespace) -> None:
    config, _, client = prepare(args, "issue/create", CREATE_CONFIG_FIELDS)

    if args.web:
        open_url(client.url_for_issue_creation())
        return

    if args.editor:
        message = prompt_message(config.get_string("editor-command"))
        title, body = message.title, message.body
    else:
        title = args.title if args.title is not None else _read_title()
        body = args.body or ""

    if not title:
        raise GitForgeError("Issue title cannot be empty. Please provide a title on the first line.")

    print(f"Creating issue on {client.name}...", file=sys.stderr)
    issue = client.create_issue(CreateIssueOptions(title=title, body=body))
    if args.no_browser:
        print(issue.url)
    else:
        print(f"Opening issue in browser: {issue.url}", file=sys.stderr)
        open_url(issue.url)


__all__ = ["create_issue", "issue_fetcher", "list_issues"]
