"""GitLab REST v4 client. Pull requests are merge requests here."""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

from .client import ForgeClient
from .http import PaginatedResponse, TokenAuth
from .types import (
    CreateIssueOptions,
    CreatePrOptions,
    Issue,
    IssueState,
    ListIssueFilters,
    ListPrsFilters,
    Pr,
    PrState,
)


def _state_from_api(state: str) -> str:
    return "open" if state == "opened" else state


def _issue(entry: dict[str, Any]) -> Issue:
    return Issue(
        id=entry["iid"],
        title=entry["title"],
        state=_state_from_api(entry["state"]),
        author=entry["author"]["username"],
        url=entry["web_url"],
        labels=list(entry.get("labels") or []),
    )


def _merge_request(entry: dict[str, Any]) -> Pr:
    return Pr(
        id=entry["iid"],
        title=entry["title"],
        state=_state_from_api(entry["state"]),
        author=entry["author"]["username"],
        url=entry["web_url"],
        labels=list(entry.get("labels") or []),
        created_at=entry.get("created_at", ""),
        updated_at=entry.get("updated_at", ""),
        source_branch=entry.get("source_branch", ""),
        target_branch=entry.get("target_branch", ""),
        draft=bool(entry.get("draft", entry.get("work_in_progress", False))),
    )


def _list_params(page: int, per_page: int, state: str | None) -> dict[str, Any]:
    params: dict[str, Any] = {"page": page, "per_page": per_page}
    if state is not None:
        params["state"] = state
    return params


class GitLabClient(ForgeClient):
    name = "gitlab"
    auth = TokenAuth(env_var="GIT_FORGE_GITLAB_TOKEN", scheme="Bearer")
    api_suffix = "/api/v4"
    web_prefix = "-/"
    pr_segment = "merge_requests"
    prs_segment = "merge_requests"

    def _project_url(self, resource: str) -> str:
        return f"{self.api_url}/projects/{quote(self.remote.path, safe='')}/{resource}"

    def list_issues(self, filters: ListIssueFilters, use_auth: bool = False) -> PaginatedResponse[Issue]:
        state = {IssueState.OPEN: "opened", IssueState.CLOSED: "closed"}.get(filters.state)
        params = _list_params(filters.page, filters.per_page, state)
        if filters.assignee:
            params["assignee_username"] = filters.assignee
        if filters.author:
            params["author_username"] = filters.author
        if filters.labels:
            params["labels"] = ",".join(filters.labels)
        if filters.query:
            params["search"] = filters.query
        page = self.http.get_page(self._project_url("issues"), use_auth=use_auth, params=params)
        return page.map(_issue)

    def list_prs(self, filters: ListPrsFilters, use_auth: bool = False) -> PaginatedResponse[Pr]:
        state = {
            PrState.OPEN: "opened",
            PrState.CLOSED: "closed",
            PrState.MERGED: "merged",
        }.get(filters.state)
        params = _list_params(filters.page, filters.per_page, state)
        if filters.author:
            params["author_username"] = filters.author
        if filters.labels:
            params["labels"] = ",".join(filters.labels)
        if filters.query:
            params["search"] = filters.query
        if filters.draft:
            params["wip"] = "yes"
        page = self.http.get_page(self._project_url("merge_requests"), use_auth=use_auth, params=params)
        return page.map(_merge_request)

    def create_issue(self, options: CreateIssueOptions) -> Issue:
        body = {"title": options.title, "description": options.body}
        return _issue(self.http.post_json(self._project_url("issues"), body))

    def create_pr(self, options: CreatePrOptions) -> Pr:
        title = f"Draft: {options.title}" if options.draft else options.title
        body = {
            "source_branch": options.source_branch,
            "target_branch": options.target_branch,
            "title": title,
            "description": options.body,
        }
        return _merge_request(self.http.post_json(self._project_url("merge_requests"), body))

    def pr_ref(self, number: int) -> str:
        return f"merge-requests/{number}/head"


__all__ = ["GitLabClient"]
