"""Gitea and Forgejo REST v1 client."""

from __future__ import annotations

from typing import Any

from .client import ForgeClient, labels_of
from .github import api_state_for, pr_matches
from .http import PaginatedResponse, TokenAuth
from .types import (
    CreateIssueOptions,
    CreatePrOptions,
    Issue,
    ListIssueFilters,
    ListPrsFilters,
    Pr,
)


def _issue(entry: dict[str, Any]) -> Issue:
    return Issue(
        id=entry["number"],
        title=entry["title"],
        state=entry["state"],
        author=entry["user"]["login"],
        url=entry["html_url"],
        labels=labels_of(entry),
    )


def _pr(entry: dict[str, Any]) -> Pr:
    return Pr(
        id=entry["number"],
        title=entry["title"],
        state="merged" if entry.get("merged") else entry["state"],
        author=entry["user"]["login"],
        url=entry["html_url"],
        labels=labels_of(entry),
        created_at=entry.get("created_at", ""),
        updated_at=entry.get("updated_at", ""),
        source_branch=entry["head"]["ref"],
        target_branch=entry["base"]["ref"],
        draft=bool(entry.get("draft")),
    )


class GiteaClient(ForgeClient):
    name = "gitea"
    auth = TokenAuth(env_var="GIT_FORGE_GITEA_TOKEN", scheme="token")
    api_suffix = "/api/v1"

    def _repo_url(self, resource: str) -> str:
        return f"{self.api_url}/repos/{self.remote.path}/{resource}"

    def list_issues(self, filters: ListIssueFilters, use_auth: bool = False) -> PaginatedResponse[Issue]:
        params: dict[str, Any] = {
            "state": filters.state.value,
            "page": filters.page,
            "limit": filters.per_page,
            "type": "issues",
        }
        if filters.author:
            params["created_by"] = filters.author
        if filters.assignee:
            params["assigned_by"] = filters.assignee
        if filters.labels:
            params["labels"] = ",".join(filters.labels)
        if filters.query:
            params["q"] = filters.query
        page = self.http.get_page(self._repo_url("issues"), use_auth=use_auth, params=params)
        return page.filter(lambda entry: not entry.get("pull_request")).map(_issue)

    def list_prs(self, filters: ListPrsFilters, use_auth: bool = False) -> PaginatedResponse[Pr]:
        params = {
            "state": api_state_for(filters.state),
            "page": filters.page,
            "limit": filters.per_page,
        }
        page = self.http.get_page(self._repo_url("pulls"), use_auth=use_auth, params=params)
        return page.map(_pr).filter(lambda pr: pr_matches(pr, filters))

    def create_issue(self, options: CreateIssueOptions) -> Issue:
        body = {"title": options.title, "body": options.body}
        return _issue(self.http.post_json(self._repo_url("issues"), body))

    def create_pr(self, options: CreatePrOptions) -> Pr:
        title = f"WIP: {options.title}" if options.draft else options.title
        body = {
            "title": title,
            "head": options.source_branch,
            "base": options.target_branch,
            "body": options.body,
        }
        return _pr(self.http.post_json(self._repo_url("pulls"), body))

    def url_for_path(self, path: str, commit: str, line: int | None = None) -> str:
        url = self._web(f"src/commit/{commit}/{path}")
        if line is not None:
            url += f"#L{line}"
        return url


__all__ = ["GiteaClient"]
