"""GitHub REST client (github.com and GitHub Enterprise)."""

from __future__ import annotations

from typing import Any

from .client import ForgeClient, labels_of
from .http import PaginatedResponse, TokenAuth
from .types import (
    CreateIssueOptions,
    CreatePrOptions,
    Issue,
    ListIssueFilters,
    ListPrsFilters,
    Pr,
    PrState,
    has_all_labels,
    title_matches,
)

ACCEPT_JSON = {"Accept": "application/vnd.github+json"}


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
        state="merged" if entry.get("merged_at") else entry["state"],
        author=entry["user"]["login"],
        url=entry["html_url"],
        labels=labels_of(entry),
        created_at=entry.get("created_at", ""),
        updated_at=entry.get("updated_at", ""),
        source_branch=entry["head"]["ref"],
        target_branch=entry["base"]["ref"],
        draft=bool(entry.get("draft")),
    )


def pr_matches(pr: Pr, filters: ListPrsFilters) -> bool:
    """Client-side PR filtering for forges whose list API only knows open/closed."""
    if filters.state is PrState.MERGED and pr.state != "merged":
        return False
    if filters.state is PrState.CLOSED and pr.state == "merged":
        return False
    if filters.author and pr.author != filters.author:
        return False
    if not has_all_labels(pr.labels, filters.labels):
        return False
    if filters.draft and not pr.draft:
        return False
    return title_matches(pr.title, filters.query)


def api_state_for(state: PrState) -> str:
    return "closed" if state is PrState.MERGED else state.value


class GitHubClient(ForgeClient):
    name = "github"
    auth = TokenAuth(env_var="GIT_FORGE_GITHUB_TOKEN", scheme="Bearer")
    api_suffix = "/api/v3"

    def default_api_url(self) -> str:
        if self.remote.host == "github.com":
            return "https://api.github.com"
        return super().default_api_url()

    def _repo_url(self, resource: str) -> str:
        return f"{self.api_url}/repos/{self.remote.path}/{resource}"

    def list_issues(self, filters: ListIssueFilters, use_auth: bool = False) -> PaginatedResponse[Issue]:
        params: dict[str, Any] = {
            "state": filters.state.value,
            "page": filters.page,
            "per_page": filters.per_page,
        }
        if filters.author:
            params["creator"] = filters.author
        if filters.assignee:
            params["assignee"] = filters.assignee
        if filters.labels:
            params["labels"] = ",".join(filters.labels)
        page = self.http.get_page(self._repo_url("issues"), use_auth=use_auth, params=params, headers=ACCEPT_JSON)
        # The issues endpoint also lists pull requests.
        return (
            page.filter(lambda entry: "pull_request" not in entry)
            .map(_issue)
            .filter(lambda issue: title_matches(issue.title, filters.query))
        )

    def list_prs(self, filters: ListPrsFilters, use_auth: bool = False) -> PaginatedResponse[Pr]:
        params = {
            "state": api_state_for(filters.state),
            "page": filters.page,
            "per_page": filters.per_page,
        }
        page = self.http.get_page(self._repo_url("pulls"), use_auth=use_auth, params=params, headers=ACCEPT_JSON)
        return page.map(_pr).filter(lambda pr: pr_matches(pr, filters))

    def create_issue(self, options: CreateIssueOptions) -> Issue:
        body = {"title": options.title, "body": options.body}
        return _issue(self.http.post_json(self._repo_url("issues"), body, headers=ACCEPT_JSON))

    def create_pr(self, options: CreatePrOptions) -> Pr:
        body = {
            "title": options.title,
            "head": options.source_branch,
            "base": options.target_branch,
            "body": options.body,
            "draft": options.draft,
        }
        return _pr(self.http.post_json(self._repo_url("pulls"), body, headers=ACCEPT_JSON))


__all__ = ["GitHubClient", "api_state_for", "pr_matches"]
