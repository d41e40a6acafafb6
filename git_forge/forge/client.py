"""Shared shape of a forge client: API base, auth and web URL templates.

Subclasses fill in the REST calls and the path segments their web UI uses.
"""

from __future__ import annotations

import requests

from ..git import GitRemoteData
from .http import HttpClient, PaginatedResponse, TokenAuth
from .types import (
    CreateIssueOptions,
    CreatePrOptions,
    Issue,
    ListIssueFilters,
    ListPrsFilters,
    Pr,
    WebTarget,
)


class ForgeClient:
    """One repository on one forge."""

    name = "forge"
    auth = TokenAuth(env_var="GIT_FORGE_TOKEN", scheme="Bearer")
    api_suffix = "/api/v1"

    # Web UI path segments, relative to the repository page.
    web_prefix = ""
    pr_segment = "pull"
    prs_segment = "pulls"

    def __init__(
        self,
        remote: GitRemoteData,
        api_url: str | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.remote = remote
        self.api_url = (api_url or self.default_api_url()).rstrip("/")
        self.http = HttpClient(self.auth, session)

    def _origin(self) -> str:
        return f"https://{self.remote.host_with_port}"

    def default_api_url(self) -> str:
        return f"{self._origin()}{self.api_suffix}"

    # API

    def list_issues(self, filters: ListIssueFilters, use_auth: bool = False) -> PaginatedResponse[Issue]:
        raise NotImplementedError

    def list_prs(self, filters: ListPrsFilters, use_auth: bool = False) -> PaginatedResponse[Pr]:
        raise NotImplementedError

    def create_issue(self, options: CreateIssueOptions) -> Issue:
        raise NotImplementedError

    def create_pr(self, options: CreatePrOptions) -> Pr:
        raise NotImplementedError

    def pr_ref(self, number: int) -> str:
        """Ref to fetch for a pull request's head commit."""
        return f"pull/{number}/head"

    # Web URLs

    def url_for_home(self) -> str:
        return f"{self._origin()}/{self.remote.path}"

    def _web(self, suffix: str) -> str:
        return f"{self.url_for_home()}/{self.web_prefix}{suffix}"

    def url_for_commit(self, commit: str) -> str:
        return self._web(f"commit/{commit}")

    def url_for_issue(self, number: int) -> str:
        return self._web(f"issues/{number}")

    def url_for_issues(self) -> str:
        return self._web("issues")

    def url_for_issue_creation(self) -> str:
        return self._web("issues/new")

    def url_for_pr(self, number: int) -> str:
        return self._web(f"{self.pr_segment}/{number}")

    def url_for_prs(self) -> str:
        return self._web(self.prs_segment)

    def url_for_path(self, path: str, commit: str, line: int | None = None) -> str:
        url = self._web(f"blob/{commit}/{path}")
        if line is not None:
            url += f"#L{line}"
        return url

    def url_for_target(self, target: WebTarget) -> str:
        if target is WebTarget.ISSUES:
            return self.url_for_issues()
        if target in (WebTarget.PRS, WebTarget.MRS):
            return self.url_for_prs()
        return self.url_for_home()


def labels_of(entry: dict) -> list[str]:
    """Label names from a GitHub/Gitea style ``[{"name": ...}]`` array."""
    return [label["name"] for label in entry.get("labels") or []]


__all__ = ["ForgeClient", "labels_of"]
