"""Forge API clients and API-type detection."""

from __future__ import annotations

from enum import Enum

import requests

from ..errors import ForgeError
from ..git import GitRemoteData
from .client import ForgeClient
from .gitea import GiteaClient
from .github import GitHubClient
from .gitlab import GitLabClient


class ApiType(Enum):
    GITHUB = "github"
    GITLAB = "gitlab"
    GITEA = "gitea"
    FORGEJO = "forgejo"


_CLIENTS: dict[ApiType, type[ForgeClient]] = {
    ApiType.GITHUB: GitHubClient,
    ApiType.GITLAB: GitLabClient,
    ApiType.GITEA: GiteaClient,
    ApiType.FORGEJO: GiteaClient,
}


def guess_api_type_from_host(host: str) -> ApiType:
    host = host.lower()
    if "github" in host:
        return ApiType.GITHUB
    if "gitlab" in host:
        return ApiType.GITLAB
    if "gitea" in host:
        return ApiType.GITEA
    if "forgejo" in host or "codeberg" in host:
        return ApiType.FORGEJO
    raise ForgeError(
        "Unable to detect forge type from hostname. Supported: github, gitlab, gitea, forgejo. "
        "Use --api flag to specify explicitly"
    )


def create_client(
    remote: GitRemoteData,
    api: ApiType | None = None,
    api_url: str | None = None,
    session: requests.Session | None = None,
) -> ForgeClient:
    """Build the client for ``remote``, guessing the API type from its host when unset."""
    api_type = api or guess_api_type_from_host(remote.host)
    return _CLIENTS[api_type](remote, api_url=api_url, session=session)


__all__ = [
    "ApiType",
    "ForgeClient",
    "GitHubClient",
    "GitLabClient",
    "GiteaClient",
    "create_client",
    "guess_api_type_from_host",
]
