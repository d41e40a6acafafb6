"""Thin ``requests`` wrapper shared by the forge clients.

Adds the user agent and optional token auth, turns non-2xx replies into
``ForgeError`` and reads ``Link`` headers for pagination.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

import requests

from ..errors import ForgeError

logger = logging.getLogger(__name__)

T = TypeVar("T")
U = TypeVar("U")

USER_AGENT = "git-forge"
DEFAULT_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True)
class TokenAuth:
    """Where to find an API token and how to present it."""

    env_var: str
    scheme: str

    def header(self) -> str:
        token = os.environ.get(self.env_var, "")
        if not token:
            raise ForgeError(
                f"There is a problem with the environment variable ({self.env_var}) used for authentication: "
                "it is not set"
            )
        return f"{self.scheme} {token}"


@dataclass(frozen=True)
class PaginatedResponse(Generic[T]):
    items: list[T] = field(default_factory=list)
    has_next_page: bool = False

    def map(self, transform: Callable[[T], U]) -> PaginatedResponse[U]:
        return PaginatedResponse([transform(item) for item in self.items], self.has_next_page)

    def filter(self, keep: Callable[[T], bool]) -> PaginatedResponse[T]:
        return PaginatedResponse([item for item in self.items if keep(item)], self.has_next_page)


def has_next_link(response: requests.Response) -> bool:
    link_header = response.headers.get("Link", "")
    return any('rel="next"' in link for link in link_header.split(","))


class HttpClient:
    """Issue JSON requests against one forge API."""

    def __init__(
        self,
        auth: TokenAuth,
        session: requests.Session | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self.auth = auth
        self.session = session or requests.Session()
        self.timeout = timeout

    def _headers(self, use_auth: bool, extra: Mapping[str, str] | None) -> dict[str, str]:
        headers = {"User-Agent": USER_AGENT}
        if extra:
            headers.update(extra)
        if use_auth:
            headers["Authorization"] = self.auth.header()
        return headers

    def request(
        self,
        method: str,
        url: str,
        *,
        use_auth: bool = False,
        params: Mapping[str, Any] | None = None,
        json_body: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> requests.Response:
        """Send one request and return the response, raising on non-2xx."""
        request_headers = self._headers(use_auth, headers)
        logger.debug("%s %s params=%s", method, url, dict(params or {}))
        try:
            response = self.session.request(
                method,
                url,
                params=params,
                json=json_body,
                headers=request_headers,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise ForgeError(f"Network request failed: {method} {url}: {exc}") from exc
        logger.debug("%s %s -> %s", method, url, response.status_code)
        if not 200 <= response.status_code < 300:
            raise ForgeError(f"HTTP {response.status_code}\nURL: {response.url}\nResponse: {response.text}")
        return response

    def get_json(self, url: str, **kwargs: Any) -> Any:
        return _decode(self.request("GET", url, **kwargs))

    def post_json(self, url: str, body: Mapping[str, Any], **kwargs: Any) -> Any:
        kwargs.setdefault("use_auth", True)
        return _decode(self.request("POST", url, json_body=body, **kwargs))

    def get_page(self, url: str, **kwargs: Any) -> PaginatedResponse[dict[str, Any]]:
        """GET a JSON array and note whether the ``Link`` header has a next page."""
        response = self.request("GET", url, **kwargs)
        items = _decode(response)
        if not isinstance(items, list):
            raise ForgeError(f"Failed to parse API response: expected a list from {response.url}")
        return PaginatedResponse(items=items, has_next_page=has_next_link(response))


def _decode(response: requests.Response) -> Any:
    try:
        return response.json()
    except ValueError as exc:
        raise ForgeError(f"Failed to parse API response from {response.url}") from exc


__all__ = [
    "DEFAULT_TIMEOUT_SECONDS",
    "HttpClient",
    "PaginatedResponse",
    "TokenAuth",
    "USER_AGENT",
    "has_next_link",
]
