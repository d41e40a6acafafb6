"""Forge-neutral issue and pull-request records plus list/create parameters."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class IssueState(Enum):
    OPEN = "open"
    CLOSED = "closed"
    ALL = "all"


class PrState(Enum):
    OPEN = "open"
    CLOSED = "closed"
    MERGED = "merged"
    ALL = "all"


class WebTarget(Enum):
    REPOSITORY = "repository"
    ISSUES = "issues"
    PRS = "prs"
    MRS = "mrs"


ISSUE_FIELDS = ("id", "title", "state", "labels", "author", "url")
PR_FIELDS = (
    "id",
    "title",
    "state",
    "labels",
    "author",
    "created",
    "updated",
    "url",
    "source",
    "target",
    "draft",
)
DEFAULT_FIELDS = ("title", "id", "url")


@dataclass(frozen=True)
class Issue:
    id: int
    title: str
    state: str
    author: str
    url: str
    labels: list[str] = field(default_factory=list)

    def display_text(self) -> str:
        return f"{self.id}: {self.title}"

    def field_value(self, name: str) -> object:
        """Return the value for an output field name from ``ISSUE_FIELDS``."""
        return getattr(self, name)


@dataclass(frozen=True)
class Pr:
    id: int
    title: str
    state: str
    author: str
    url: str
    labels: list[str] = field(default_factory=list)
    created_at: str = ""
    updated_at: str = ""
    source_branch: str = ""
    target_branch: str = ""
    draft: bool = False

    def display_text(self) -> str:
        return f"{self.id}: {self.title}"

    def field_value(self, name: str) -> object:
        """Return the value for an output field name from ``PR_FIELDS``."""
        attribute = {
            "created": "created_at",
            "updated": "updated_at",
            "source": "source_branch",
            "target": "target_branch",
        }.get(name, name)
        return getattr(self, attribute)


@dataclass(frozen=True)
class ListIssueFilters:
    page: int = 1
    per_page: int = 30
    state: IssueState = IssueState.OPEN
    author: str | None = None
    assignee: str | None = None
    labels: tuple[str, ...] = ()
    query: str | None = None


@dataclass(frozen=True)
class ListPrsFilters:
    page: int = 1
    per_page: int = 30
    state: PrState = PrState.OPEN
    author: str | None = None
    labels: tuple[str, ...] = ()
    query: str | None = None
    draft: bool = False


@dataclass(frozen=True)
class CreateIssueOptions:
    title: str
    body: str = ""


@dataclass(frozen=True)
class CreatePrOptions:
    title: str
    source_branch: str
    target_branch: str
    body: str = ""
    draft: bool = False


def title_matches(title: str, query: str | None) -> bool:
    """Case-insensitive substring match used where a forge has no search param."""
    if not query:
        return True
    return query.casefold() in title.casefold()


def has_all_labels(labels: list[str], wanted: tuple[str, ...]) -> bool:
    return all(label in labels for label in wanted)


__all__ = [
    "CreateIssueOptions",
    "CreatePrOptions",
    "DEFAULT_FIELDS",
    "ISSUE_FIELDS",
    "Issue",
    "IssueState",
    "ListIssueFilters",
    "ListPrsFilters",
    "PR_FIELDS",
    "Pr",
    "PrState",
    "has_all_labels",
    "WebTarget",
    "title_matches",
]
