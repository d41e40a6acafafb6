"""Tests for the GitHub, GitLab and Gitea clients and API-type detection."""

from __future__ import annotations

import os
import unittest
from unittest import mock

import requests

from git_forge.errors import ForgeError
from git_forge.forge import (
    ApiType,
    GiteaClient,
    GitHubClient,
    GitLabClient,
    create_client,
    guess_api_type_from_host,
)
from git_forge.forge.types import (
    CreateIssueOptions,
    CreatePrOptions,
    IssueState,
    ListIssueFilters,
    ListPrsFilters,
    PrState,
    WebTarget,
)
from git_forge.git import GitRemoteData


def _response(payload, link: str | None = None):
    response = mock.Mock(spec=requests.Response)
    response.status_code = 200
    response.headers = {"Link": link} if link else {}
    response.url = "https://api.test"
    response.text = ""
    response.json.return_value = payload
    return response


def _session(payload, link: str | None = None):
    session = mock.Mock(spec=requests.Session)
    session.request.return_value = _response(payload, link)
    return session


def _github_issue(number: int, title: str, **extra) -> dict:
    entry = {
        "number": number,
        "title": title,
        "state": "open",
        "user": {"login": "alice"},
        "html_url": f"https://github.com/o/r/issues/{number}",
        "labels": [{"name": "bug"}],
    }
    entry.update(extra)
    return entry


def _github_pr(number: int, title: str, **extra) -> dict:
    entry = {
        "number": number,
        "title": title,
        "state": "open",
        "user": {"login": "alice"},
        "html_url": f"https://github.com/o/r/pull/{number}",
        "labels": [],
        "created_at": "2024-01-01T00:00:00Z",
        "updated_at": "2024-01-02T00:00:00Z",
        "head": {"ref": "feature"},
        "base": {"ref": "main"},
        "draft": False,
        "merged_at": None,
    }
    entry.update(extra)
    return entry


GITHUB = GitRemoteData(host="github.com", path="o/r")
GITLAB = GitRemoteData(host="gitlab.example.com", path="group/sub/r", port=8443)
GITEA = GitRemoteData(host="codeberg.org", path="o/r")


class GuessApiTypeTests(unittest.TestCase):
    def test_hosts_are_matched_case_insensitively_in_order(self) -> None:
        self.assertIs(guess_api_type_from_host("GitHub.com"), ApiType.GITHUB)
        self.assertIs(guess_api_type_from_host("gitlab.example.com"), ApiType.GITLAB)
        self.assertIs(guess_api_type_from_host("gitea.io"), ApiType.GITEA)
        self.assertIs(guess_api_type_from_host("codeberg.org"), ApiType.FORGEJO)
        self.assertIs(guess_api_type_from_host("github.gitlab.test"), ApiType.GITHUB)

    def test_unknown_host_suggests_api_flag(self) -> None:
        with self.assertRaisesRegex(ForgeError, "--api"):
            guess_api_type_from_host("git.example.com")

    def test_create_client_prefers_explicit_api(self) -> None:
        client = create_client(GitRemoteData("git.example.com", "o/r"), ApiType.FORGEJO, session=_session([]))

        self.assertIsInstance(client, GiteaClient)
        self.assertEqual(client.api_url, "https://git.example.com/api/v1")

    def test_explicit_api_url_drops_trailing_slash(self) -> None:
        client = create_client(GITHUB, api_url="https://proxy.test/api/", session=_session([]))

        self.assertEqual(client.api_url, "https://proxy.test/api")


class GitHubClientTests(unittest.TestCase):
    def test_api_base(self) -> None:
        self.assertEqual(GitHubClient(GITHUB).api_url, "https://api.github.com")
        self.assertEqual(
            GitHubClient(GitRemoteData("github.corp", "o/r", 8080)).api_url,
            "https://github.corp:8080/api/v3",
        )

    def test_list_issues_drops_pull_requests_and_filters_query(self) -> None:
        session = _session(
            [
                _github_issue(1, "Crash on start"),
                _github_issue(2, "crash in PR", pull_request={"url": "x"}),
                _github_issue(3, "Docs typo"),
            ],
            link='<https://api.github.com/x?page=2>; rel="next"',
        )
        client = GitHubClient(GITHUB, session=session)

        page = client.list_issues(
            ListIssueFilters(page=2, per_page=10, state=IssueState.CLOSED, author="bob", labels=("bug", "ui"), query="CRASH")
        )

        self.assertEqual([issue.id for issue in page.items], [1])
        self.assertTrue(page.has_next_page)
        self.assertEqual(page.items[0].labels, ["bug"])
        call = session.request.call_args
        self.assertEqual(call.args, ("GET", "https://api.github.com/repos/o/r/issues"))
        self.assertEqual(
            call.kwargs["params"],
            {"state": "closed", "page": 2, "per_page": 10, "creator": "bob", "labels": "bug,ui"},
        )

    def test_list_prs_maps_merged_state_and_filters_client_side(self) -> None:
        session = _session(
            [
                _github_pr(4, "Add feature", merged_at="2024-02-01T00:00:00Z"),
                _github_pr(5, "Fix bug", state="closed"),
            ]
        )
        client = GitHubClient(GITHUB, session=session)

        page = client.list_prs(ListPrsFilters(state=PrState.MERGED))

        self.assertEqual([(pr.id, pr.state) for pr in page.items], [(4, "merged")])
        self.assertEqual(session.request.call_args.kwargs["params"]["state"], "closed")

    def test_list_prs_filters_draft_author_and_labels(self) -> None:
        session = _session(
            [
                _github_pr(6, "Draft work", draft=True, labels=[{"name": "wip"}]),
                _github_pr(7, "Ready", labels=[{"name": "wip"}]),
                _github_pr(8, "Other author draft", draft=True, user={"login": "carol"}),
            ]
        )
        client = GitHubClient(GITHUB, session=session)

        page = client.list_prs(ListPrsFilters(state=PrState.ALL, author="alice", labels=("wip",), draft=True))

        self.assertEqual([pr.id for pr in page.items], [6])
        self.assertEqual(session.request.call_args.kwargs["params"]["state"], "all")

    def test_create_pr_posts_head_and_base(self) -> None:
        session = _session(_github_pr(9, "New"))
        client = GitHubClient(GITHUB, session=session)
        with mock.patch.dict(os.environ, {"GIT_FORGE_GITHUB_TOKEN": "gh"}):
            pr = client.create_pr(CreatePrOptions("New", "feature", "main", body="text", draft=True))

        self.assertEqual(pr.id, 9)
        call = session.request.call_args
        self.assertEqual(call.args, ("POST", "https://api.github.com/repos/o/r/pulls"))
        self.assertEqual(
            call.kwargs["json"],
            {"title": "New", "head": "feature", "base": "main", "body": "text", "draft": True},
        )
        self.assertEqual(call.kwargs["headers"]["Authorization"], "Bearer gh")

    def test_web_urls(self) -> None:
        client = GitHubClient(GITHUB)

        self.assertEqual(client.url_for_home(), "https://github.com/o/r")
        self.assertEqual(client.url_for_pr(3), "https://github.com/o/r/pull/3")
        self.assertEqual(client.url_for_prs(), "https://github.com/o/r/pulls")
        self.assertEqual(client.url_for_issue_creation(), "https://github.com/o/r/issues/new")
        self.assertEqual(client.url_for_commit("abc"), "https://github.com/o/r/commit/abc")
        self.assertEqual(client.url_for_path("src/a.py", "abc", 12), "https://github.com/o/r/blob/abc/src/a.py#L12")
        self.assertEqual(client.url_for_target(WebTarget.MRS), "https://github.com/o/r/pulls")
        self.assertEqual(client.pr_ref(3), "pull/3/head")


class GitLabClientTests(unittest.TestCase):
    def test_list_issues_maps_state_and_params(self) -> None:
        session = _session(
            [
                {
                    "iid": 11,
                    "title": "Broken",
                    "state": "opened",
                    "author": {"username": "dana"},
                    "web_url": "https://gitlab.example.com:8443/group/sub/r/-/issues/11",
                    "labels": ["bug"],
                }
            ]
        )
        client = GitLabClient(GITLAB, session=session)

        page = client.list_issues(ListIssueFilters(assignee="erin", query="broken"))

        self.assertEqual(page.items[0].state, "open")
        self.assertEqual(page.items[0].author, "dana")
        call = session.request.call_args
        self.assertEqual(
            call.args[1],
            "https://gitlab.example.com:8443/api/v4/projects/group%2Fsub%2Fr/issues",
        )
        self.assertEqual(
            call.kwargs["params"],
            {"page": 1, "per_page": 30, "state": "opened", "assignee_username": "erin", "search": "broken"},
        )

    def test_state_all_omits_param_and_draft_adds_wip(self) -> None:
        session = _session([])
        client = GitLabClient(GITLAB, session=session)

        client.list_prs(ListPrsFilters(state=PrState.ALL, draft=True))

        params = session.request.call_args.kwargs["params"]
        self.assertNotIn("state", params)
        self.assertEqual(params["wip"], "yes")

    def test_create_draft_merge_request(self) -> None:
        session = _session(
            {
                "iid": 12,
                "title": "Draft: Thing",
                "state": "opened",
                "author": {"username": "dana"},
                "web_url": "https://gitlab.example.com:8443/group/sub/r/-/merge_requests/12",
                "work_in_progress": True,
            }
        )
        client = GitLabClient(GITLAB, session=session)
        with mock.patch.dict(os.environ, {"GIT_FORGE_GITLAB_TOKEN": "gl"}):
            mr = client.create_pr(CreatePrOptions("Thing", "feature", "main", body="desc", draft=True))

        self.assertTrue(mr.draft)
        self.assertEqual(
            session.request.call_args.kwargs["json"],
            {"source_branch": "feature", "target_branch": "main", "title": "Draft: Thing", "description": "desc"},
        )

    def test_web_urls_use_dash_prefix(self) -> None:
        client = GitLabClient(GITLAB)

        self.assertEqual(client.url_for_home(), "https://gitlab.example.com:8443/group/sub/r")
        self.assertEqual(client.url_for_pr(5), "https://gitlab.example.com:8443/group/sub/r/-/merge_requests/5")
        self.assertEqual(client.url_for_issues(), "https://gitlab.example.com:8443/group/sub/r/-/issues")
        self.assertEqual(client.pr_ref(5), "merge-requests/5/head")


class GiteaClientTests(unittest.TestCase):
    def test_list_issues_uses_limit_and_drops_pull_requests(self) -> None:
        issue = _github_issue(1, "Real issue")
        pr_entry = _github_issue(2, "Actually a PR", pull_request={"merged": False})
        session = _session([issue, pr_entry])
        client = GiteaClient(GITEA, session=session)

        page = client.list_issues(ListIssueFilters(author="alice", labels=("bug",), query="real"))

        self.assertEqual([item.id for item in page.items], [1])
        self.assertEqual(
            session.request.call_args.kwargs["params"],
            {"state": "open", "page": 1, "limit": 30, "type": "issues", "created_by": "alice", "labels": "bug", "q": "real"},
        )

    def test_merged_flag_marks_merged_prs(self) -> None:
        session = _session([_github_pr(3, "Merged one", state="closed", merged=True), _github_pr(4, "Closed one", state="closed")])
        client = GiteaClient(GITEA, session=session)

        page = client.list_prs(ListPrsFilters(state=PrState.CLOSED))

        self.assertEqual([pr.id for pr in page.items], [4])

    def test_draft_pr_gets_wip_prefix_and_token_scheme(self) -> None:
        session = _session(_github_pr(5, "WIP: Thing"))
        client = GiteaClient(GITEA, session=session)
        with mock.patch.dict(os.environ, {"GIT_FORGE_GITEA_TOKEN": "gt"}):
            client.create_pr(CreatePrOptions("Thing", "feature", "main", draft=True))

        call = session.request.call_args
        self.assertEqual(call.kwargs["json"]["title"], "WIP: Thing")
        self.assertEqual(call.kwargs["headers"]["Authorization"], "token gt")

    def test_create_issue_posts_title_and_body(self) -> None:
        session = _session(_github_issue(6, "Title"))
        client = GiteaClient(GITEA, session=session)
        with mock.patch.dict(os.environ, {"GIT_FORGE_GITEA_TOKEN": "gt"}):
            issue = client.create_issue(CreateIssueOptions("Title", "Body"))

        self.assertEqual(issue.url, "https://github.com/o/r/issues/6")
        self.assertEqual(session.request.call_args.kwargs["json"], {"title": "Title", "body": "Body"})

    def test_path_url_points_at_commit_source(self) -> None:
        client = GiteaClient(GITEA)

        self.assertEqual(client.url_for_path("README.md", "abc"), "https://codeberg.org/o/r/src/commit/abc/README.md")


if __name__ == "__main__":
    unittest.main()
