"""Tests for remote URL parsing and the git subprocess wrappers."""

from __future__ import annotations

import subprocess
import unittest
from unittest import mock

from git_forge import git
from git_forge.errors import GitError
from git_forge.git import GitRemoteData, parse_remote_url


def _completed(stdout: str = "", returncode: int = 0, stderr: str = "") -> subprocess.CompletedProcess:
    return subprocess.CompletedProcess(args=["git"], returncode=returncode, stdout=stdout, stderr=stderr)


class ParseRemoteUrlTests(unittest.TestCase):
    def test_https_remote_strips_git_suffix(self) -> None:
        self.assertEqual(
            parse_remote_url("https://github.com/owner/repo.git"),
            GitRemoteData(host="github.com", path="owner/repo"),
        )

    def test_https_remote_with_port_and_nested_path(self) -> None:
        self.assertEqual(
            parse_remote_url("https://gitlab.example.com:8443/group/sub/repo"),
            GitRemoteData(host="gitlab.example.com", path="group/sub/repo", port=8443),
        )

    def test_ssh_scheme_remote(self) -> None:
        self.assertEqual(
            parse_remote_url("ssh://git@codeberg.org:2222/owner/repo.git"),
            GitRemoteData(host="codeberg.org", path="owner/repo", port=2222),
        )

    def test_scp_style_remote(self) -> None:
        self.assertEqual(
            parse_remote_url("git@github.com:owner/repo.git"),
            GitRemoteData(host="github.com", path="owner/repo"),
        )

    def test_invalid_port_is_unparseable(self) -> None:
        self.assertIsNone(parse_remote_url("https://host:99999/owner/repo"))
        self.assertIsNone(parse_remote_url("https://host:abc/owner/repo"))

    def test_unknown_forms_are_unparseable(self) -> None:
        self.assertIsNone(parse_remote_url("http://github.com/owner/repo"))
        self.assertIsNone(parse_remote_url("/srv/git/repo.git"))
        self.assertIsNone(parse_remote_url("https://github.com"))

    def test_host_with_port(self) -> None:
        self.assertEqual(GitRemoteData("h", "p").host_with_port, "h")
        self.assertEqual(GitRemoteData("h", "p", 3000).host_with_port, "h:3000")


class GitCommandTests(unittest.TestCase):
    def test_get_remote_data_parses_remote_url(self) -> None:
        with mock.patch("git_forge.git.subprocess.run", return_value=_completed("git@github.com:o/r.git\n")) as run:
            data = git.get_remote_data("upstream")

        self.assertEqual(data, GitRemoteData(host="github.com", path="o/r"))
        self.assertEqual(run.call_args.args[0], ["git", "remote", "get-url", "upstream"])

    def test_get_remote_data_rejects_unrecognized_url(self) -> None:
        with mock.patch("git_forge.git.subprocess.run", return_value=_completed("/local/path\n")):
            with self.assertRaisesRegex(GitError, "Couldn't parse git remote URL"):
                git.get_remote_data("origin")

    def test_failing_command_raises_with_stderr(self) -> None:
        with mock.patch(
            "git_forge.git.subprocess.run",
            return_value=_completed(returncode=2, stderr="error: No such remote 'nope'\n"),
        ):
            with self.assertRaisesRegex(GitError, "No such remote 'nope'"):
                git.get_remote_url("nope")

    def test_missing_git_binary_raises_git_error(self) -> None:
        with mock.patch("git_forge.git.subprocess.run", side_effect=FileNotFoundError("git")):
            with self.assertRaisesRegex(GitError, "Failed to execute git"):
                git.get_current_branch()

    def test_no_branch_checked_out(self) -> None:
        with mock.patch("git_forge.git.subprocess.run", return_value=_completed("\n")):
            with self.assertRaisesRegex(GitError, "No branch checked out"):
                git.get_current_branch()

    def test_fetch_pull_request_maps_ref_to_local_branch(self) -> None:
        with mock.patch("git_forge.git.subprocess.run", return_value=_completed()) as run:
            git.fetch_pull_request("pull/7/head", "pr-7", "origin")

        self.assertEqual(run.call_args.args[0], ["git", "fetch", "origin", "pull/7/head:pr-7"])

    def test_push_branch_sets_upstream(self) -> None:
        with mock.patch("git_forge.git.subprocess.run", return_value=_completed()) as run:
            git.push_branch("feature", "origin")

        self.assertEqual(run.call_args.args[0], ["git", "push", "origin", "feature", "-u"])

    def test_default_branch_from_remote_head(self) -> None:
        with mock.patch("git_forge.git.subprocess.run", return_value=_completed("refs/remotes/origin/trunk\n")):
            self.assertEqual(git.get_default_branch("origin"), "trunk")

    def test_default_branch_falls_back_to_main_then_master(self) -> None:
        def fake_run(cmd, **_kwargs):
            if cmd[1] == "symbolic-ref":
                return _completed(returncode=128, stderr="fatal: ref refs/remotes/origin/HEAD is not a symbolic ref")
            if cmd[-1] == "origin/master":
                return _completed("abc123\n")
            return _completed(returncode=1)

        with mock.patch("git_forge.git.subprocess.run", side_effect=fake_run):
            self.assertEqual(git.get_default_branch("origin"), "master")

    def test_default_branch_unknown(self) -> None:
        with mock.patch("git_forge.git.subprocess.run", return_value=_completed(returncode=1)):
            with self.assertRaisesRegex(GitError, "Couldn't determine default branch"):
                git.get_default_branch("origin")

    def test_rev_parse_returns_hash(self) -> None:
        with mock.patch("git_forge.git.subprocess.run", return_value=_completed("deadbeef\n")) as run:
            self.assertEqual(git.rev_parse("HEAD~1"), "deadbeef")

        self.assertEqual(run.call_args.args[0], ["git", "rev-parse", "HEAD~1"])


if __name__ == "__main__":
    unittest.main()
