"""Tests for GitHub API schemas and repository helpers."""

import pytest

from xbot_sync.schemas import (
    CommitStatus,
    GitHubCommitStatus,
    GitHubPullRequest,
    parse_repo_string,
    ssh_git_url,
)
from tests.factories import make_github_pr, make_github_status, make_pr


class TestGitHubPullRequest:
    """Tests for GitHubPullRequest parsing and derived fields."""

    def test_parse_head(self):
        pr = GitHubPullRequest.model_validate(make_github_pr())

        assert pr.number == 7
        assert pr.sha == "abc"
        assert pr.branch == "feature/x"
        assert pr.title == "Fix X"

    def test_bot_key_equals_title(self):
        assert make_pr(title="Fix X").bot_key == "Fix X"

    def test_bot_key_normalizes_whitespace(self):
        assert make_pr(title="  Fix   login\tcrash ").bot_key == "Fix login crash"

    def test_ready_when_complete(self):
        assert make_pr().is_ready

    @pytest.mark.parametrize(
        "overrides",
        [
            {"sha": None},
            {"branch": None},
            {"title": None},
            {"title": "   "},
            {"sha": ""},
        ],
    )
    def test_not_ready_when_field_missing(self, overrides):
        """PRs without sha, branch or title are excluded from reconciliation."""
        assert not make_pr(**overrides).is_ready

    def test_missing_head_object(self):
        """A PR from a deleted fork may come back without head data."""
        data = make_github_pr()
        del data["head"]

        pr = GitHubPullRequest.model_validate(data)

        assert pr.sha is None
        assert not pr.is_ready


class TestGitHubCommitStatus:
    """Tests for commit status conversion."""

    @pytest.mark.parametrize(
        ("state", "expected"),
        [
            ("pending", CommitStatus.PENDING),
            ("success", CommitStatus.SUCCESS),
            ("failure", CommitStatus.FAILURE),
            ("error", CommitStatus.ERROR),
        ],
    )
    def test_known_states(self, state, expected):
        status = GitHubCommitStatus.model_validate(make_github_status(state=state))
        assert status.to_commit_status() is expected

    def test_unknown_state_is_error(self):
        status = GitHubCommitStatus.model_validate(make_github_status(state="weird"))
        assert status.to_commit_status() is CommitStatus.ERROR


class TestRepositoryHelpers:
    """Tests for parse_repo_string and ssh_git_url."""

    def test_parse_repo_string(self):
        assert parse_repo_string("org/repo") == ("org", "repo")

    @pytest.mark.parametrize("value", ["", "org", "/repo", "org/", "a/b/c"])
    def test_parse_repo_string_invalid(self, value):
        with pytest.raises(ValueError):
            parse_repo_string(value)

    def test_ssh_git_url(self):
        assert ssh_git_url("org/repo") == "git@github.com:org/repo.git"
