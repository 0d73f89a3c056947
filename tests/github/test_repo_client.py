"""Tests for GitHubRepoClient.

Tests cover:
- Initialization and token handling
- Open PR listing via pagination
- Commit status lookup by context
- Posting statuses and comments
- Error mapping
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from githubkit.exception import RequestFailed

from xbot_sync.github import (
    GitHubAuthenticationError,
    GitHubClientError,
    GitHubNotFoundError,
    GitHubRateLimitError,
    GitHubRepoClient,
)
from xbot_sync.schemas import CommitStatus
from tests.factories import REPO, make_github_pr, make_github_status


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------
async def async_iter(items):
    """Convert a list to an async iterator for mocking paginate."""
    for item in items:
        yield item


def make_mock_model(data):
    """Create a MagicMock that behaves like a githubkit response model."""
    mock = MagicMock()
    mock.model_dump.return_value = data
    return mock


def make_request_failed(status_code, headers=None):
    mock_response = MagicMock()
    mock_response.status_code = status_code
    mock_response.headers = headers or {}
    return RequestFailed(mock_response)


# -----------------------------------------------------------------------------
# Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def mock_settings():
    with patch("xbot_sync.github.client.get_settings") as mock_get:
        mock_get.return_value.github_token = "test-token"
        mock_get.return_value.github_status_context = "xbot-sync"
        yield mock_get.return_value


@pytest.fixture
def mock_github():
    """Create a mock githubkit GitHub client."""
    with patch("xbot_sync.github.client.GitHub") as mock_class:
        mock_instance = MagicMock()
        mock_class.return_value = mock_instance
        yield mock_instance


@pytest.fixture
def client(mock_settings, mock_github):
    return GitHubRepoClient(REPO)


# -----------------------------------------------------------------------------
# Test: Initialization
# -----------------------------------------------------------------------------
class TestInit:
    def test_token_from_settings(self, mock_settings):
        client = GitHubRepoClient(REPO)

        assert client._token == "test-token"
        assert client.repo_name == REPO
        assert client.status_context == "xbot-sync"

    def test_explicit_context(self, mock_settings):
        assert GitHubRepoClient(REPO, status_context="ci/xcode").status_context == "ci/xcode"

    def test_no_token_raises(self, mock_settings):
        mock_settings.github_token = ""

        with pytest.raises(GitHubAuthenticationError):
            GitHubRepoClient(REPO)

    def test_bad_repo_raises(self, mock_settings):
        with pytest.raises(ValueError):
            GitHubRepoClient("not-a-repo")


# -----------------------------------------------------------------------------
# Test: fetch_pull_requests
# -----------------------------------------------------------------------------
class TestFetchPullRequests:
    async def test_returns_open_prs(self, client, mock_github):
        mock_github.paginate.return_value = async_iter(
            [make_mock_model(make_github_pr(number=n)) for n in (1, 2)]
        )

        prs = await client.fetch_pull_requests()

        assert [pr.number for pr in prs] == [1, 2]
        kwargs = mock_github.paginate.call_args.kwargs
        assert kwargs["owner"] == "octo-org"
        assert kwargs["repo"] == "ios-app"
        assert kwargs["state"] == "open"

    async def test_invalid_pr_skipped(self, client, mock_github):
        mock_github.paginate.return_value = async_iter(
            [make_mock_model({"title": "no number"}), make_mock_model(make_github_pr(number=3))]
        )

        prs = await client.fetch_pull_requests()

        assert [pr.number for pr in prs] == [3]

    async def test_auth_error(self, client, mock_github):
        mock_github.paginate.side_effect = make_request_failed(401)

        with pytest.raises(GitHubAuthenticationError):
            await client.fetch_pull_requests()


# -----------------------------------------------------------------------------
# Test: Commit Statuses
# -----------------------------------------------------------------------------
class TestGetStatus:
    async def test_matching_context(self, client, mock_github):
        response = MagicMock()
        response.parsed_data = [
            make_mock_model(make_github_status(state="success", context="other")),
            make_mock_model(make_github_status(state="failure", context="xbot-sync")),
            make_mock_model(make_github_status(state="pending", context="xbot-sync")),
        ]
        mock_github.rest.repos.async_list_commit_statuses_for_ref = AsyncMock(
            return_value=response
        )

        assert await client.get_status("abc") is CommitStatus.FAILURE

    async def test_no_status(self, client, mock_github):
        response = MagicMock()
        response.parsed_data = [make_mock_model(make_github_status(context="other"))]
        mock_github.rest.repos.async_list_commit_statuses_for_ref = AsyncMock(
            return_value=response
        )

        assert await client.get_status("abc") is CommitStatus.NO_STATUS

    async def test_unknown_commit(self, client, mock_github):
        mock_github.rest.repos.async_list_commit_statuses_for_ref = AsyncMock(
            side_effect=make_request_failed(404)
        )

        with pytest.raises(GitHubNotFoundError, match="Commit abc not found"):
            await client.get_status("abc")


class TestSetStatus:
    async def test_posts_status(self, client, mock_github):
        mock_github.rest.repos.async_create_commit_status = AsyncMock()

        await client.set_status(CommitStatus.FAILURE, "abc")

        kwargs = mock_github.rest.repos.async_create_commit_status.call_args.kwargs
        assert kwargs["sha"] == "abc"
        assert kwargs["state"] == "failure"
        assert kwargs["context"] == "xbot-sync"
        assert kwargs["description"] == "Xcode Server integration failed"

    async def test_no_status_rejected(self, client, mock_github):
        mock_github.rest.repos.async_create_commit_status = AsyncMock()

        with pytest.raises(ValueError):
            await client.set_status(CommitStatus.NO_STATUS, "abc")

        mock_github.rest.repos.async_create_commit_status.assert_not_called()

    async def test_rate_limited(self, client, mock_github):
        mock_github.rest.repos.async_create_commit_status = AsyncMock(
            side_effect=make_request_failed(
                403, {"x-ratelimit-remaining": "0", "x-ratelimit-reset": "1700000000"}
            )
        )

        with pytest.raises(GitHubRateLimitError) as exc_info:
            await client.set_status(CommitStatus.SUCCESS, "abc")

        assert exc_info.value.reset_at is not None

    async def test_forbidden(self, client, mock_github):
        mock_github.rest.repos.async_create_commit_status = AsyncMock(
            side_effect=make_request_failed(403)
        )

        with pytest.raises(GitHubClientError, match="Access forbidden"):
            await client.set_status(CommitStatus.SUCCESS, "abc")


# -----------------------------------------------------------------------------
# Test: Comments
# -----------------------------------------------------------------------------
class TestAddComment:
    async def test_posts_comment(self, client, mock_github):
        mock_github.rest.issues.async_create_comment = AsyncMock()

        await client.add_comment(7, "Integration #3: succeeded")

        mock_github.rest.issues.async_create_comment.assert_awaited_once_with(
            owner="octo-org",
            repo="ios-app",
            issue_number=7,
            body="Integration #3: succeeded",
        )

    async def test_missing_pr(self, client, mock_github):
        mock_github.rest.issues.async_create_comment = AsyncMock(
            side_effect=make_request_failed(404)
        )

        with pytest.raises(GitHubNotFoundError, match="PR #7 not found"):
            await client.add_comment(7, "text")

    async def test_server_error(self, client, mock_github):
        mock_github.rest.issues.async_create_comment = AsyncMock(
            side_effect=make_request_failed(502)
        )

        with pytest.raises(GitHubClientError, match="502"):
            await client.add_comment(7, "text")
