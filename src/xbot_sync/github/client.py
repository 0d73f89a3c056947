"""Async GitHub API client wrapper using githubkit.

This module provides the repository side of reconciliation: listing
open pull requests, reading and posting commit statuses, and commenting
on pull requests.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from githubkit import GitHub
from githubkit.exception import RequestFailed
from pydantic import ValidationError

from xbot_sync.config import get_settings
from xbot_sync.logging import get_logger
from xbot_sync.schemas import (
    CommitStatus,
    GitHubCommitStatus,
    GitHubPullRequest,
    parse_repo_string,
)

from .exceptions import (
    GitHubAuthenticationError,
    GitHubClientError,
    GitHubNotFoundError,
    GitHubRateLimitError,
)

logger = get_logger(__name__)

STATUS_DESCRIPTIONS: dict[CommitStatus, str] = {
    CommitStatus.PENDING: "Xcode Server integration in progress",
    CommitStatus.SUCCESS: "Xcode Server integration succeeded",
    CommitStatus.FAILURE: "Xcode Server integration failed",
    CommitStatus.ERROR: "Xcode Server integration errored",
}


class GitHubRepoClient:
    """Async GitHub client bound to one repository.

    Usage:
        async with GitHubRepoClient("octo-org/ios-app") as repo:
            prs = await repo.fetch_pull_requests()
            status = await repo.get_status(prs[0].sha)
    """

    def __init__(
        self,
        repo: str,
        token: str | None = None,
        status_context: str | None = None,
    ) -> None:
        """Initialize the GitHub client.

        Args:
            repo: Repository in owner/name format
            token: GitHub PAT. If not provided, uses GITHUB_TOKEN from settings.
            status_context: Context of the statuses this client reads and
                            posts. Defaults to GITHUB_STATUS_CONTEXT.

        Raises:
            GitHubAuthenticationError: If no token is available.
            ValueError: If repo is not in owner/name format.
        """
        settings = get_settings()
        self._owner, self._repo = parse_repo_string(repo)
        self._token = token or settings.github_token
        if not self._token:
            raise GitHubAuthenticationError(
                "GitHub token required. Set GITHUB_TOKEN environment variable."
            )
        self._context = status_context or settings.github_status_context
        self._client: GitHub[Any] | None = None

    @property
    def _github(self) -> GitHub[Any]:
        """Get or create the githubkit client instance."""
        if self._client is None:
            self._client = GitHub(self._token)
        return self._client

    @property
    def repo_name(self) -> str:
        """Repository in owner/name format."""
        return f"{self._owner}/{self._repo}"

    @property
    def status_context(self) -> str:
        return self._context

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            self._client = None

    async def __aenter__(self) -> GitHubRepoClient:
        """Async context manager entry."""
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Async context manager exit."""
        await self.close()

    # -------------------------------------------------------------------------
    # Pull Requests
    # -------------------------------------------------------------------------
    async def fetch_pull_requests(self) -> list[GitHubPullRequest]:
        """List all open pull requests.

        Returns:
            Open PRs, oldest first. PRs that fail validation are skipped.
        """
        try:
            prs: list[GitHubPullRequest] = []

            pr_data: Any
            async for pr_data in self._github.paginate(
                self._github.rest.pulls.async_list,
                owner=self._owner,
                repo=self._repo,
                state="open",
                sort="created",
                direction="asc",
                per_page=100,
            ):
                try:
                    prs.append(GitHubPullRequest.model_validate(pr_data.model_dump()))
                except ValidationError:
                    logger.debug("Skipping PR that failed validation")
                    continue

            logger.debug("Fetched {} open PRs from {}", len(prs), self.repo_name)
            return prs
        except RequestFailed as e:
            raise self._handle_error(e) from e

    # -------------------------------------------------------------------------
    # Commit Statuses
    # -------------------------------------------------------------------------
    async def get_status(self, sha: str) -> CommitStatus:
        """Get the latest status posted under our context for a commit.

        Args:
            sha: Commit SHA

        Returns:
            The latest status for our context, or NO_STATUS if none exists
        """
        try:
            resp = await self._github.rest.repos.async_list_commit_statuses_for_ref(
                owner=self._owner,
                repo=self._repo,
                ref=sha,
                per_page=100,
            )
            # GitHub returns statuses newest first
            for item in resp.parsed_data:
                status = GitHubCommitStatus.model_validate(item.model_dump())
                if status.context == self._context:
                    return status.to_commit_status()
            return CommitStatus.NO_STATUS
        except RequestFailed as e:
            if e.response.status_code == 404:
                raise GitHubNotFoundError(f"Commit {sha} not found in {self.repo_name}") from e
            raise self._handle_error(e) from e

    async def set_status(self, status: CommitStatus, sha: str) -> None:
        """Post a commit status under our context.

        Args:
            status: Status to post (NO_STATUS is rejected)
            sha: Commit SHA

        Raises:
            ValueError: If status is NO_STATUS
        """
        if status is CommitStatus.NO_STATUS:
            raise ValueError("NO_STATUS cannot be posted to GitHub")

        try:
            await self._github.rest.repos.async_create_commit_status(
                owner=self._owner,
                repo=self._repo,
                sha=sha,
                state=status.value,
                context=self._context,
                description=STATUS_DESCRIPTIONS[status],
            )
            logger.debug("Posted {} on {}", status.value, sha)
        except RequestFailed as e:
            raise self._handle_error(e) from e

    # -------------------------------------------------------------------------
    # Comments
    # -------------------------------------------------------------------------
    async def add_comment(self, pr_number: int, text: str) -> None:
        """Add a comment to a pull request's conversation.

        Args:
            pr_number: PR number
            text: Markdown comment body
        """
        try:
            await self._github.rest.issues.async_create_comment(
                owner=self._owner,
                repo=self._repo,
                issue_number=pr_number,
                body=text,
            )
        except RequestFailed as e:
            if e.response.status_code == 404:
                raise GitHubNotFoundError(
                    f"PR #{pr_number} not found in {self.repo_name}"
                ) from e
            raise self._handle_error(e) from e

    # -------------------------------------------------------------------------
    # Error Handling
    # -------------------------------------------------------------------------
    def _handle_error(self, error: RequestFailed) -> GitHubClientError:
        """Convert githubkit exceptions to our custom exceptions."""
        status = error.response.status_code

        if status == 401:
            return GitHubAuthenticationError("Invalid GitHub token")
        elif status == 403:
            headers = error.response.headers
            if "x-ratelimit-remaining" in headers:
                remaining = int(headers.get("x-ratelimit-remaining", "0"))
                if remaining == 0:
                    reset_ts = int(headers.get("x-ratelimit-reset", "0"))
                    reset_at = datetime.fromtimestamp(reset_ts, tz=UTC) if reset_ts else None
                    return GitHubRateLimitError(
                        "GitHub rate limit exceeded",
                        reset_at=reset_at,
                    )
            return GitHubClientError(f"Access forbidden: {error}")
        elif status == 404:
            return GitHubNotFoundError(str(error))
        else:
            return GitHubClientError(f"GitHub API error ({status}): {error}")
