"""Pydantic schemas for parsing GitHub API responses.

These schemas map directly to the GitHub REST API response structure.
See: https://docs.github.com/en/rest/pulls/pulls
"""

from pydantic import BaseModel, Field

from .enums import CommitStatus


class GitHubUser(BaseModel):
    """GitHub user object from API responses."""

    login: str = Field(description="GitHub username")
    id: int = Field(description="GitHub user ID")


class GitHubBranchRef(BaseModel):
    """Head or base reference of a pull request."""

    ref: str | None = Field(default=None, description="Branch name")
    sha: str | None = Field(default=None, description="Commit SHA the ref points at")


class GitHubPullRequest(BaseModel):
    """GitHub Pull Request object from API.

    Maps to: GET /repos/{owner}/{repo}/pulls

    Head branch, head SHA and title may be missing for PRs whose source
    repository was deleted; such PRs are not ready for reconciliation.
    """

    number: int = Field(description="PR number")
    title: str | None = Field(default=None, description="PR title")
    state: str = Field(default="open", description="PR state (open, closed)")
    html_url: str | None = Field(default=None, description="GitHub PR URL")
    user: GitHubUser | None = Field(default=None, description="PR author")
    head: GitHubBranchRef = Field(
        default_factory=GitHubBranchRef, description="Source branch of the PR"
    )

    @property
    def sha(self) -> str | None:
        """Head commit SHA."""
        return self.head.sha or None

    @property
    def branch(self) -> str | None:
        """Head branch name."""
        return self.head.ref or None

    @property
    def bot_key(self) -> str:
        """Bot name this PR is matched against.

        The title with surrounding whitespace stripped and internal
        whitespace runs collapsed, so cosmetic edits to spacing do not
        orphan the PR's bot.
        """
        return " ".join((self.title or "").split())

    @property
    def is_ready(self) -> bool:
        """Whether the PR carries everything a bot needs (SHA, branch, title)."""
        return bool(self.sha and self.branch and self.bot_key)


class GitHubCommitStatus(BaseModel):
    """Single commit status entry.

    Maps to: GET /repos/{owner}/{repo}/commits/{ref}/statuses
    """

    state: str = Field(description="Status state (pending, success, failure, error)")
    context: str = Field(default="default", description="Status context label")
    description: str | None = Field(default=None, description="Short description")

    def to_commit_status(self) -> CommitStatus:
        """Convert the API state to a CommitStatus.

        Unknown states are treated as ERROR.
        """
        try:
            return CommitStatus(self.state)
        except ValueError:
            return CommitStatus.ERROR
