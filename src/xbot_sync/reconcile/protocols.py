"""Collaborator interfaces the reconciliation core depends on.

GitHubRepoClient and XcodeServerClient implement these; tests use
AsyncMock-based fakes. Failures are raised as exceptions, the phases
translate them into BackendFailureError.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from xbot_sync.schemas import (
        BotConfiguration,
        CommitStatus,
        GitHubPullRequest,
        Integration,
    )


class Bot(Protocol):
    """A bot living on the CI server."""

    @property
    def id(self) -> str: ...

    @property
    def name(self) -> str: ...

    async def delete(self) -> None: ...

    async def integrate(self) -> Integration | None: ...

    async def fetch_latest_integration(self) -> Integration | None: ...


class BotServer(Protocol):
    """The CI server holding the bot fleet."""

    async def fetch_bots(self) -> list[Bot]: ...

    async def create_bot(self, config: BotConfiguration) -> Bot: ...


class RepositoryClient(Protocol):
    """The source repository whose open PRs drive the fleet."""

    @property
    def repo_name(self) -> str:
        """Repository in owner/name format."""
        ...

    async def fetch_pull_requests(self) -> list[GitHubPullRequest]: ...

    async def get_status(self, sha: str) -> CommitStatus: ...

    async def set_status(self, status: CommitStatus, sha: str) -> None: ...

    async def add_comment(self, pr_number: int, text: str) -> None: ...
