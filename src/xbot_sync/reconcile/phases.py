"""Phase executors: delete, create and sync.

Each executor takes its slice of the partition and works through it one
item at a time, every collaborator call under a bounded wait. The first
timeout or backend failure ends the phase; remaining items are left for
the next run, which re-derives them from fresh state.
"""

from __future__ import annotations

from collections.abc import Awaitable, Sequence
from typing import TYPE_CHECKING, TypeVar

from xbot_sync.logging import bind_bot, bind_pr
from xbot_sync.schemas import BotConfiguration, CommitStatus, ssh_git_url

from .enums import StatusAction, SyncPhase
from .exceptions import BackendFailureError, SyncError
from .status import decide_action, map_result
from .waiter import best_effort, bounded_wait

if TYPE_CHECKING:
    from xbot_sync.schemas import BotConfigTemplate, GitHubPullRequest

    from .matcher import BotPRPair
    from .protocols import Bot, BotServer, RepositoryClient

T = TypeVar("T")


class PhaseExecutor:
    """Shared plumbing for the three phases."""

    phase: SyncPhase

    def __init__(self, timeout: float) -> None:
        """Initialize the executor.

        Args:
            timeout: Bounded wait, in seconds, for each collaborator call
        """
        self._timeout = timeout

    async def _guarded(
        self,
        awaitable: Awaitable[T],
        *,
        timeout_message: str,
        failure_message: str,
    ) -> T:
        """Await a collaborator call whose failure ends the phase."""
        try:
            return await bounded_wait(awaitable, self._timeout, timeout_message)
        except SyncError as e:
            e.phase = self.phase
            raise
        except Exception as e:
            raise BackendFailureError(f"{failure_message}: {e}", self.phase) from e

    async def _start_integration(
        self,
        bot: Bot,
        pr: GitHubPullRequest,
        repo: RepositoryClient,
    ) -> None:
        """Best-effort: start an integration, then post pending on the PR head.

        The pending status is posted whatever the integration outcome.
        """
        integration = await best_effort(
            bot.integrate(), self._timeout, f"start integration for bot {bot.name}"
        )
        step = integration.current_step if integration else "NO INTEGRATION STEP"
        bind_bot(bot.name).info("Integration for sha {} - {}", pr.sha, step)

        await best_effort(
            repo.set_status(CommitStatus.PENDING, pr.sha or ""),
            self._timeout,
            f"post pending status on {pr.sha}",
        )


class DeletePhaseExecutor(PhaseExecutor):
    """Delete bots whose pull request is no longer open."""

    phase = SyncPhase.DELETE

    async def run(self, pairs: Sequence[BotPRPair]) -> int:
        """Delete every bot in ``pairs``.

        Returns:
            Number of bots deleted

        Raises:
            SyncError: On the first delete that fails or times out
        """
        deleted = 0
        for pair in pairs:
            bot = pair.bot
            if bot is None:
                continue
            bind_bot(bot.name).info("Deleting bot {}", bot.name)
            await self._guarded(
                bot.delete(),
                timeout_message=f"Timeout waiting to delete bot {bot.name}",
                failure_message=f"Unable to delete bot {bot.name}",
            )
            deleted += 1
        return deleted


class CreatePhaseExecutor(PhaseExecutor):
    """Create a bot for every pull request that has none."""

    phase = SyncPhase.CREATE

    def __init__(
        self,
        server: BotServer,
        repository: RepositoryClient,
        template: BotConfigTemplate,
        timeout: float,
    ) -> None:
        """Initialize the executor.

        Args:
            server: Xcode Server holding the bots
            repository: GitHub repository the PRs belong to
            template: Shared bot configuration
            timeout: Bounded wait for each call
        """
        super().__init__(timeout)
        self._server = server
        self._repository = repository
        self._template = template

    def build_configuration(self, pr: GitHubPullRequest) -> BotConfiguration:
        """Overlay the PR's name, branch and git URL on the template."""
        return BotConfiguration.from_template(
            self._template,
            name=pr.bot_key,
            branch=pr.branch or "",
            git_url=ssh_git_url(self._repository.repo_name),
        )

    async def run(self, pairs: Sequence[BotPRPair]) -> int:
        """Create bots for ``pairs`` and kick off their first integration.

        Returns:
            Number of bots created

        Raises:
            SyncError: On the first create that fails or times out
        """
        created = 0
        for pair in pairs:
            pr = pair.pr
            if pr is None:
                continue
            log = bind_bot(pr.bot_key)
            log.info("Creating bot from PR #{}: {}", pr.number, pr.bot_key)

            bot = await self._guarded(
                self._server.create_bot(self.build_configuration(pr)),
                timeout_message=f"Timeout waiting to create bot {pr.bot_key}",
                failure_message=f"Unable to create bot {pr.bot_key}",
            )
            log.info("{} ({}) creation COMPLETED", bot.name, bot.id)
            created += 1

            await self._start_integration(bot, pr, self._repository)
        return created


class SyncPhaseExecutor(PhaseExecutor):
    """Mirror each matched bot's latest integration onto its PR."""

    phase = SyncPhase.SYNC

    def __init__(self, repository: RepositoryClient, timeout: float) -> None:
        super().__init__(timeout)
        self._repository = repository

    async def run(self, pairs: Sequence[BotPRPair]) -> int:
        """Bring PR commit statuses in line with their bots.

        Returns:
            Number of PRs whose status was posted (bootstrap or update)

        Raises:
            SyncError: If fetching an integration or reading/writing a
                status fails or times out
        """
        changed = 0
        for pair in pairs:
            if pair.bot is None or pair.pr is None:
                continue
            if await self._sync_pair(pair.bot, pair.pr):
                changed += 1
        return changed

    async def _sync_pair(self, bot: Bot, pr: GitHubPullRequest) -> bool:
        log = bind_bot(bot.name)
        sha = pr.sha or ""

        integration = await self._guarded(
            bot.fetch_latest_integration(),
            timeout_message=f"Timeout waiting to get bot status {bot.name}",
            failure_message=f"Unable to get bot status {bot.name}",
        )
        if integration is None:
            log.debug("No integration yet for {}", bot.name)
            return False

        log.info(
            "Syncing Status: {} #{} {} {}",
            bot.name,
            integration.number,
            integration.current_step,
            integration.result,
        )
        expected = map_result(integration.result)
        current = await self._guarded(
            self._repository.get_status(sha),
            timeout_message=f"Timeout waiting to get status of {sha} for bot {bot.name}",
            failure_message=f"Unable to get status of {sha} for bot {bot.name}",
        )

        action = decide_action(current, expected)
        if action is StatusAction.BOOTSTRAP:
            await self._start_integration(bot, pr, self._repository)
            return True

        if action is StatusAction.UPDATE:
            bind_pr(self._repository.repo_name, pr.number).info(
                "Updating status of {} to {}", bot.name, expected.value
            )
            await self._guarded(
                self._repository.set_status(expected, sha),
                timeout_message=f"Timeout waiting to set status of {sha} for bot {bot.name}",
                failure_message=f"Unable to set status of {sha} for bot {bot.name}",
            )
            await best_effort(
                self._repository.add_comment(pr.number, integration.summary),
                self._timeout,
                f"comment on PR #{pr.number}",
            )
            return True

        log.info("Status unchanged: {}", expected.value)
        return False
