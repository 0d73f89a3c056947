"""Reconciliation orchestrator: fetch → delete → create → sync.

Runs the phases strictly in order against a snapshot of PRs and bots
taken at the start of the run. The first error ends the run; nothing is
retried or rolled back. The next run re-fetches state and picks up
whatever was left undone.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from xbot_sync.logging import get_logger

from .enums import SyncPhase
from .exceptions import SyncError
from .matcher import Partition, match_pairs, partition
from .phases import CreatePhaseExecutor, DeletePhaseExecutor, SyncPhaseExecutor
from .results import SyncRunResult
from .waiter import wait_jointly

if TYPE_CHECKING:
    from xbot_sync.schemas import BotConfigTemplate

    from .protocols import BotServer, RepositoryClient

logger = get_logger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0


class GitHubXBotSync:
    """Keeps one Xcode Server bot per open pull request.

    Usage:
        async with GitHubRepoClient("octo-org/ios-app") as repo:
            async with XcodeServerClient(url, user, password) as server:
                syncer = GitHubXBotSync(server, repo, template)
                result = await syncer.sync()
                if not result.success:
                    print(f"Failed at {result.failed_phase}: {result.error}")

    Callers must not run ``sync()`` concurrently on the same fleet.
    """

    def __init__(
        self,
        bot_server: BotServer,
        repository: RepositoryClient,
        template: BotConfigTemplate,
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            bot_server: Xcode Server client
            repository: GitHub repository client
            template: Shared configuration for new bots
            timeout: Bounded wait for every collaborator call (seconds)
        """
        self._bot_server = bot_server
        self._repository = repository
        self._timeout = timeout
        self._delete = DeletePhaseExecutor(timeout)
        self._create = CreatePhaseExecutor(bot_server, repository, template, timeout)
        self._sync = SyncPhaseExecutor(repository, timeout)

    async def plan(self) -> Partition:
        """Fetch PRs and bots and pair them, without changing anything.

        Raises:
            SyncError: If fetching times out or fails, or pairing is ambiguous
        """
        try:
            fetched = await wait_jointly(
                {
                    "github": self._repository.fetch_pull_requests(),
                    "bots": self._bot_server.fetch_bots(),
                },
                self._timeout,
            )
            pairs = match_pairs(fetched["github"], fetched["bots"])
        except SyncError as e:
            e.phase = SyncPhase.FETCH
            raise

        plan = partition(pairs)
        logger.info(
            "Fetched {} PRs and {} bots: delete={}, create={}, sync={}",
            len(fetched["github"]),
            len(fetched["bots"]),
            len(plan.to_delete),
            len(plan.to_create),
            len(plan.to_sync),
        )
        return plan

    async def sync(self) -> SyncRunResult:
        """Run one full reconciliation.

        Returns:
            SyncRunResult; ``success`` is False if any phase failed, with
            ``failed_phase`` and ``error`` describing the first failure
        """
        result = SyncRunResult(started_at=datetime.now(UTC))
        phase = SyncPhase.FETCH

        try:
            plan = await self.plan()
            result.to_delete = len(plan.to_delete)
            result.to_create = len(plan.to_create)
            result.to_sync = len(plan.to_sync)
            result.completed_phases.append(SyncPhase.FETCH)

            phase = SyncPhase.DELETE
            await self._delete.run(plan.to_delete)
            result.completed_phases.append(phase)

            phase = SyncPhase.CREATE
            await self._create.run(plan.to_create)
            result.completed_phases.append(phase)

            phase = SyncPhase.SYNC
            await self._sync.run(plan.to_sync)
            result.completed_phases.append(phase)
        except SyncError as e:
            if e.phase is None:
                e.phase = phase
            result.failed_phase = e.phase
            result.error = e
            logger.error("Sync failed during {}: {}", e.phase.value, e)
        finally:
            result.completed_at = datetime.now(UTC)

        if result.success:
            logger.info(
                "Sync complete: deleted={}, created={}, synced={} ({:.1f}s)",
                result.to_delete,
                result.to_create,
                result.to_sync,
                result.duration_seconds,
            )
        return result
