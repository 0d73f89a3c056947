"""Pair open pull requests with existing bots.

Pure functions: no I/O, no mutation of the inputs.
"""

from __future__ import annotations

from collections import Counter, defaultdict
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from xbot_sync.logging import get_logger

from .exceptions import AmbiguousMatchError

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from xbot_sync.schemas import GitHubPullRequest

    from .protocols import Bot

logger = get_logger(__name__)


@dataclass(frozen=True)
class BotPRPair:
    """A bot, a pull request, or a bot matched to its pull request.

    - bot only: the PR is gone, the bot should be deleted
    - PR only: the PR has no bot yet, one should be created
    - both: the PR's commit status should mirror the bot's integration
    """

    bot: Bot | None = None
    pr: GitHubPullRequest | None = None

    def __post_init__(self) -> None:
        if self.bot is None and self.pr is None:
            raise ValueError("BotPRPair needs a bot, a pull request, or both")

    @property
    def is_orphaned_bot(self) -> bool:
        return self.pr is None

    @property
    def is_unbuilt_pr(self) -> bool:
        return self.bot is None

    @property
    def is_matched(self) -> bool:
        return self.bot is not None and self.pr is not None


@dataclass(frozen=True)
class Partition:
    """Pairs split by the phase that handles them."""

    to_delete: tuple[BotPRPair, ...] = field(default_factory=tuple)
    to_create: tuple[BotPRPair, ...] = field(default_factory=tuple)
    to_sync: tuple[BotPRPair, ...] = field(default_factory=tuple)

    @property
    def total(self) -> int:
        return len(self.to_delete) + len(self.to_create) + len(self.to_sync)

    def to_dict(self) -> dict[str, list[dict[str, object]]]:
        """Convert to dictionary for JSON serialization."""
        return {
            "delete": [{"bot": p.bot.name} for p in self.to_delete if p.bot],
            "create": [
                {"pr": p.pr.number, "bot": p.pr.bot_key, "branch": p.pr.branch}
                for p in self.to_create
                if p.pr
            ],
            "sync": [
                {"pr": p.pr.number, "bot": p.bot.name}
                for p in self.to_sync
                if p.pr and p.bot
            ],
        }


def match_pairs(
    prs: Iterable[GitHubPullRequest],
    bots: Iterable[Bot],
) -> list[BotPRPair]:
    """Pair every ready PR and every bot exactly once.

    A PR is matched to the bot whose name equals its bot key. PRs that
    are not ready (missing SHA, branch or title) are skipped. Unclaimed
    bots become bot-only pairs, including unclaimed duplicates.

    Args:
        prs: Open pull requests
        bots: Existing bots

    Returns:
        PR pairs in PR order, followed by bot-only pairs in bot order

    Raises:
        AmbiguousMatchError: If two ready PRs share a bot key, or a ready
            PR's key names more than one bot
    """
    ready: list[GitHubPullRequest] = []
    for pr in prs:
        if pr.is_ready:
            ready.append(pr)
        else:
            logger.debug("Skipping PR #{} (missing sha, branch or title)", pr.number)

    duplicate_keys = sorted(
        key for key, count in Counter(pr.bot_key for pr in ready).items() if count > 1
    )
    if duplicate_keys:
        raise AmbiguousMatchError(
            f"Pull requests share bot names: {', '.join(duplicate_keys)}",
            duplicate_keys,
        )

    bot_list = list(bots)
    bots_by_name: dict[str, list[Bot]] = defaultdict(list)
    for bot in bot_list:
        bots_by_name[bot.name].append(bot)

    pairs: list[BotPRPair] = []
    claimed: set[int] = set()
    ambiguous: list[str] = []

    for pr in ready:
        candidates = bots_by_name.get(pr.bot_key, [])
        if len(candidates) > 1:
            ambiguous.append(pr.bot_key)
            continue
        if candidates:
            claimed.add(id(candidates[0]))
            pairs.append(BotPRPair(bot=candidates[0], pr=pr))
        else:
            pairs.append(BotPRPair(pr=pr))

    if ambiguous:
        raise AmbiguousMatchError(
            f"Multiple bots share the name of an open PR: {', '.join(sorted(ambiguous))}",
            sorted(ambiguous),
        )

    for bot in bot_list:
        if id(bot) not in claimed:
            pairs.append(BotPRPair(bot=bot))

    return pairs


def partition(pairs: Sequence[BotPRPair]) -> Partition:
    """Split pairs into delete, create and sync work, preserving order."""
    return Partition(
        to_delete=tuple(p for p in pairs if p.is_orphaned_bot),
        to_create=tuple(p for p in pairs if p.is_unbuilt_pr),
        to_sync=tuple(p for p in pairs if p.is_matched),
    )
