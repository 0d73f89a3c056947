"""Reconciliation core - pull requests to Xcode Server bots.

Components:
- match_pairs / partition: pair open PRs with existing bots
- map_result / decide_action: integration result → commit status
- bounded_wait and friends: bounded waits around collaborator calls
- Delete/Create/Sync phase executors
- GitHubXBotSync: fetch → delete → create → sync orchestrator
"""

from .enums import OutputFormat, StatusAction, SyncPhase
from .exceptions import AmbiguousMatchError, BackendFailureError, SyncError, SyncTimeoutError
from .matcher import BotPRPair, Partition, match_pairs, partition
from .orchestrator import GitHubXBotSync
from .phases import CreatePhaseExecutor, DeletePhaseExecutor, SyncPhaseExecutor
from .results import SyncRunResult
from .status import decide_action, map_result
from .waiter import best_effort, bounded_wait, wait_for_callback, wait_jointly

__all__ = [
    # Orchestration
    "GitHubXBotSync",
    "SyncRunResult",
    # Enums
    "OutputFormat",
    "StatusAction",
    "SyncPhase",
    # Errors
    "AmbiguousMatchError",
    "BackendFailureError",
    "SyncError",
    "SyncTimeoutError",
    # Matching
    "BotPRPair",
    "Partition",
    "match_pairs",
    "partition",
    # Phases
    "CreatePhaseExecutor",
    "DeletePhaseExecutor",
    "SyncPhaseExecutor",
    # Status mapping
    "decide_action",
    "map_result",
    # Bounded waits
    "best_effort",
    "bounded_wait",
    "wait_for_callback",
    "wait_jointly",
]
