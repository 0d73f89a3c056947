"""Map Xcode Server integration results to commit statuses."""

from __future__ import annotations

from xbot_sync.schemas import CommitStatus

from .enums import StatusAction

_RESULT_STATUS: dict[str, CommitStatus] = {
    "succeeded": CommitStatus.SUCCESS,
    "warnings": CommitStatus.SUCCESS,
    "analyzer-warnings": CommitStatus.SUCCESS,
    "build-errors": CommitStatus.FAILURE,
    "test-failures": CommitStatus.FAILURE,
    "build-failed": CommitStatus.FAILURE,
    # Integration still running
    "unknown": CommitStatus.PENDING,
    "pending": CommitStatus.PENDING,
    "canceled": CommitStatus.ERROR,
    "checkout-error": CommitStatus.ERROR,
    "trigger-error": CommitStatus.ERROR,
}


def map_result(result: str | None) -> CommitStatus:
    """Map an integration result to the commit status that reports it.

    Total: unrecognized or missing results map to ERROR so an unknown
    outcome is never reported as a success.

    Args:
        result: Raw integration result text (e.g., "test-failures")

    Returns:
        CommitStatus to post; never NO_STATUS
    """
    key = (result or "").strip().lower()
    return _RESULT_STATUS.get(key, CommitStatus.ERROR)


def decide_action(current: CommitStatus, expected: CommitStatus) -> StatusAction:
    """Decide what to do for a matched pair.

    Args:
        current: Status currently posted on the PR head commit
        expected: Status mapped from the bot's latest integration

    Returns:
        BOOTSTRAP when nothing is posted yet, UPDATE when the posted
        status is stale, NONE otherwise
    """
    if current is CommitStatus.NO_STATUS:
        return StatusAction.BOOTSTRAP
    if expected is not current:
        return StatusAction.UPDATE
    return StatusAction.NONE
