"""Enums for reconciliation runs."""

from enum import Enum


class SyncPhase(str, Enum):
    """States of a reconciliation run, in execution order."""

    FETCH = "fetch"
    """Fetch open PRs and existing bots, pair them up."""

    DELETE = "delete"
    """Delete bots whose PR is gone."""

    CREATE = "create"
    """Create bots for PRs that have none."""

    SYNC = "sync"
    """Mirror integration results onto PR commit statuses."""

    DONE = "done"
    """All phases completed."""

    FAILED = "failed"
    """A phase raised; later phases were skipped."""


class StatusAction(str, Enum):
    """What the sync phase does for one matched bot/PR pair."""

    BOOTSTRAP = "bootstrap"
    """No status posted yet: start an integration and post pending."""

    UPDATE = "update"
    """Status differs from the latest integration: post it and comment."""

    NONE = "none"
    """Status already reflects the latest integration."""


class OutputFormat(str, Enum):
    """Output format for CLI commands."""

    TEXT = "text"
    """Human-readable text output."""

    JSON = "json"
    """Machine-readable JSON output."""
