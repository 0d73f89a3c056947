"""Result objects for reconciliation runs.

A run either succeeds or fails at one phase because of one error;
there is no per-item success report.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .enums import SyncPhase
from .exceptions import SyncError


@dataclass
class SyncRunResult:
    """Outcome of one reconciliation run."""

    started_at: datetime
    """When the run started."""

    completed_at: datetime | None = None
    """When the run ended (successfully or not)."""

    completed_phases: list[SyncPhase] = field(default_factory=list)
    """Phases that finished without error, in order."""

    failed_phase: SyncPhase | None = None
    """Phase that raised, if any."""

    error: SyncError | None = None
    """First error encountered; ends the run."""

    to_delete: int = 0
    """Bots planned for deletion."""

    to_create: int = 0
    """Bots planned for creation."""

    to_sync: int = 0
    """Matched pairs planned for status sync."""

    @property
    def success(self) -> bool:
        """Check if every phase completed."""
        return self.error is None and SyncPhase.SYNC in self.completed_phases

    @property
    def state(self) -> SyncPhase:
        """Terminal state of the run: DONE or FAILED."""
        return SyncPhase.DONE if self.success else SyncPhase.FAILED

    @property
    def duration_seconds(self) -> float:
        """Time taken by the run."""
        if self.completed_at is None:
            return 0.0
        return (self.completed_at - self.started_at).total_seconds()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {
            "success": self.success,
            "state": self.state.value,
            "completed_phases": [p.value for p in self.completed_phases],
            "planned": {
                "delete": self.to_delete,
                "create": self.to_create,
                "sync": self.to_sync,
            },
            "started_at": self.started_at.isoformat(),
            "duration_seconds": round(self.duration_seconds, 2),
        }

        if self.error:
            result["failed_phase"] = self.failed_phase.value if self.failed_phase else None
            result["error"] = str(self.error)
            result["error_type"] = type(self.error).__name__

        return result
