"""Reconciliation errors.

Every error that ends a run derives from SyncError and names what was
being attempted and against which bot or PR.
"""

from __future__ import annotations

from .enums import SyncPhase


class SyncError(Exception):
    """Base exception for reconciliation failures."""

    def __init__(self, message: str, phase: SyncPhase | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.phase = phase


class SyncTimeoutError(SyncError):
    """Raised when an operation's bounded wait elapsed without a result."""

    pass


class BackendFailureError(SyncError):
    """Raised when GitHub or Xcode Server reported a failure.

    The collaborator's exception is chained as ``__cause__``.
    """

    pass


class AmbiguousMatchError(SyncError):
    """Raised when PRs and bots cannot be paired unambiguously."""

    def __init__(self, message: str, names: list[str]) -> None:
        super().__init__(message, SyncPhase.FETCH)
        self.names = names
