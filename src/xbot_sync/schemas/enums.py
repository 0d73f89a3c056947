"""Enums for Pydantic schemas."""

from enum import Enum


class CommitStatus(str, Enum):
    """Commit status mirrored onto a pull request's head commit.

    Values other than NO_STATUS are GitHub's commit status states.
    """

    NO_STATUS = "none"
    """Nothing has been posted for the commit yet. Never sent to GitHub."""

    PENDING = "pending"
    SUCCESS = "success"
    FAILURE = "failure"
    ERROR = "error"
