"""Pydantic schemas for xbot-sync.

This module provides the models parsed from GitHub and Xcode Server
responses and the bot configuration sent back to Xcode Server.
"""

from .enums import CommitStatus
from .github_api import GitHubBranchRef, GitHubCommitStatus, GitHubPullRequest, GitHubUser
from .repository import parse_repo_string, ssh_git_url
from .xcode_api import (
    BotConfigTemplate,
    BotConfiguration,
    BotRecord,
    BuildResultSummary,
    Integration,
)

__all__ = [
    # Enums
    "CommitStatus",
    # GitHub API
    "GitHubBranchRef",
    "GitHubCommitStatus",
    "GitHubPullRequest",
    "GitHubUser",
    # Repository
    "parse_repo_string",
    "ssh_git_url",
    # Xcode Server API
    "BotConfigTemplate",
    "BotConfiguration",
    "BotRecord",
    "BuildResultSummary",
    "Integration",
]
