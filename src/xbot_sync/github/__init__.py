"""GitHub API client module.

This module provides:
- GitHubRepoClient: Async client for PRs, commit statuses and comments
- Client exceptions
"""

from .client import GitHubRepoClient
from .exceptions import (
    GitHubAuthenticationError,
    GitHubClientError,
    GitHubNotFoundError,
    GitHubRateLimitError,
)

__all__ = [
    # Client
    "GitHubRepoClient",
    # Exceptions
    "GitHubAuthenticationError",
    "GitHubClientError",
    "GitHubNotFoundError",
    "GitHubRateLimitError",
]
