"""Common CLI option factories and helpers.

This module centralizes reusable CLI options and provides:
- `run_async_command`: Unified async execution with error handling for CLI commands
- `open_syncer`: Builds the orchestrator and its clients from settings
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Coroutine
from contextlib import asynccontextmanager
from typing import Annotated, TypeVar

import typer
from rich.console import Console

from xbot_sync.config import Settings, get_settings, load_bot_template
from xbot_sync.github import GitHubRepoClient
from xbot_sync.reconcile import GitHubXBotSync, OutputFormat
from xbot_sync.xcode import XcodeServerClient

# Shared console instance for CLI output
console = Console()

T = TypeVar("T")


def run_async_command(
    coro: Coroutine[object, object, T],
    *,
    error_prefix: str = "Error",
) -> T:
    """Execute async code from synchronous CLI command with unified error handling.

    Uses asyncio.run() for clean event loop management. Catches exceptions,
    prints user-friendly error messages, and exits with code 1.

    Args:
        coro: Async coroutine to execute
        error_prefix: Prefix for error messages (default: "Error")

    Returns:
        Result from the coroutine

    Raises:
        typer.Exit: Re-raised from deliberate exits, or raised with code 1 on error
    """
    try:
        return asyncio.run(coro)
    except typer.Exit:
        raise
    except Exception as e:
        console.print(f"[red]{error_prefix}:[/red] {e}")
        raise typer.Exit(1) from None


@asynccontextmanager
async def open_syncer(settings: Settings | None = None) -> AsyncIterator[GitHubXBotSync]:
    """Open both clients and yield an orchestrator wired to them.

    Raises:
        ConfigError: If the bot template cannot be loaded
        ValueError: If GITHUB_REPO is missing or malformed
    """
    settings = settings or get_settings()
    if not settings.github_repo:
        raise ValueError("GITHUB_REPO not set (expected owner/name)")

    template = load_bot_template(settings.bot_template_file)

    async with GitHubRepoClient(settings.github_repo) as repository:
        async with XcodeServerClient() as server:
            yield GitHubXBotSync(
                server,
                repository,
                template,
                timeout=settings.sync.operation_timeout_seconds,
            )


def mask_secret(value: str) -> str:
    """Mask all but the last four characters of a secret."""
    if not value:
        return "(not set)"
    if len(value) <= 4:
        return "****"
    return "****" + value[-4:]


# Typer requires function calls as default arguments, which triggers B008.
# Using Annotated with a centralized type alias keeps the noqa in one place.

OutputFormatOption = Annotated[
    OutputFormat,
    typer.Option(
        "--format",
        "-f",
        help="Output format",
    ),
]
"""Output format option type for CLI commands.

Usage:
    def command(output_format: OutputFormatOption = OutputFormat.TEXT):
"""
