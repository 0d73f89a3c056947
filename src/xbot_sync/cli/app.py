"""Main CLI application for xbot-sync."""

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from xbot_sync import __version__
from xbot_sync.cli import sync as sync_cmd
from xbot_sync.cli.common import mask_secret
from xbot_sync.config import ConfigError, get_settings, load_bot_template
from xbot_sync.logging import setup_logging
from xbot_sync.schemas import parse_repo_string

app = typer.Typer(
    name="xbot-sync",
    help="Keep Xcode Server bots in sync with open GitHub pull requests.",
    add_completion=False,
)
console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"xbot-sync version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable debug logging.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress non-error output (WARNING level).",
        ),
    ] = False,
) -> None:
    """xbot-sync - one Xcode Server bot per open pull request."""
    settings = get_settings()
    log_config = settings.logging

    setup_logging(
        level=settings.log_level,
        verbose=verbose,
        quiet=quiet,
        log_file=Path(log_config.log_file) if log_config.log_file else None,
        rotation=log_config.rotation,
        retention=log_config.retention,
        serialize=log_config.serialize,
    )


@app.command()
def check() -> None:
    """Validate settings and the bot template, then print them.

    Examples:
        xbot-sync check
    """
    settings = get_settings()
    problems: list[str] = []

    if not settings.github_token:
        problems.append("GITHUB_TOKEN not set")
    try:
        parse_repo_string(settings.github_repo)
    except ValueError:
        problems.append("GITHUB_REPO must be in owner/name format")

    template = None
    try:
        template = load_bot_template(settings.bot_template_file)
    except ConfigError as e:
        problems.append(str(e))

    table = Table(title="Effective configuration")
    table.add_column("Setting", style="bold")
    table.add_column("Value")
    table.add_row("GitHub repository", settings.github_repo or "(not set)")
    table.add_row("GitHub token", mask_secret(settings.github_token))
    table.add_row("Status context", settings.github_status_context)
    table.add_row("Xcode Server", settings.xcode_server_url)
    table.add_row("Xcode Server user", settings.xcode_server_user or "(none)")
    table.add_row("Bot template", settings.bot_template_file)
    if template is not None:
        table.add_row("  scheme", template.scheme_name)
        table.add_row("  project/workspace", template.project_or_workspace)
        actions = [
            name
            for name, enabled in (
                ("test", template.performs_test_action),
                ("analyze", template.performs_analyze_action),
                ("archive", template.performs_archive_action),
            )
            if enabled
        ]
        table.add_row("  actions", ", ".join(actions) or "(none)")
    table.add_row("Operation timeout", f"{settings.sync.operation_timeout_seconds:g}s")
    console.print(table)

    if problems:
        for problem in problems:
            console.print(f"[red]Error:[/red] {problem}")
        raise typer.Exit(1)
    console.print("[green]Configuration OK[/green]")


app.command("run")(sync_cmd.run)
app.command("plan")(sync_cmd.plan)


if __name__ == "__main__":
    app()
