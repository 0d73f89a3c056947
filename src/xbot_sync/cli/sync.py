"""Reconciliation commands: run and plan."""

import asyncio
import json

import typer
from rich.table import Table

from xbot_sync.cli.common import OutputFormatOption, console, open_syncer, run_async_command
from xbot_sync.config import get_settings
from xbot_sync.logging import LogContext, get_logger
from xbot_sync.reconcile import OutputFormat, Partition, SyncRunResult

logger = get_logger(__name__)


def _print_result(result: SyncRunResult, output_format: OutputFormat) -> None:
    if output_format == OutputFormat.JSON:
        console.print_json(json.dumps(result.to_dict()))
        return

    if result.success:
        console.print(
            f"[green]Sync complete[/green] "
            f"(deleted {result.to_delete}, created {result.to_create}, "
            f"synced {result.to_sync}) in {result.duration_seconds:.1f}s"
        )
    else:
        phase = result.failed_phase.value if result.failed_phase else "?"
        console.print(f"[red]Sync failed during {phase}:[/red] {result.error}")


def _print_plan(plan: Partition) -> None:
    table = Table(title="Reconciliation plan")
    table.add_column("Action", style="bold")
    table.add_column("Bot")
    table.add_column("PR", style="cyan")
    table.add_column("Branch")

    for pair in plan.to_delete:
        if pair.bot:
            table.add_row("[red]delete[/red]", pair.bot.name, "", "")
    for pair in plan.to_create:
        if pair.pr:
            table.add_row(
                "[green]create[/green]",
                pair.pr.bot_key,
                f"#{pair.pr.number}",
                pair.pr.branch or "",
            )
    for pair in plan.to_sync:
        if pair.bot and pair.pr:
            table.add_row("sync", pair.bot.name, f"#{pair.pr.number}", pair.pr.branch or "")

    if plan.total == 0:
        console.print("[dim]No open PRs and no bots.[/dim]")
        return
    console.print(table)


def run(
    watch: bool = typer.Option(
        False,
        "--watch",
        "-w",
        help="Keep running, reconciling every --interval seconds",
    ),
    interval: int | None = typer.Option(
        None,
        "--interval",
        "-i",
        min=1,
        help="Seconds between runs in watch mode (default: SYNC__INTERVAL_SECONDS)",
    ),
    output_format: OutputFormatOption = OutputFormat.TEXT,
) -> None:
    """Reconcile Xcode Server bots with open pull requests.

    Deletes bots whose PR closed, creates bots for new PRs, and mirrors
    integration results onto PR commit statuses.

    Examples:
        xbot-sync run
        xbot-sync run --format json
        xbot-sync -v run --watch --interval 120
    """
    settings = get_settings()
    delay = interval or settings.sync.interval_seconds

    async def _run_once() -> SyncRunResult:
        async with open_syncer(settings) as syncer:
            return await syncer.sync()

    async def _watch() -> None:
        run_number = 0
        while True:
            run_number += 1
            with LogContext(run=run_number):
                try:
                    _print_result(await _run_once(), output_format)
                except Exception as e:
                    # Runs are independent; the next one re-fetches state
                    logger.error("Run {} could not start: {}", run_number, e)
            await asyncio.sleep(delay)

    if watch:
        try:
            run_async_command(_watch(), error_prefix="Watch failed")
        except KeyboardInterrupt:
            console.print("[dim]Stopped.[/dim]")
        return

    result = run_async_command(_run_once(), error_prefix="Sync failed")
    _print_result(result, output_format)
    if not result.success:
        raise typer.Exit(1)


def plan(output_format: OutputFormatOption = OutputFormat.TEXT) -> None:
    """Show what a run would do, without changing anything.

    Examples:
        xbot-sync plan
        xbot-sync plan --format json
    """

    async def _plan() -> Partition:
        async with open_syncer() as syncer:
            return await syncer.plan()

    partition = run_async_command(_plan(), error_prefix="Plan failed")

    if output_format == OutputFormat.JSON:
        console.print_json(json.dumps(partition.to_dict()))
        return
    _print_plan(partition)
