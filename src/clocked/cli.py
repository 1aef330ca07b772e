"""Typer CLI for Clocked — sync the log cache and query it."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Annotated

import typer
from result import Err, Result

from clocked.config import Config
from clocked.data.db import StorageError
from clocked.services.container import ServiceContainer
from clocked.services.cost import format_cost, format_multiplier
from clocked.services.time_split import format_duration, format_time_split

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="clocked",
    help="Clocked — time and activity tracking for Claude Code projects.",
    no_args_is_help=True,
)


@app.callback()
def main(
    ctx: typer.Context,
    claude_dir: Annotated[
        Path | None,
        typer.Option("--claude-dir", help="Path to Claude data directory"),
    ] = None,
    data_dir: Annotated[
        Path | None,
        typer.Option("--data-dir", help="Directory holding the Clocked cache database"),
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")] = False,
) -> None:
    """Clocked — time and activity tracking for Claude Code projects."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        force=True,
    )
    defaults = Config()
    ctx.obj = Config(
        claude_dir=claude_dir or defaults.claude_dir,
        data_dir=data_dir or defaults.data_dir,
    )


@app.command()
def sync(ctx: typer.Context) -> None:
    """Scan the Claude projects directory into the cache."""
    _run(ctx.obj, _do_sync)


@app.command()
def projects(
    ctx: typer.Context,
    show_all: Annotated[bool, typer.Option("--all", help="Include hidden projects")] = False,
) -> None:
    """List projects, most recently active first."""

    async def run(services: ServiceContainer) -> None:
        found = _unwrap(await services.project_service.get_all_projects(include_hidden=show_all))
        if not found:
            typer.echo("No projects. Run 'clocked sync' first.")
            return
        for project in found:
            flags = []
            if project.is_default:
                flags.append("default")
            if project.is_hidden:
                flags.append("hidden")
            if project.merged_into:
                flags.append(f"merged into {project.merged_into}")
            suffix = f" [{', '.join(flags)}]" if flags else ""
            typer.echo(
                f"{project.name:<24} {project.session_count:>5} sessions "
                f"{format_duration(project.total_time):>9}  {project.path}{suffix}"
            )

    _run(ctx.obj, run)


@app.command()
def sessions(
    ctx: typer.Context,
    path: Annotated[str, typer.Argument(help="Canonical project path")],
    limit: Annotated[int, typer.Option("--limit", min=0, help="Page size")] = 20,
    offset: Annotated[int, typer.Option("--offset", min=0, help="Rows to skip")] = 0,
) -> None:
    """List a project's sessions (including merged projects), newest first."""

    async def run(services: ServiceContainer) -> None:
        page = _unwrap(
            await services.session_service.get_sessions_by_project(path, limit, offset)
        )
        for session in page.sessions:
            label = session.summary or session.first_prompt or ""
            typer.echo(
                f"{session.created}  {session.id}  {session.message_count:>4} msgs "
                f"{format_duration(session.duration):>9}  {label[:60]}"
            )
        shown = len(page.sessions)
        typer.echo(f"Showing {offset + 1 if shown else 0}-{offset + shown} of {page.total}")

    _run(ctx.obj, run)


@app.command("time-split")
def time_split(
    ctx: typer.Context,
    path: Annotated[str, typer.Argument(help="Canonical project path")],
) -> None:
    """Show human vs. Claude time for a project."""

    async def run(services: ServiceContainer) -> None:
        split = _unwrap(await services.time_split_service.get_time_split(path))
        typer.echo(format_time_split(split))

    _run(ctx.obj, run)


@app.command()
def summary(
    ctx: typer.Context,
    month: Annotated[str, typer.Argument(help="Month as YYYY-MM")],
) -> None:
    """Show totals, daily activity and top projects for a month."""

    async def run(services: ServiceContainer) -> None:
        report = _unwrap(
            await services.summary_service.get_monthly_summary(
                month, top_n=services.config.top_projects
            )
        )
        typer.echo(
            f"{report.month}: {report.total_sessions} sessions, "
            f"{report.total_messages} messages, "
            f"{format_duration(report.total_active_time)} active, "
            f"~{format_cost(report.estimated_api_cost)} API equivalent"
        )
        typer.echo(
            f"  {report.usage_percentage:.0f}% of estimated max usage, "
            f"{format_multiplier(report.value_multiplier)} subscription value"
        )
        for day in report.daily_activity:
            if day.session_count:
                typer.echo(
                    f"  {day.date}  {day.session_count:>3} sessions "
                    f"{format_duration(day.total_time):>9}"
                )
        if report.top_projects:
            typer.echo("Top projects:")
        for top in report.top_projects:
            typer.echo(
                f"  {top.name:<24} {top.session_count:>4} sessions "
                f"{format_duration(top.total_time):>9}  {format_cost(top.estimated_cost)}"
            )

    _run(ctx.obj, run)


@app.command()
def merge(
    ctx: typer.Context,
    sources: Annotated[list[str], typer.Argument(help="Projects to merge")],
    into: Annotated[str, typer.Option("--into", help="Primary project path")],
) -> None:
    """Merge projects into a primary project."""

    async def run(services: ServiceContainer) -> None:
        count = _unwrap(await services.project_service.merge_projects(sources, into))
        typer.echo(f"Merged {count} project(s) into {into}")

    _run(ctx.obj, run)


@app.command()
def unmerge(
    ctx: typer.Context,
    path: Annotated[str, typer.Argument(help="Merged project path")],
) -> None:
    """Detach a project from its primary."""

    async def run(services: ServiceContainer) -> None:
        if _unwrap(await services.project_service.unmerge_project(path)):
            typer.echo(f"Unmerged {path}")
        else:
            typer.echo(f"{path} is not merged")

    _run(ctx.obj, run)


@app.command()
def hide(
    ctx: typer.Context,
    path: Annotated[str, typer.Argument(help="Project path")],
    show: Annotated[bool, typer.Option("--show", help="Unhide instead")] = False,
) -> None:
    """Hide a project from the default project list."""

    async def run(services: ServiceContainer) -> None:
        _unwrap(await services.project_service.set_hidden(path, not show))
        typer.echo(f"{'Unhid' if show else 'Hid'} {path}")

    _run(ctx.obj, run)


async def _do_sync(services: ServiceContainer) -> None:
    """Run the sync and print its outcome."""
    typer.echo(f"Syncing sessions from {services.config.projects_dir}...")

    def progress(current: int, total: int, message: str) -> None:
        logger.debug("[%d/%d] %s", current, total, message)

    result = await services.sync_engine.sync(progress_callback=progress)
    if result.root is None:
        typer.echo(f"No Claude projects directory at {services.config.projects_dir}")
        return
    for error in result.errors:
        typer.echo(f"  warning: {error}", err=True)
    typer.echo(f"\nDone! {result}")


def _run(config: Config, command: Callable[[ServiceContainer], Awaitable[None]]) -> None:
    try:
        asyncio.run(_with_services(config, command))
    except (StorageError, OSError) as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1) from exc


async def _with_services(
    config: Config,
    command: Callable[[ServiceContainer], Awaitable[None]],
) -> None:
    async with await ServiceContainer.create(config) as services:
        await command(services)


def _unwrap[T](result: Result[T, str]) -> T:
    if isinstance(result, Err):
        typer.echo(f"Error: {result.err_value}", err=True)
        raise typer.Exit(1)
    return result.ok_value
