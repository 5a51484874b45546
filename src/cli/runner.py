# src/cli/runner.py

"""Headless runners: a single pass, or a scheduled watch loop."""

import asyncio
import logging
from datetime import datetime
from pathlib import Path

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from rich.console import Console
from rich.text import Text

from src.config.settings import Settings
from src.config.sources import load_source_urls
from src.errors import ListingWatchError
from src.scrapers.renderers import build_renderer
from src.services.pipeline import PipelineOrchestrator, RunResult
from src.storage.snapshot_store import SnapshotStore

logger = logging.getLogger("listing_watch.cli")

# Stderr console for status messages so stdout carries change lines
_err = Console(stderr=True)


def build_orchestrator(
    snapshot_path: Path | None,
    strict_snapshot: bool,
) -> PipelineOrchestrator:
    """Wire a store and orchestrator from CLI options."""
    store = SnapshotStore(path=snapshot_path, strict=strict_snapshot)
    return PipelineOrchestrator(store=store)


async def run_cycle(
    orchestrator: PipelineOrchestrator,
    config_path: Path | None,
    renderer_kind: str,
) -> RunResult:
    """Load the sources, start a renderer and execute one run.

    The config is re-read on every cycle so edits apply to the next
    scheduled run.  A :class:`ConfigError` aborts before any network
    activity.
    """
    if orchestrator.is_running:
        logger.warning("Previous run still in flight; skipping")
        return orchestrator.skipped_result()

    urls = load_source_urls(config_path)
    async with build_renderer(renderer_kind) as renderer:
        return await orchestrator.run(urls, renderer)


def _print_summary(result: RunResult) -> None:
    """Write a one-line run summary to stderr."""
    if result.skipped:
        _err.print("[yellow]Run skipped (another run in flight).[/yellow]")
        return

    for error_msg in result.errors:
        _err.print(Text(f"Source failed: {error_msg}", style="red"))

    parts: list[str] = [
        f"{result.new_items} new",
        f"{result.price_changes} changed",
        f"{result.items_seen} seen",
    ]
    if result.items_skipped:
        parts.append(f"{result.items_skipped} unparseable")
    colour = "yellow" if result.sources_failed else "green"
    ok_sources = result.sources_total - result.sources_failed
    _err.print(
        f"[{colour}]✓ {ok_sources}/{result.sources_total} sources"
        f" ({', '.join(parts)})[/{colour}]"
    )


async def run_once(
    config_path: Path | None,
    snapshot_path: Path | None,
    renderer_kind: str,
    strict_snapshot: bool = False,
) -> int:
    """Run the pipeline a single time; return an exit code (0=ok, 1=fail)."""
    orchestrator = build_orchestrator(snapshot_path, strict_snapshot)
    try:
        result = await run_cycle(orchestrator, config_path, renderer_kind)
    except ListingWatchError as exc:
        logger.error("Run failed: %s", exc, exc_info=True)
        _err.print(Text(f"Run failed: {exc}", style="red"))
        return 1

    _print_summary(result)
    return 0


async def run_watch(
    config_path: Path | None,
    snapshot_path: Path | None,
    renderer_kind: str,
    interval_minutes: int | None = None,
    strict_snapshot: bool = False,
) -> int:
    """Run the pipeline on a fixed interval until interrupted."""
    orchestrator = build_orchestrator(snapshot_path, strict_snapshot)
    interval = interval_minutes or Settings.RUN_INTERVAL_MINUTES
    if interval <= 0:
        interval = 1

    async def scheduled_cycle() -> None:
        try:
            result = await run_cycle(
                orchestrator, config_path, renderer_kind
            )
        except Exception:
            logger.exception("Scheduled run failed")
            return
        _print_summary(result)

    scheduler = AsyncIOScheduler()
    scheduler.add_job(
        scheduled_cycle,
        "interval",
        minutes=interval,
        max_instances=1,
        coalesce=True,
        next_run_time=datetime.now(),
    )
    scheduler.start()
    logger.info("Scheduler started with interval=%d minutes", interval)
    _err.print(
        f"[bold]Watching[/bold] every {interval} min "
        "[dim](Ctrl+C to stop)[/dim]"
    )

    try:
        await asyncio.Event().wait()
    finally:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")
    return 0
