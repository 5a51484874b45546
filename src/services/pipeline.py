# src/services/pipeline.py

"""Orchestrates one scrape-extract-diff-persist run across all sources."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

from src.config.settings import Settings
from src.errors import ParseError, RenderError
from src.filters.price_normalizer import ItemNormalizer
from src.models.change_event import ChangeEvent, NewItem, PriceChanged
from src.models.listing_item import NormalizedItem
from src.scrapers.page_extractor import PageExtractor
from src.scrapers.renderers import Renderer
from src.services.notifier import ChangeNotifier, ConsoleNotifier
from src.services.reconciler import reconcile
from src.storage.fingerprint import fingerprint
from src.storage.snapshot_store import SnapshotStore

logger = logging.getLogger("listing_watch.pipeline")


def _local_now() -> datetime:
    """Current local time, second precision, with UTC offset."""
    return datetime.now().astimezone().replace(microsecond=0)


@dataclass
class SourceOutcome:
    """Normalized items scraped from one source."""

    url: str
    source_hash: str
    items: list[NormalizedItem]
    skipped: int = 0


@dataclass
class RunResult:
    """Container for a completed pipeline run."""

    started_at: datetime
    sources_total: int = 0
    sources_failed: int = 0
    items_seen: int = 0
    items_skipped: int = 0
    events: list[ChangeEvent] = field(
        default_factory=lambda: list[ChangeEvent]()
    )
    errors: list[str] = field(
        default_factory=lambda: list[str]()
    )
    skipped: bool = False

    @property
    def new_items(self) -> int:
        return sum(isinstance(e, NewItem) for e in self.events)

    @property
    def price_changes(self) -> int:
        return sum(isinstance(e, PriceChanged) for e in self.events)


class PipelineOrchestrator:
    """Coordinates rendering, extraction, reconciliation and persistence.

    Only one :meth:`run` may be in flight per instance; an
    overlapping call returns a ``skipped`` result straight away.
    """

    def __init__(
        self,
        store: SnapshotStore,
        extractor: PageExtractor | None = None,
        notifier: ChangeNotifier | None = None,
        max_concurrency: int | None = None,
        render_timeout: float | None = None,
        clock: Callable[[], datetime] = _local_now,
    ) -> None:
        self.settings = Settings()
        self.store = store
        self.extractor = extractor or PageExtractor()
        self.notifier: ChangeNotifier = notifier or ConsoleNotifier()
        self.max_concurrency = (
            max_concurrency or self.settings.MAX_CONCURRENT_SOURCES
        )
        self.render_timeout = (
            render_timeout or self.settings.RENDER_TIMEOUT
        )
        self._clock = clock
        self._lock = asyncio.Lock()

    @property
    def is_running(self) -> bool:
        return self._lock.locked()

    def skipped_result(self) -> RunResult:
        """A RunResult for a trigger that arrived mid-run."""
        return RunResult(started_at=self._clock(), skipped=True)

    # ── Private helpers ──────────────────────────────────

    async def _render(self, renderer: Renderer, url: str) -> str:
        """Render with a hard timeout; a timeout is a RenderError."""
        try:
            return await asyncio.wait_for(
                renderer.render(url), timeout=self.render_timeout
            )
        except asyncio.TimeoutError as exc:
            raise RenderError(
                url, f"timed out after {self.render_timeout:g}s"
            ) from exc

    async def _process_source(
        self,
        renderer: Renderer,
        url: str,
        semaphore: asyncio.Semaphore,
    ) -> SourceOutcome:
        """Render, extract and normalize a single source."""
        source_hash = fingerprint(url)
        async with semaphore:
            markup = await self._render(renderer, url)

        raw_items = await asyncio.to_thread(
            self.extractor.extract, markup
        )
        items, skipped = ItemNormalizer.normalize_items(raw_items)
        logger.info(
            "Source %s: %d items (%d skipped) from %s",
            source_hash,
            len(items),
            skipped,
            url,
        )
        return SourceOutcome(
            url=url,
            source_hash=source_hash,
            items=items,
            skipped=skipped,
        )

    async def _collect(
        self,
        renderer: Renderer,
        source_urls: list[str],
        result: RunResult,
    ) -> list[SourceOutcome]:
        """Process all sources concurrently, isolating failures."""
        semaphore = asyncio.Semaphore(self.max_concurrency)
        outcomes = await asyncio.gather(
            *(
                self._process_source(renderer, url, semaphore)
                for url in source_urls
            ),
            return_exceptions=True,
        )

        succeeded: list[SourceOutcome] = []
        for url, outcome in zip(source_urls, outcomes):
            if isinstance(outcome, SourceOutcome):
                succeeded.append(outcome)
                continue
            if not isinstance(outcome, Exception):
                raise outcome
            result.sources_failed += 1
            result.errors.append(f"{url}: {outcome}")
            if isinstance(outcome, (RenderError, ParseError)):
                logger.error(
                    "Skipping source %s: %s", url, outcome,
                )
            else:
                logger.error(
                    "Unexpected error for source %s: %s",
                    url,
                    outcome,
                    exc_info=outcome,
                )
        return succeeded

    # ── Public API ───────────────────────────────────────

    async def run(
        self,
        source_urls: list[str],
        renderer: Renderer,
    ) -> RunResult:
        """Execute one full run over *source_urls*.

        Per-source failures are recorded in ``RunResult.errors``.
        Snapshot load and persist errors propagate; the snapshot
        file is only replaced once every source has been handled.
        """
        if self._lock.locked():
            logger.warning(
                "A run is already in progress; skipping this trigger"
            )
            return self.skipped_result()

        async with self._lock:
            return await self._run(source_urls, renderer)

    async def _run(
        self,
        source_urls: list[str],
        renderer: Renderer,
    ) -> RunResult:
        result = RunResult(
            started_at=self._clock(),
            sources_total=len(source_urls),
        )
        logger.info("Run started over %d sources", len(source_urls))

        snapshot = await asyncio.to_thread(self.store.load)
        outcomes = await self._collect(renderer, source_urls, result)

        # Single writer: sources are merged one after another
        working = snapshot
        for outcome in outcomes:
            working, events = reconcile(
                working,
                outcome.source_hash,
                outcome.items,
                self._clock(),
            )
            result.items_seen += len(outcome.items)
            result.items_skipped += outcome.skipped
            result.events.extend(events)

        await asyncio.to_thread(self.store.persist, working)
        self.notifier.notify(result.events)

        logger.info(
            "Run complete: %d new, %d changed, %d/%d sources failed",
            result.new_items,
            result.price_changes,
            result.sources_failed,
            result.sources_total,
        )
        return result
