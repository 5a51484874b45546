# src/scrapers/renderers.py

"""Rendering backends: URL in, fully rendered page markup out."""

import asyncio
import logging
import threading
import time
from types import TracebackType
from typing import Any, Protocol

import cloudscraper  # type: ignore[import-untyped]
from curl_cffi import requests as curl_requests
from playwright.async_api import Browser, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError

from src.config.settings import Settings
from src.errors import RenderError

logger = logging.getLogger("listing_watch.renderer")


class Renderer(Protocol):
    """Anything that can turn a URL into rendered markup."""

    async def render(self, url: str) -> str:
        """Return the page markup or raise :class:`RenderError`."""
        ...


class BrowserRenderer:
    """Headless Chromium via Playwright, one page per source.

    Use as an async context manager so the browser is launched once
    per run and always torn down::

        async with BrowserRenderer() as renderer:
            html = await renderer.render(url)
    """

    def __init__(
        self,
        settle_delay: float | None = None,
        headless: bool | None = None,
    ) -> None:
        self.settings = Settings()
        self.settle_delay = (
            self.settings.SETTLE_DELAY
            if settle_delay is None
            else settle_delay
        )
        self.headless = (
            self.settings.HEADLESS if headless is None else headless
        )
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None

    async def __aenter__(self) -> "BrowserRenderer":
        try:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(
                headless=self.headless,
            )
        except PlaywrightError as exc:
            if self._playwright is not None:
                await self._playwright.stop()
                self._playwright = None
            raise RenderError(
                "chromium", f"browser launch failed: {exc}"
            ) from exc
        logger.debug("Chromium launched (headless=%s)", self.headless)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        try:
            if self._browser is not None:
                await self._browser.close()
        finally:
            self._browser = None
            if self._playwright is not None:
                await self._playwright.stop()
                self._playwright = None
        logger.debug("Chromium closed")

    async def render(self, url: str) -> str:
        """Navigate, let client scripts settle, and return the markup."""
        if self._browser is None:
            raise RenderError(url, "browser is not running")

        try:
            page = await self._browser.new_page(
                extra_http_headers={
                    "Accept-Language": (
                        self.settings.DEFAULT_HEADERS["Accept-Language"]
                    ),
                },
            )
        except PlaywrightError as exc:
            raise RenderError(url, str(exc)) from exc

        try:
            await page.goto(
                url,
                wait_until="domcontentloaded",
                timeout=self.settings.NAVIGATION_TIMEOUT_MS,
            )
            await asyncio.sleep(self.settle_delay)
            content: str = await page.content()
        except PlaywrightError as exc:
            raise RenderError(url, str(exc)) from exc
        finally:
            await page.close()

        logger.debug("Rendered %s (%d bytes)", url, len(content))
        return content


class HttpRenderer:
    """Plain HTTP fetch for pages that render server-side.

    Uses curl_cffi browser impersonation with retries, falling back
    to cloudscraper once the retries are exhausted.  Every fetch runs
    against a deadline of ``budget`` seconds, kept below the
    pipeline's render timeout so worker threads finish on their own.
    Leaving the context stops retries and waits for in-flight fetches
    before the shared session is closed.
    """

    def __init__(self, budget: float | None = None) -> None:
        self.settings = Settings()
        self.budget = (
            self.settings.HTTP_FETCH_BUDGET if budget is None else budget
        )
        self.session = curl_requests.Session(
            impersonate=self.settings.IMPERSONATE_BROWSER
        )
        self._stopping = threading.Event()
        self._idle = threading.Condition()
        self._in_flight = 0

    async def __aenter__(self) -> "HttpRenderer":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self._stopping.set()
        await asyncio.to_thread(self._wait_idle)
        self.session.close()

    def _wait_idle(self) -> None:
        """Block until no fetch is using the session."""
        with self._idle:
            self._idle.wait_for(lambda: self._in_flight == 0)

    def _time_left(self, deadline: float) -> float:
        """Seconds until *deadline*, or 0 once stopping."""
        if self._stopping.is_set():
            return 0.0
        return max(0.0, deadline - time.monotonic())

    def _fetch_get(self, url: str, deadline: float) -> str | None:
        """GET with retries and linear backoff until *deadline*."""
        for attempt in range(self.settings.MAX_RETRIES):
            remaining = self._time_left(deadline)
            if remaining <= 0:
                logger.warning(
                    "Fetch budget exhausted for %s after %d attempts",
                    url,
                    attempt,
                )
                break
            try:
                resp = self.session.get(
                    url,
                    headers=self.settings.DEFAULT_HEADERS,
                    timeout=min(self.settings.REQUEST_TIMEOUT, remaining),
                )
                if resp.status_code == 200:
                    text: str = resp.text
                    return text
                logger.warning(
                    "HTTP %d for %s on attempt %d",
                    resp.status_code,
                    url,
                    attempt + 1,
                )
            except Exception as exc:
                logger.warning(
                    "Request error for %s on attempt %d: %s",
                    url,
                    attempt + 1,
                    exc,
                    exc_info=True,
                )
            time.sleep(
                min(
                    self.settings.REQUEST_DELAY * (attempt + 1),
                    self._time_left(deadline),
                )
            )
        return None

    def _fetch_fallback(self, url: str, deadline: float) -> str | None:
        """Last-resort fetch through cloudscraper."""
        remaining = self._time_left(deadline)
        if remaining <= 0:
            logger.warning("No time left for fallback fetch of %s", url)
            return None
        logger.info(
            "curl_cffi exhausted for %s, falling back to cloudscraper",
            url,
        )
        try:
            _cs: Any = cloudscraper
            scraper: Any = _cs.create_scraper()
            resp: Any = scraper.get(
                url,
                headers=self.settings.DEFAULT_HEADERS,
                timeout=min(self.settings.REQUEST_TIMEOUT, remaining),
            )
            if resp.status_code == 200:
                return str(resp.text)
            logger.warning(
                "cloudscraper got HTTP %d for %s",
                resp.status_code,
                url,
            )
        except Exception as exc:
            logger.error(
                "cloudscraper fallback failed for %s: %s",
                url,
                exc,
                exc_info=True,
            )
        return None

    def fetch(self, url: str) -> str:
        """Blocking fetch; raises :class:`RenderError` when all paths fail."""
        deadline = time.monotonic() + self.budget
        with self._idle:
            self._in_flight += 1
        try:
            text = self._fetch_get(url, deadline)
            if text is None:
                text = self._fetch_fallback(url, deadline)
        finally:
            with self._idle:
                self._in_flight -= 1
                self._idle.notify_all()
        if text is None:
            raise RenderError(url, "all fetch attempts failed")
        return text

    async def render(self, url: str) -> str:
        """Fetch *url* in a worker thread."""
        return await asyncio.to_thread(self.fetch, url)


RENDERERS: dict[str, type[BrowserRenderer] | type[HttpRenderer]] = {
    "browser": BrowserRenderer,
    "http": HttpRenderer,
}


def build_renderer(kind: str) -> BrowserRenderer | HttpRenderer:
    """Instantiate a renderer by its CLI name."""
    try:
        renderer_cls = RENDERERS[kind]
    except KeyError:
        valid = ", ".join(sorted(RENDERERS))
        raise ValueError(
            f"Unknown renderer {kind!r} (choose from {valid})"
        ) from None
    return renderer_cls()
