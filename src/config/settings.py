# src/config/settings.py

"""Central configuration for the listing_watch monitor."""

import logging
import os
from pathlib import Path

from curl_cffi.requests import BrowserTypeLiteral
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger("listing_watch.config")


def _env_positive_int(name: str, default: int) -> int:
    """Read a positive integer from the environment, else *default*."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        value = 0
    if value < 1:
        logger.warning(
            "Ignoring %s=%r (expected a positive integer); using %d",
            name,
            raw,
            default,
        )
        return default
    return value


class Settings:
    """Central configuration for the listing_watch monitor."""

    # --- Rendering ---
    SETTLE_DELAY: float = 3.0           # Seconds for client scripts to settle
    RENDER_TIMEOUT: float = 60.0        # Hard cap per source render
    NAVIGATION_TIMEOUT_MS: int = 45000  # Playwright page.goto timeout
    HEADLESS: bool = True

    # --- HTTP fallback renderer ---
    REQUEST_DELAY: float = 2.0          # Base backoff between retries
    REQUEST_TIMEOUT: int = 15           # Seconds before a request times out
    MAX_RETRIES: int = 3                # Retry count on transient failures
    HTTP_FETCH_BUDGET: float = 45.0     # Deadline for one whole fetch

    # --- Pipeline ---
    MAX_CONCURRENT_SOURCES: int = 3     # Sources rendered at the same time
    RUN_INTERVAL_MINUTES: int = _env_positive_int(
        "LISTING_WATCH_INTERVAL", 1
    )

    # --- Price format ---
    CURRENCY_SYMBOL: str = "€"
    DECIMAL_SEPARATOR: str = ","
    THOUSANDS_SEPARATOR: str = "."

    # --- Browser Impersonation ---
    IMPERSONATE_BROWSER: BrowserTypeLiteral = "chrome131"
    DEFAULT_HEADERS: dict[str, str] = {
        "Accept": (
            "text/html,application/xhtml+xml,"
            "application/xml;q=0.9,image/avif,"
            "image/webp,image/apng,*/*;q=0.8"
        ),
        "Accept-Language": "es-ES,es;q=0.9,en;q=0.8",
        "sec-ch-ua": (
            '"Google Chrome";v="131", '
            '"Chromium";v="131", '
            '"Not_A Brand";v="24"'
        ),
        "sec-ch-ua-mobile": "?0",
        "sec-ch-ua-platform": '"Windows"',
        "Upgrade-Insecure-Requests": "1",
    }

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    SELECTORS_PATH: Path = BASE_DIR / "src" / "config" / "selectors.json"
    CONFIG_PATH: Path = Path(
        os.getenv(
            "LISTING_WATCH_CONFIG",
            str(BASE_DIR / "config" / "config.json"),
        )
    )
    SNAPSHOT_PATH: Path = Path(
        os.getenv(
            "LISTING_WATCH_SNAPSHOT",
            str(BASE_DIR / "config" / "analysis_results.csv"),
        )
    )
    LOGS_DIR: Path = BASE_DIR / "logs"
