# src/config/sources.py

"""Load the list of monitored listing URLs from config.json."""

import json
import logging
from pathlib import Path
from typing import Any

from src.config.settings import Settings
from src.errors import ConfigError

logger = logging.getLogger("listing_watch.config")


def load_source_urls(path: Path | None = None) -> list[str]:
    """Return the configured source URLs in file order.

    The file must be a JSON object with a ``urls`` list of
    non-empty strings.  Exact duplicates are dropped.

    Raises:
        ConfigError: if the file is unreadable or malformed.
    """
    config_path = path or Settings.CONFIG_PATH
    try:
        with open(config_path, encoding="utf-8") as f:
            data: Any = json.load(f)
    except OSError as exc:
        raise ConfigError(
            f"Cannot read config file {config_path}: {exc}"
        ) from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(
            f"Invalid JSON in {config_path}: {exc}"
        ) from exc

    if not isinstance(data, dict) or "urls" not in data:
        raise ConfigError(
            f"{config_path} must be an object with a 'urls' list"
        )
    raw_urls: Any = data["urls"]
    if not isinstance(raw_urls, list):
        raise ConfigError(f"'urls' in {config_path} must be a list")

    urls: list[str] = []
    for idx, url in enumerate(raw_urls):
        if not isinstance(url, str) or not url.strip():
            raise ConfigError(
                f"urls[{idx}] in {config_path} is not a "
                "non-empty string"
            )
        url = url.strip()
        if url in urls:
            logger.warning("Ignoring duplicate source URL: %s", url)
            continue
        urls.append(url)

    logger.debug(
        "Loaded %d source URLs from %s", len(urls), config_path,
    )
    return urls
