# src/scrapers/page_extractor.py

"""Extract listing cards from fully rendered search-page markup."""

import json
import logging
import re
from pathlib import Path
from typing import Any

from bs4 import BeautifulSoup, Tag

from src.config.settings import Settings
from src.errors import ParseError
from src.models.listing_item import RawItem


class PageExtractor:
    """Turn rendered markup into an ordered list of :class:`RawItem`.

    Extraction is two-stage: a textual pre-filter removes every
    instance of a heavy sub-widget, then BeautifulSoup walks the
    remaining document with the configured CSS selectors.
    """

    def __init__(
        self,
        selectors_path: Path | None = None,
        section: str = "listing",
    ) -> None:
        self.logger = logging.getLogger("listing_watch.extractor")
        self.selectors: dict[str, str] = self._load_selectors(
            selectors_path or Settings.SELECTORS_PATH, section
        )
        tag = re.escape(self.selectors["strip_tag"])
        self._strip_re = re.compile(
            rf"<{tag}[^>]*>[\s\S]*?</{tag}>"
        )

    @staticmethod
    def _load_selectors(
        path: Path, section: str,
    ) -> dict[str, str]:
        """Load one section of CSS selectors from selectors.json."""
        with open(path, encoding="utf-8") as f:
            all_selectors: dict[str, Any] = json.load(f)
        result: dict[str, str] = all_selectors[section]
        return result

    def sanitize(self, markup: str) -> str:
        """Drop every carousel block before structural parsing."""
        return self._strip_re.sub("", markup)

    def _parse_card(self, card: Tag) -> RawItem | None:
        """Parse a single listing card, or ``None`` if it has no link."""
        link = card.get("href")
        if not isinstance(link, str) or not link.strip():
            return None
        title = card.get("title")
        price_el = card.select_one(self.selectors["price"])
        return RawItem(
            link=link.strip(),
            title=title.strip() if isinstance(title, str) else "",
            raw_price=(
                price_el.get_text(strip=True) if price_el else ""
            ),
        )

    def extract(self, markup: str) -> list[RawItem]:
        """Return the listing cards found in *markup*, in document order.

        Raises:
            ParseError: if the markup is not text or cannot be parsed.
        """
        if not isinstance(markup, str):
            raise ParseError(
                f"Expected markup text, got {type(markup).__name__}"
            )
        sanitized = self.sanitize(markup)
        try:
            soup = BeautifulSoup(sanitized, "lxml")
            cards = soup.select(self.selectors["item_card"])
        except Exception as exc:
            raise ParseError(f"Failed to parse markup: {exc}") from exc

        items: list[RawItem] = []
        for card in cards:
            item = self._parse_card(card)
            if item is None:
                self.logger.debug(
                    "Skipped listing card without href"
                )
                continue
            items.append(item)

        self.logger.debug(
            "Extracted %d items (%d bytes stripped)",
            len(items),
            len(markup) - len(sanitized),
        )
        return items
