# src/filters/price_normalizer.py

"""Price normalization: locale-formatted text to whole currency units."""

import logging
import re

from src.config.settings import Settings
from src.errors import FormatError
from src.models.listing_item import NormalizedItem, RawItem

logger = logging.getLogger("listing_watch.filters")

# Non-breaking and narrow non-breaking spaces used by Intl formatters
_NBSP_CHARS: tuple[str, ...] = ("\u00a0", "\u202f")

_LEADING_DIGITS = re.compile(r"[0-9]+")


def normalize_price(
    raw_price: str,
    currency_symbol: str = Settings.CURRENCY_SYMBOL,
) -> int:
    """Convert a price like ``'1.234,56\\u00a0€'`` to ``1234``.

    The decimal part is discarded, not rounded.  The thousands
    separator is dropped before parsing.

    Raises:
        FormatError: if no leading numeric run remains after cleaning.
    """
    cleaned = raw_price.strip()
    for char in _NBSP_CHARS:
        cleaned = cleaned.replace(char, "")
    if currency_symbol:
        cleaned = cleaned.replace(currency_symbol, "")

    integer_part = cleaned.split(Settings.DECIMAL_SEPARATOR, 1)[0]
    integer_part = integer_part.replace(
        Settings.THOUSANDS_SEPARATOR, ""
    )
    integer_part = "".join(integer_part.split())

    match = _LEADING_DIGITS.match(integer_part)
    if match is None:
        raise FormatError(f"No numeric price in {raw_price!r}")
    return int(match.group())


class ItemNormalizer:
    """Normalize raw items and drop those with unparseable prices."""

    @staticmethod
    def normalize_items(
        raw_items: list[RawItem],
    ) -> tuple[list[NormalizedItem], int]:
        """Return the normalized items and the count of skipped ones."""
        items: list[NormalizedItem] = []
        skipped = 0

        for raw in raw_items:
            try:
                price = normalize_price(raw.raw_price)
            except FormatError as exc:
                logger.warning(
                    "Skipped item with bad price (link=%s): %s",
                    raw.link,
                    exc,
                )
                skipped += 1
                continue
            items.append(
                NormalizedItem(
                    link=raw.link,
                    title=raw.title,
                    price=price,
                )
            )

        if skipped:
            logger.info(
                "Normalization skipped %d of %d items",
                skipped,
                len(raw_items),
            )
        return items, skipped
