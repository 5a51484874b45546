# tests/test_page_extractor.py

"""Tests for the PageExtractor using a rendered HTML fixture."""

import json
import tempfile
import unittest
from pathlib import Path

from src.errors import ParseError
from src.models.listing_item import RawItem
from src.scrapers.page_extractor import PageExtractor

FIXTURES_DIR = Path(__file__).parent / "fixtures"


class TestPageExtractor(unittest.TestCase):
    """Tests for sanitization and card extraction."""

    def setUp(self) -> None:
        """Load the fixture page and a default extractor."""
        with open(
            FIXTURES_DIR / "listing_page.html", encoding="utf-8"
        ) as f:
            self.markup = f.read()
        self.extractor = PageExtractor()

    def test_extracts_cards_in_document_order(self) -> None:
        """Cards with an href are returned in page order."""
        items = self.extractor.extract(self.markup)
        self.assertEqual(
            [i.link for i in items],
            [
                "/item/bici-carretera-1001",
                "/item/bici-gravel-1002",
                "/item/bici-reservada-1003",
                "/item/bici-nino-1004",
            ],
        )

    def test_title_read_from_attribute(self) -> None:
        """The title comes from the anchor's title attribute."""
        items = self.extractor.extract(self.markup)
        self.assertEqual(items[0].title, "Bici carretera talla 54")
        self.assertEqual(items[3].title, "Bici niño 20 pulgadas")

    def test_price_text_trimmed(self) -> None:
        """Price text is whitespace-trimmed but otherwise raw."""
        items = self.extractor.extract(self.markup)
        self.assertEqual(items[0].raw_price, "360,00\u00a0€")
        self.assertEqual(items[1].raw_price, "1.234,50\u00a0€")
        self.assertEqual(items[2].raw_price, "Reservado")

    def test_carousel_contents_removed(self) -> None:
        """Anchors nested in the carousel never become items."""
        items = self.extractor.extract(self.markup)
        links = [i.link for i in items]
        self.assertNotIn("/item/ghost-from-carousel", links)

    def test_card_without_href_skipped(self) -> None:
        """A card with no link has no identity and is dropped."""
        items = self.extractor.extract(self.markup)
        titles = [i.title for i in items]
        self.assertNotIn("Tarjeta sin enlace", titles)

    def test_non_card_anchors_ignored(self) -> None:
        """Header and footer links are not listing cards."""
        items = self.extractor.extract(self.markup)
        links = [i.link for i in items]
        self.assertNotIn("/", links)
        self.assertNotIn("/ayuda", links)

    def test_sanitize_removes_every_carousel(self) -> None:
        """All carousel blocks are stripped, non-greedily."""
        sanitized = self.extractor.sanitize(self.markup)
        self.assertNotIn("tsl-item-card-images-carousel", sanitized)
        self.assertIn("ItemCard__content", sanitized)
        self.assertIn("/item/bici-gravel-1002", sanitized)

    def test_sanitize_handles_multiline_blocks(self) -> None:
        """The pattern spans newlines inside a block."""
        markup = (
            "<p>keep</p><tsl-item-card-images-carousel a='1'>\n"
            "<img src='x'>\n</tsl-item-card-images-carousel><p>too</p>"
        )
        self.assertEqual(
            self.extractor.sanitize(markup), "<p>keep</p><p>too</p>"
        )

    def test_missing_price_element_gives_empty_text(self) -> None:
        """A card without a price element yields an empty price."""
        markup = (
            '<a class="ItemCardList__item" href="/item/x" '
            'title="X"></a>'
        )
        self.assertEqual(
            self.extractor.extract(markup),
            [RawItem(link="/item/x", title="X", raw_price="")],
        )

    def test_empty_page_returns_empty_list(self) -> None:
        """A page with no cards is a valid, empty result."""
        self.assertEqual(
            self.extractor.extract("<html><body></body></html>"), []
        )

    def test_empty_string_returns_empty_list(self) -> None:
        """Blank markup parses to an empty document."""
        self.assertEqual(self.extractor.extract(""), [])

    def test_non_text_markup_raises_parse_error(self) -> None:
        """Markup that is not a string cannot be parsed."""
        with self.assertRaises(ParseError):
            self.extractor.extract(None)  # type: ignore[arg-type]

    def test_custom_selectors_file(self) -> None:
        """Selectors are loaded from the given JSON section."""
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "selectors.json"
            path.write_text(
                json.dumps({
                    "alt": {
                        "strip_tag": "noisy-widget",
                        "item_card": "li.card > a",
                        "price": "em",
                    }
                }),
                encoding="utf-8",
            )
            extractor = PageExtractor(selectors_path=path, section="alt")
        markup = (
            "<ul><li class='card'><a href='/p/1' title='One'>"
            "<noisy-widget><em>0</em></noisy-widget><em>12 €</em>"
            "</a></li></ul>"
        )
        self.assertEqual(
            extractor.extract(markup),
            [RawItem(link="/p/1", title="One", raw_price="12 €")],
        )


if __name__ == "__main__":
    unittest.main()
