# tests/test_sources_config.py

"""Tests for loading source URLs from config.json."""

import json
import tempfile
import unittest
from pathlib import Path
from typing import Any

from src.config.settings import Settings
from src.config.sources import load_source_urls
from src.errors import ConfigError


class TestLoadSourceUrls(unittest.TestCase):
    """load_source_urls validation and ordering."""

    def setUp(self) -> None:
        """Create a temp config path."""
        self.tmp_dir = tempfile.mkdtemp()
        self.path = Path(self.tmp_dir) / "config.json"

    def _write(self, data: Any) -> None:
        """Serialise *data* as the config file."""
        self.path.write_text(json.dumps(data), encoding="utf-8")

    def test_returns_urls_in_order(self) -> None:
        """URLs keep their configured order."""
        self._write({"urls": ["https://b.example", "https://a.example"]})
        self.assertEqual(
            load_source_urls(self.path),
            ["https://b.example", "https://a.example"],
        )

    def test_duplicates_dropped(self) -> None:
        """Exact duplicate URLs are ignored with a warning."""
        self._write({"urls": ["https://a.example", " https://a.example "]})
        with self.assertLogs("listing_watch.config", level="WARNING"):
            urls = load_source_urls(self.path)
        self.assertEqual(urls, ["https://a.example"])

    def test_empty_list_is_valid(self) -> None:
        """No URLs is a valid (idle) configuration."""
        self._write({"urls": []})
        self.assertEqual(load_source_urls(self.path), [])

    def test_missing_file_raises(self) -> None:
        """An unreadable file is a ConfigError."""
        with self.assertRaises(ConfigError):
            load_source_urls(Path(self.tmp_dir) / "absent.json")

    def test_invalid_json_raises(self) -> None:
        """Malformed JSON is a ConfigError."""
        self.path.write_text("{urls: [", encoding="utf-8")
        with self.assertRaises(ConfigError):
            load_source_urls(self.path)

    def test_missing_urls_key_raises(self) -> None:
        """The object must carry a 'urls' key."""
        self._write({"sources": []})
        with self.assertRaises(ConfigError):
            load_source_urls(self.path)

    def test_top_level_list_raises(self) -> None:
        """A bare list is not accepted."""
        self._write(["https://a.example"])
        with self.assertRaises(ConfigError):
            load_source_urls(self.path)

    def test_urls_not_a_list_raises(self) -> None:
        """'urls' must be a list."""
        self._write({"urls": "https://a.example"})
        with self.assertRaises(ConfigError):
            load_source_urls(self.path)

    def test_non_string_entry_raises(self) -> None:
        """Every entry must be a non-empty string."""
        for bad in (42, None, "", "   "):
            with self.subTest(bad=bad):
                self._write({"urls": ["https://a.example", bad]})
                with self.assertRaises(ConfigError):
                    load_source_urls(self.path)

    def test_bundled_example_config_loads(self) -> None:
        """The shipped config/config.json is valid."""
        urls = load_source_urls(
            Settings.BASE_DIR / "config" / "config.json"
        )
        self.assertGreaterEqual(len(urls), 1)


if __name__ == "__main__":
    unittest.main()
