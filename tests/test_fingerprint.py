# tests/test_fingerprint.py

"""Tests for source URL fingerprinting."""

import hashlib
import unittest

from src.storage.fingerprint import fingerprint


class TestFingerprint(unittest.TestCase):
    """fingerprint() is a 6-char SHA-256 prefix."""

    URL = "https://es.wallapop.com/app/search?keywords=bicicleta"

    def test_length_is_six(self) -> None:
        """Fingerprints are exactly six characters."""
        self.assertEqual(len(fingerprint(self.URL)), 6)

    def test_lowercase_hex(self) -> None:
        """Fingerprints are lowercase hexadecimal."""
        self.assertRegex(fingerprint(self.URL), r"^[0-9a-f]{6}$")

    def test_deterministic(self) -> None:
        """Repeated calls return the same value."""
        self.assertEqual(fingerprint(self.URL), fingerprint(self.URL))

    def test_matches_sha256_prefix(self) -> None:
        """The value is the digest prefix of the UTF-8 bytes."""
        expected = hashlib.sha256(self.URL.encode("utf-8")).hexdigest()[:6]
        self.assertEqual(fingerprint(self.URL), expected)

    def test_distinct_urls_differ(self) -> None:
        """Different queries get different fingerprints."""
        other = self.URL + "&max_sale_price=300"
        self.assertNotEqual(fingerprint(self.URL), fingerprint(other))

    def test_empty_url(self) -> None:
        """The empty string still hashes."""
        self.assertEqual(fingerprint(""), "e3b0c4")


if __name__ == "__main__":
    unittest.main()
