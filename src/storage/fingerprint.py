# src/storage/fingerprint.py

"""Short, stable identifiers for listing source URLs."""

import hashlib

FINGERPRINT_LENGTH = 6


def fingerprint(url: str) -> str:
    """Return the first 6 hex characters of the URL's SHA-256 digest."""
    digest = hashlib.sha256(url.encode("utf-8")).hexdigest()
    return digest[:FINGERPRINT_LENGTH]
