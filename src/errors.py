# src/errors.py

"""Exception hierarchy for the listing_watch pipeline.

Per-item and per-source errors (``FormatError``, ``RenderError``,
``ParseError``) are caught where they occur and only logged.
Configuration and snapshot errors abort the whole run.
"""


class ListingWatchError(Exception):
    """Base class for all listing_watch errors."""


class ConfigError(ListingWatchError):
    """The source configuration is missing or malformed."""


class RenderError(ListingWatchError):
    """A source page could not be rendered (navigation, HTTP or timeout)."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason


class ParseError(ListingWatchError):
    """Rendered markup could not be parsed into a document tree."""


class FormatError(ListingWatchError, ValueError):
    """A price string has no leading numeric run."""


class SnapshotLoadError(ListingWatchError):
    """The snapshot file exists but could not be read."""


class SnapshotCorruptError(SnapshotLoadError):
    """A snapshot row could not be decoded in strict mode."""


class SnapshotPersistError(ListingWatchError):
    """Writing the snapshot file failed; the run is lost."""
