# src/models/snapshot.py

"""Durable snapshot of the last-known price for every observed item."""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass

SnapshotKey = tuple[str, str]


@dataclass(frozen=True)
class SnapshotRecord:
    """Last-known state of one item under one source."""

    source_hash: str
    item_id: str
    price: int
    updated_at: str  # ISO-8601

    @property
    def key(self) -> SnapshotKey:
        """Return the ``(source_hash, item_id)`` identity of the record."""
        return (self.source_hash, self.item_id)


class Snapshot:
    """Mapping of ``(source_hash, item_id)`` to :class:`SnapshotRecord`.

    Records are immutable, so :meth:`copy` only duplicates the index.
    """

    def __init__(
        self, records: Iterable[SnapshotRecord] = (),
    ) -> None:
        self._records: dict[SnapshotKey, SnapshotRecord] = {}
        for record in records:
            self.put(record)

    def get(
        self, source_hash: str, item_id: str,
    ) -> SnapshotRecord | None:
        """Return the record for a key, or ``None``."""
        return self._records.get((source_hash, item_id))

    def put(self, record: SnapshotRecord) -> None:
        """Insert or replace the record under its key."""
        self._records[record.key] = record

    def copy(self) -> "Snapshot":
        """Return an independent working copy."""
        clone = Snapshot()
        clone._records = dict(self._records)
        return clone

    def records(self) -> list[SnapshotRecord]:
        """Return all records sorted by key."""
        return [
            self._records[key] for key in sorted(self._records)
        ]

    def keys(self) -> set[SnapshotKey]:
        """Return the set of stored keys."""
        return set(self._records)

    def __contains__(self, key: object) -> bool:
        return key in self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[SnapshotRecord]:
        return iter(self._records.values())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Snapshot):
            return NotImplemented
        return self._records == other._records

    def __repr__(self) -> str:
        return f"Snapshot({len(self._records)} records)"
