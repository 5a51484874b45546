# src/storage/snapshot_store.py

"""CSV-backed snapshot store for last-known item prices."""

import csv
import logging
import os
import tempfile
from pathlib import Path

from src.config.settings import Settings
from src.errors import (
    SnapshotCorruptError,
    SnapshotLoadError,
    SnapshotPersistError,
)
from src.models.snapshot import Snapshot, SnapshotRecord

logger = logging.getLogger("listing_watch.storage")

# Row layout: source_hash, item_id, price, updated_at (no header)
_FIELD_COUNT = 4


class SnapshotStore:
    """Load and persist the snapshot file.

    The file is rewritten in full on every persist.  Writes land in
    a temporary sibling first and are moved into place with
    :func:`os.replace`, so readers only ever see a complete file.
    """

    def __init__(
        self,
        path: Path | None = None,
        strict: bool = False,
    ) -> None:
        self.path: Path = path or Settings.SNAPSHOT_PATH
        self.strict = strict
        logger.debug(
            "SnapshotStore initialised, path=%s strict=%s",
            self.path,
            strict,
        )

    # ── Loading ──────────────────────────────────────────

    def _decode_row(
        self, line_no: int, row: list[str],
    ) -> SnapshotRecord | None:
        """Decode one CSV row, tolerating a bad price unless strict."""
        if len(row) != _FIELD_COUNT:
            if self.strict:
                raise SnapshotCorruptError(
                    f"{self.path}:{line_no}: expected "
                    f"{_FIELD_COUNT} fields, got {len(row)}"
                )
            logger.warning(
                "Skipping malformed snapshot row %d (%d fields)",
                line_no,
                len(row),
            )
            return None

        source_hash, item_id, raw_price, updated_at = row
        try:
            price = int(raw_price)
        except ValueError:
            if self.strict:
                raise SnapshotCorruptError(
                    f"{self.path}:{line_no}: non-numeric "
                    f"price {raw_price!r}"
                ) from None
            logger.warning(
                "Snapshot row %d has non-numeric price %r; "
                "decoding as 0",
                line_no,
                raw_price,
            )
            price = 0

        return SnapshotRecord(
            source_hash=source_hash,
            item_id=item_id,
            price=price,
            updated_at=updated_at,
        )

    def load(self) -> Snapshot:
        """Read the snapshot file, or return an empty one if absent.

        Raises:
            SnapshotLoadError: the file exists but cannot be read or
                decoded as UTF-8 CSV.
            SnapshotCorruptError: a bad row was found in strict mode.
        """
        if not self.path.exists():
            logger.info(
                "No snapshot at %s, starting empty", self.path,
            )
            return Snapshot()

        snapshot = Snapshot()
        try:
            with open(self.path, newline="", encoding="utf-8") as f:
                reader = csv.reader(f)
                for row in reader:
                    if not row:
                        continue
                    record = self._decode_row(reader.line_num, row)
                    if record is not None:
                        snapshot.put(record)
        except (OSError, UnicodeDecodeError, csv.Error) as exc:
            raise SnapshotLoadError(
                f"Failed to read snapshot {self.path}: {exc}"
            ) from exc

        logger.info(
            "Loaded %d snapshot records from %s",
            len(snapshot),
            self.path,
        )
        return snapshot

    # ── Persisting ───────────────────────────────────────

    def persist(self, snapshot: Snapshot) -> Path:
        """Overwrite the snapshot file with every record in *snapshot*.

        Raises:
            SnapshotPersistError: on any filesystem failure.  The
                previous file is left untouched in that case.
        """
        tmp_name: str | None = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                dir=self.path.parent,
            )
            with os.fdopen(
                fd, "w", newline="", encoding="utf-8"
            ) as f:
                writer = csv.writer(f)
                for record in snapshot.records():
                    writer.writerow([
                        record.source_hash,
                        record.item_id,
                        str(record.price),
                        record.updated_at,
                    ])
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
            tmp_name = None
        except OSError as exc:
            raise SnapshotPersistError(
                f"Failed to write snapshot {self.path}: {exc}"
            ) from exc
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)

        logger.info(
            "Persisted %d snapshot records to %s",
            len(snapshot),
            self.path,
        )
        return self.path
