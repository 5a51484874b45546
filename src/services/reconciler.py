# src/services/reconciler.py

"""Reconcile freshly scraped items against the stored snapshot."""

import logging
from dataclasses import replace
from datetime import datetime

from src.models.change_event import ChangeEvent, NewItem, PriceChanged
from src.models.listing_item import NormalizedItem
from src.models.snapshot import Snapshot, SnapshotRecord

logger = logging.getLogger("listing_watch.reconciler")


def reconcile(
    snapshot: Snapshot,
    source_hash: str,
    items: list[NormalizedItem],
    now: datetime,
) -> tuple[Snapshot, list[ChangeEvent]]:
    """Classify each item as new, changed or unchanged.

    Returns an updated copy of *snapshot* and the change events in
    item order.  *snapshot* itself is not modified, and reconciling
    the same items a second time yields no events.
    """
    updated = snapshot.copy()
    events: list[ChangeEvent] = []
    timestamp = now.isoformat()

    for item in items:
        record = updated.get(source_hash, item.link)

        if record is None:
            updated.put(
                SnapshotRecord(
                    source_hash=source_hash,
                    item_id=item.link,
                    price=item.price,
                    updated_at=timestamp,
                )
            )
            events.append(
                NewItem(
                    source_hash=source_hash,
                    link=item.link,
                    title=item.title,
                    price=item.price,
                )
            )
            continue

        if record.price != item.price:
            updated.put(
                replace(
                    record,
                    price=item.price,
                    updated_at=timestamp,
                )
            )
            events.append(
                PriceChanged(
                    source_hash=source_hash,
                    link=item.link,
                    title=item.title,
                    old_price=record.price,
                    new_price=item.price,
                )
            )

    logger.debug(
        "Reconciled %d items for %s: %d events",
        len(items),
        source_hash,
        len(events),
    )
    return updated, events
