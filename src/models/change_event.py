# src/models/change_event.py

"""Change events emitted by reconciliation."""

from dataclasses import dataclass


@dataclass(frozen=True)
class NewItem:
    """An item seen for the first time under a source."""

    source_hash: str
    link: str
    title: str
    price: int


@dataclass(frozen=True)
class PriceChanged:
    """A known item whose price differs from the snapshot."""

    source_hash: str
    link: str
    title: str
    old_price: int
    new_price: int

    @property
    def delta(self) -> int:
        """Signed difference, negative for a price drop."""
        return self.new_price - self.old_price


ChangeEvent = NewItem | PriceChanged
