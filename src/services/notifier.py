# src/services/notifier.py

"""Change reporting: one console line per new item or price change."""

import logging
from typing import Protocol

from rich.console import Console
from rich.text import Text

from src.models.change_event import ChangeEvent, NewItem, PriceChanged

logger = logging.getLogger("listing_watch.notifier")


class ChangeNotifier(Protocol):
    """Consumer of the change events produced by one run."""

    def notify(self, events: list[ChangeEvent]) -> None:
        """Deliver *events*; must not raise for an empty list."""
        ...


def format_event(event: ChangeEvent) -> str:
    """Render a change event as a single plain-text line."""
    if isinstance(event, PriceChanged):
        return (
            f"PRICE CHANGE [{event.source_hash}] "
            f"{event.old_price} -> {event.new_price} "
            f"({event.delta:+d}) | {event.title} | {event.link}"
        )
    return (
        f"NEW ITEM [{event.source_hash}] {event.price} "
        f"| {event.title} | {event.link}"
    )


class ConsoleNotifier:
    """Print change events with Rich and mirror them to the log."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def _styled(self, event: ChangeEvent) -> Text:
        """Colour the event label; the rest stays literal text."""
        line = format_event(event)
        label, _, rest = line.partition(" [")
        if isinstance(event, NewItem):
            style = "bold green"
        elif event.delta < 0:
            style = "bold cyan"
        else:
            style = "bold yellow"
        return Text.assemble((label, style), " [" + rest)

    def notify(self, events: list[ChangeEvent]) -> None:
        for event in events:
            logger.info(format_event(event))
            self.console.print(self._styled(event))
