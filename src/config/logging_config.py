# src/config/logging_config.py

"""Per-launch timestamped logging configuration for listing_watch.

Each process launch creates a dedicated log file inside ``logs/``,
named with the launch timestamp (e.g. ``logs/run_20261017_090000.log``).
All ``listing_watch.*`` loggers route through this file handler, so a
long-running watch session keeps every scheduled run in one file.

The console only shows warnings by default (failed sources, skipped
items); ``verbose`` lowers it to INFO so change lines and run
summaries are echoed as well.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path

from src.config.settings import Settings

_DETAILED_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(name)s | %(module)s:%(funcName)s:%(lineno)d | "
    "%(message)s"
)

_CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(message)s"

_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    verbose: bool = False,
    logs_dir: Path | None = None,
) -> Path:
    """Initialise the ``listing_watch`` logger for this process.

    Returns:
        The :class:`~pathlib.Path` to the log file for this launch.
    """
    target_dir = logs_dir or Settings.LOGS_DIR
    target_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = target_dir / f"run_{timestamp}.log"

    root_logger = logging.getLogger("listing_watch")
    root_logger.setLevel(logging.DEBUG)

    # Repeated calls (tests, re-entry) keep the first handlers
    if root_logger.handlers:
        return log_file

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter(_DETAILED_FORMAT, datefmt=_DATE_FORMAT)
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(
        logging.INFO if verbose else logging.WARNING
    )
    console_handler.setFormatter(
        logging.Formatter(_CONSOLE_FORMAT, datefmt=_DATE_FORMAT)
    )

    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    root_logger.info("Logging initialised, log file: %s", log_file)

    return log_file
