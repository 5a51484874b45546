# main.py

"""Entry point for the listing_watch monitor (single run or watch loop)."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from src.config.logging_config import setup_logging
from src.config.settings import Settings
from src.scrapers.renderers import RENDERERS

logger = logging.getLogger("listing_watch.main")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="listing_watch",
        description=(
            "Watch rendered listing pages for new items and "
            "price changes."
        ),
        epilog=f"Sources are read from {Settings.CONFIG_PATH}",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        default=False,
        help="Run the pipeline a single time instead of on a schedule.",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=None,
        dest="config_path",
        help="Path to config.json with a 'urls' list.",
    )
    parser.add_argument(
        "--snapshot",
        type=Path,
        default=None,
        dest="snapshot_path",
        help="Path to the snapshot CSV (default: config/analysis_results.csv).",
    )
    parser.add_argument(
        "-r",
        "--renderer",
        choices=sorted(RENDERERS),
        default="browser",
        help="Page renderer (default: browser).",
    )
    parser.add_argument(
        "-i",
        "--interval",
        type=int,
        default=None,
        dest="interval_minutes",
        help=(
            "Minutes between scheduled runs "
            f"(default: {Settings.RUN_INTERVAL_MINUTES})."
        ),
    )
    parser.add_argument(
        "--strict-snapshot",
        action="store_true",
        default=False,
        dest="strict_snapshot",
        help="Fail on corrupt snapshot rows instead of tolerating them.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Echo INFO logs to the console.",
    )
    return parser


def _run_once(args: argparse.Namespace) -> None:
    """Run a single pass and exit."""
    from src.cli.runner import run_once

    exit_code = asyncio.run(
        run_once(
            config_path=args.config_path,
            snapshot_path=args.snapshot_path,
            renderer_kind=args.renderer,
            strict_snapshot=args.strict_snapshot,
        )
    )
    sys.exit(exit_code)


def _run_watch(args: argparse.Namespace) -> None:
    """Run on a schedule until interrupted."""
    from src.cli.runner import run_watch

    try:
        exit_code = asyncio.run(
            run_watch(
                config_path=args.config_path,
                snapshot_path=args.snapshot_path,
                renderer_kind=args.renderer,
                interval_minutes=args.interval_minutes,
                strict_snapshot=args.strict_snapshot,
            )
        )
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        exit_code = 0
    except Exception:
        logger.critical("Fatal error during watch loop", exc_info=True)
        raise
    finally:
        logger.info("listing_watch shutting down")
    sys.exit(exit_code)


def main() -> None:
    """Route to a single run (--once) or the scheduled watch loop."""
    parser = _build_parser()
    args = parser.parse_args()

    log_file = setup_logging(verbose=args.verbose)
    logger.info("listing_watch starting, log file: %s", log_file)

    if args.once:
        _run_once(args)
    else:
        _run_watch(args)


if __name__ == "__main__":
    main()
