#!/usr/bin/env python3

import argparse
import logging
import signal
import sys
from dataclasses import replace
from pathlib import Path

from clipkeep.clipboard import get_clipboard
from clipkeep.config import Settings
from clipkeep.models import ClipItem, ClipItemView
from clipkeep.services.clipboard_service import ClipboardService
from clipkeep.services.history_store import HistoryStore


logging.basicConfig(level=logging.WARNING, format='%(levelname)s: %(message)s')
logger = logging.getLogger(__name__)


def print_capture(item: ClipItem) -> None:
    view = ClipItemView.from_item(item)
    print(f"[{view.kind}] {view.preview}")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="clipkeep - clipboard history"
    )

    parser.add_argument(
        "-i", "--poll-interval",
        type=float,
        default=None,
        help="Clipboard polling interval in seconds (default: 0.5)"
    )

    parser.add_argument(
        "-m", "--max-items",
        type=int,
        default=None,
        help="Number of history entries to keep (default: 50)"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )

    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Path to a .env file with CLIPKEEP_* settings"
    )

    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)

    try:
        settings = Settings.from_env(env_path=args.env_file)
        overrides = {}
        if args.max_items is not None:
            overrides["max_items"] = args.max_items
        if args.poll_interval is not None:
            overrides["poll_interval"] = args.poll_interval
        if overrides:
            settings = replace(settings, **overrides)
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)

    level = settings.log_level
    if args.verbose:
        level = "INFO"
    if args.debug:
        level = "DEBUG"
    logging.getLogger().setLevel(level)

    try:
        backend = get_clipboard()
    except NotImplementedError as e:
        logger.error(str(e))
        sys.exit(1)

    store = HistoryStore(max_items=settings.max_items)
    service = ClipboardService(
        store,
        backend,
        poll_interval=settings.poll_interval,
        on_capture=print_capture,
    )

    def signal_handler(signum, frame):
        service.stop()
        sys.exit(0)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    print("Watching the clipboard. Ctrl+C to stop.")
    service.run_forever()


if __name__ == "__main__":
    main()
