#!/usr/bin/env python3
"""Watch a folder from the command line and report where new files belong.

Each file that appears directly inside the watched directory is printed with
the rule it matches and its destination folder.  Files are not moved.
"""

from __future__ import annotations

import argparse
import signal
import sys
import threading
from pathlib import Path
from typing import Optional

from loguru import logger

from app.models.schemas import NotificationType, WatcherNotification
from app.utils.config import get_settings
from domains.file_sorting.errors import FolderSorterError, InvalidWatchTarget
from domains.file_sorting.rules import RuleCatalog, load_catalog
from domains.file_sorting.watchers import FolderWatcher


class ClassifyingSink:
    """Sink that classifies each new file and prints the result."""

    def __init__(self, catalog: RuleCatalog, base: Path, interrupted: threading.Event) -> None:
        self.catalog = catalog
        self.base = base
        self.interrupted = interrupted
        self.was_interrupted = False

    def __call__(self, notification: WatcherNotification) -> None:
        if notification.event_type is NotificationType.WATCH_INTERRUPTED:
            logger.error(f"Watch interrupted: {notification.detail}")
            self.was_interrupted = True
            self.interrupted.set()
            return

        result = self.catalog.classify(notification.path, self.base)
        if result.rule is None:
            print(f"{notification.path}\t(no rule)", flush=True)
        else:
            print(f"{notification.path}\t{result.rule.id}\t{result.destination}", flush=True)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse CLI arguments."""

    settings = get_settings()

    parser = argparse.ArgumentParser(
        description="Watch a folder and classify new files by extension.",
    )
    parser.add_argument(
        "directory",
        type=Path,
        nargs="?",
        default=settings.watch_dir,
        help="Directory to watch (default: WATCH_DIR from the environment).",
    )
    parser.add_argument(
        "--rules",
        type=Path,
        default=settings.rules_file,
        help="YAML rules file (default: bundled rules).",
    )
    parser.add_argument(
        "--base",
        type=Path,
        default=settings.get_destination_root(),
        help="Directory that rule target folders are relative to (default: home).",
    )
    parser.add_argument(
        "--poll",
        type=float,
        default=1.0,
        help="How often the main loop checks for shutdown (seconds).",
    )
    parser.add_argument(
        "--log-level",
        default=settings.log_level,
        help="Log level for stderr output.",
    )

    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    """Entry point for the CLI script."""

    args = parse_args(argv)

    logger.remove()
    logger.add(
        sys.stderr,
        format="{time:YYYY-MM-DD HH:mm:ss} [{level}] {message}",
        level=args.log_level.upper(),
    )

    if args.directory is None:
        logger.error("No directory to watch.")
        return 1

    try:
        catalog = load_catalog(args.rules)
    except FolderSorterError as e:
        logger.error(str(e))
        return 1

    stop_event = threading.Event()
    sink = ClassifyingSink(catalog, args.base.expanduser(), stop_event)
    watcher = FolderWatcher(
        sink=sink,
        health_check_interval=get_settings().health_check_interval,
    )

    try:
        watcher.start(args.directory)
    except InvalidWatchTarget as e:
        logger.error(str(e))
        return 1

    def _signal_handler(signum, frame):  # noqa: D401
        logger.info(f"Received signal {signum}, shutting down.")
        stop_event.set()

    signal.signal(signal.SIGINT, _signal_handler)
    signal.signal(signal.SIGTERM, _signal_handler)

    try:
        while not stop_event.is_set():
            stop_event.wait(args.poll)
    finally:
        watcher.close()

    logger.info("Folder watcher stopped.")
    return 2 if sink.was_interrupted else 0


if __name__ == "__main__":  # pragma: no cover - CLI bridge
    sys.exit(main())
